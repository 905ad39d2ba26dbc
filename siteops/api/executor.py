"""Request executor: one authenticated JSON request in, one classified outcome out."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from siteops.api.codec import decode_json, encode_json
from siteops.api.outcome import ApiError, EmptySuccess, HttpError, ResponseOutcome, Success, TransportFailure
from siteops.errors import SerializationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60
METHODS = ("GET", "POST", "PUT", "DELETE")
ERROR_CODE_FIELD = "code"


@dataclass(frozen=True)
class RequestSpec:
    """A fully-built request, constructed once per call."""

    endpoint: str
    method: str = "GET"
    headers: dict = field(default_factory=dict)
    body: object = None


def classify_response(status, body, endpoint) -> ResponseOutcome:
    """Classify an HTTP status and decoded body.

    Order matters: an HTTP-level error wins over anything in the body.
    """
    if not str(status).startswith("2"):
        logger.error(f"API error: HTTP {status} from {endpoint}")
        return HttpError(status, body)
    if isinstance(body, Mapping) and ERROR_CODE_FIELD in body:
        code = body[ERROR_CODE_FIELD]
        message = body.get("message", "")
        logger.error(f"API error ({code}) from {endpoint}: {message}")
        return ApiError(str(code), str(message))
    if body is None or body == "" or body == b"":
        return EmptySuccess()
    return Success(body)


class RequestExecutor:
    """Sends authenticated JSON requests against the central REST API.

    Never retries: GETs are safe to repeat, but repeating them is the
    poller's job, and mutating calls are never repeated at all.
    """

    def __init__(self, base_url, username, password, timeout=DEFAULT_TIMEOUT, client=None, dry_run=False):
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout
        self.dry_run = dry_run
        self._auth = httpx.BasicAuth(username, password)
        self._client = client or httpx.Client(timeout=timeout)

    def build_request(self, endpoint, method="GET", body=None) -> RequestSpec:
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        return RequestSpec(endpoint=endpoint, method=method, headers=headers, body=body)

    def execute(self, endpoint, method="GET", body=None) -> ResponseOutcome:
        """Send one request and classify the reply.

        Args:
            endpoint: path relative to the base URL, e.g. ``wpcom/v1/sites/123``.
            method: one of GET, POST, PUT, DELETE.
            body: optional JSON-serializable request body.

        Returns:
            A ``ResponseOutcome`` variant. Transport problems come back as
            ``TransportFailure``; nothing is raised except ``SerializationError``
            for an unserializable *body*.
        """
        spec = self.build_request(endpoint, method, body)
        url = f"{self.base_url}{spec.endpoint}"
        content = encode_json(spec.body) if spec.body is not None else None

        if self.dry_run and spec.method != "GET":
            logger.info(f"[dry-run] {spec.method} {url}")
            if content is not None:
                logger.info(f"[dry-run] payload: {content}")
            return EmptySuccess()

        logger.debug(f"{spec.method} {url}")
        try:
            response = self._client.request(
                spec.method, url, headers=spec.headers, content=content, auth=self._auth, timeout=self.timeout
            )
        except httpx.TransportError as e:
            logger.error(f"Could not reach {url}: {e}")
            return TransportFailure(spec.endpoint, str(e) or type(e).__name__)

        return classify_response(response.status_code, self._decode(response), spec.endpoint)

    def _decode(self, response):
        text = response.text
        if text == "":
            return None
        try:
            return decode_json(text)
        except SerializationError:
            return text

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

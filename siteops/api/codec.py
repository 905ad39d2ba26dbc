"""JSON encode/decode with logged, structured failures."""

import json
import logging

from siteops.errors import SerializationError

logger = logging.getLogger(__name__)


def encode_json(data) -> str:
    """Serialize *data* to a JSON string.

    Raises:
        SerializationError: if *data* is not JSON-serializable.
    """
    try:
        return json.dumps(data)
    except (TypeError, ValueError) as e:
        logger.error(f"JSON encoding error: {e}")
        logger.error(f"Original data:\n{data!r}")
        raise SerializationError(f"Could not encode request body: {e}") from e


def decode_json(text: str):
    """Parse a JSON document.

    Raises:
        SerializationError: if *text* is not valid JSON.
    """
    try:
        return json.loads(text)
    except ValueError as e:
        logger.error(f"JSON decoding error: {e}")
        logger.error(f"Original JSON:\n{text}")
        raise SerializationError(f"Could not decode response body: {e}") from e

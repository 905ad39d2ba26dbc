"""REST plumbing: request execution, outcome classification, batch partitioning."""

from siteops.api.batch import BatchResult, partition, partition_outcome
from siteops.api.codec import decode_json, encode_json
from siteops.api.executor import RequestExecutor, RequestSpec, classify_response
from siteops.api.outcome import (
    ApiError,
    EmptySuccess,
    HttpError,
    ResponseOutcome,
    Success,
    TransportFailure,
    is_success,
    payload_of,
)

__all__ = [
    "ApiError",
    "BatchResult",
    "EmptySuccess",
    "HttpError",
    "RequestExecutor",
    "RequestSpec",
    "ResponseOutcome",
    "Success",
    "TransportFailure",
    "classify_response",
    "decode_json",
    "encode_json",
    "is_success",
    "partition",
    "partition_outcome",
    "payload_of",
]

from .brotli import BrotliCompression
from .request_log import RequestLogMiddleware
from .token_gate import (
    AUTH_HEADER,
    TokenGateMiddleware,
    get_token_from_request,
    token_is_valid,
    unauthorized_response,
)

__all__ = [
    "AUTH_HEADER",
    "BrotliCompression",
    "RequestLogMiddleware",
    "TokenGateMiddleware",
    "get_token_from_request",
    "token_is_valid",
    "unauthorized_response",
]

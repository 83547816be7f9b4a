from typing import Iterable, Optional, Tuple
import logging

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
DEFAULT_TOKEN_LENGTH = 6

# (method, path) pairs reachable without a token.
PUBLIC_ROUTES: Tuple[Tuple[str, str], ...] = (
    ("GET", "/"),
    ("HEAD", "/"),
    ("GET", "/health"),
)


def token_is_valid(token: Optional[str], token_length: int = DEFAULT_TOKEN_LENGTH) -> bool:
    """Shape check only: any string of exactly `token_length` characters passes."""
    return token is not None and len(token) == token_length


def unauthorized_response() -> Response:
    return PlainTextResponse("Unknown user", status_code=401)


def get_token_from_request(request: Request) -> str:
    """Return the caller's token.

    The gate middleware has already rejected malformed tokens; this raises
    HTTPException(401) when the app runs without it.
    """
    token = request.headers.get(AUTH_HEADER)
    length = getattr(request.app.state, 'token_length', DEFAULT_TOKEN_LENGTH)
    if not token_is_valid(token, length):
        raise HTTPException(status_code=401, detail="Unknown user")
    return token  # type: ignore[return-value]


class TokenGateMiddleware(BaseHTTPMiddleware):
    """Reject requests to protected routes whose token has the wrong shape.

    Rejected requests never reach a route handler, so no storage is touched.
    """

    def __init__(self, app, token_length: int = DEFAULT_TOKEN_LENGTH,
                 public_routes: Iterable[Tuple[str, str]] = PUBLIC_ROUTES):
        super().__init__(app)
        self.token_length = token_length
        self.public_routes = frozenset((m.upper(), p) for m, p in public_routes)

    async def dispatch(self, request: Request, call_next):
        if (request.method.upper(), request.url.path) in self.public_routes:
            return await call_next(request)

        token = request.headers.get(AUTH_HEADER)
        if not token_is_valid(token, self.token_length):
            logger.info("Rejected %s %s: invalid token", request.method, request.url.path)
            return unauthorized_response()
        return await call_next(request)

import brotli
from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

#############################################
## Brotli compression middleware
## Compresses text/JSON response bodies when client supports 'br'.
#############################################
COMPRESSIBLE_TYPES = ('text/', 'application/json')


class BrotliCompression(BaseHTTPMiddleware):
    def __init__(self, app, minimum_size: int = 300, quality: int = 4):
        super().__init__(app)
        self.minimum_size = minimum_size
        self.quality = quality

    async def dispatch(self, request: Request, call_next):
        accept_encoding = request.headers.get('accept-encoding', '')
        if 'br' not in accept_encoding.lower():
            return await call_next(request)

        response = await call_next(request)

        content_type = response.headers.get('content-type', '')
        if response.headers.get('content-encoding') or not content_type.startswith(COMPRESSIBLE_TYPES):
            return response

        # call_next hands back a streaming response; collect the body first.
        body = b''.join([chunk async for chunk in response.body_iterator])
        # Raw header list keeps repeated fields such as set-cookie.
        headers = MutableHeaders(raw=[(k, v) for k, v in response.raw_headers if k != b"content-length"])

        if len(body) >= self.minimum_size:
            try:
                comp = brotli.compress(body, quality=self.quality)
            except Exception:
                comp = None
            if comp is not None:
                headers['content-encoding'] = 'br'
                headers['vary'] = 'Accept-Encoding'
                body = comp

        return Response(content=body, status_code=response.status_code, headers=headers)

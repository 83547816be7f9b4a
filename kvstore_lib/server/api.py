from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from kvstore_lib.services.resolver import resolve_service
from .health import get_health

router = APIRouter()

LANDING_TEXT = "Bobby's KV Store"


@router.api_route('/', methods=['GET', 'HEAD'], response_class=PlainTextResponse)
async def landing_page():
    return LANDING_TEXT


@router.get('/health')
def api_health(request: Request):
    gateway = resolve_service(request, 'storage_gateway')
    return get_health(gateway, backend=gateway.engine.name)

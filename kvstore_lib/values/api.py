from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect
import logging

from kvstore_lib.errors import BodyReadFailure
from kvstore_lib.middleware import get_token_from_request
from kvstore_lib.services.resolver import resolve_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get('/{bucket}/{key}')
def get_value(request: Request, bucket: str, key: str):
    token = get_token_from_request(request)
    store = resolve_service(request, 'value_store')
    value = store.get_value(token, bucket, key)
    return Response(content=value, media_type='application/octet-stream')


@router.post('/{bucket}/{key}')
async def set_value(request: Request, bucket: str, key: str):
    token = get_token_from_request(request)
    store = resolve_service(request, 'value_store')
    try:
        value = await request.body()
    except ClientDisconnect as e:
        raise BodyReadFailure(f"error reading body to set {bucket}/{key}: {e!r}") from e
    # Storage calls block; keep them off the event loop.
    await run_in_threadpool(store.set_value, token, bucket, key, value)
    return Response(status_code=200)


@router.get('/{bucket}', response_class=PlainTextResponse)
def list_values(request: Request, bucket: str):
    token = get_token_from_request(request)
    store = resolve_service(request, 'value_store')
    return ''.join(f'{key}\n' for key, _ in store.list_values(token, bucket))

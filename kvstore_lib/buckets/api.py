from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
import logging

from kvstore_lib.middleware import get_token_from_request
from kvstore_lib.services.resolver import resolve_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post('/', response_class=PlainTextResponse)
def create_bucket(request: Request):
    token = get_token_from_request(request)
    manager = resolve_service(request, 'bucket_manager')
    return manager.create_bucket(token)


@router.get('/buckets', response_class=PlainTextResponse)
def list_buckets(request: Request):
    token = get_token_from_request(request)
    store = resolve_service(request, 'value_store')
    return ''.join(f'{bucket}\n' for bucket in store.list_buckets(token))

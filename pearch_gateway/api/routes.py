from typing import Any, Dict
from fastapi import APIRouter, HTTPException
from pearch_gateway.api.schemas import SearchRequest, WaitRequest, BatchRequest, BatchResponse
from pearch_gateway.errors import (
    PearchError,
    SearchValidationError,
    CredentialError,
    TaskTimeoutError,
)
from pearch_gateway.services.batch import BatchRunner
from pearch_gateway.services.credentials import credential_provider
from pearch_gateway.services.poller import TaskPoller
from pearch_gateway.services.transport import transport
from pearch_gateway.utils.logger import logger

router = APIRouter(prefix="/search")


def _status_code(error: PearchError) -> int:
    if isinstance(error, SearchValidationError):
        return 422
    if isinstance(error, CredentialError):
        return 500
    if isinstance(error, TaskTimeoutError):
        return 504
    return 502


def _to_http(error: PearchError) -> HTTPException:
    return HTTPException(status_code=_status_code(error), detail=error.to_dict())


@router.post("/submit", status_code=202)
async def submit_endpoint(request: SearchRequest) -> Dict[str, Any]:
    try:
        poller = TaskPoller(transport, credential_provider.resolve())
        return await poller.submit(request.to_body())
    except PearchError as e:
        logger.error("Submit endpoint error: %s", e)
        raise _to_http(e)


@router.get("/status/{task_id}")
async def status_endpoint(task_id: str) -> Dict[str, Any]:
    try:
        poller = TaskPoller(transport, credential_provider.resolve())
        return await poller.get_status(task_id)
    except PearchError as e:
        logger.error("Status endpoint error: %s", e)
        raise _to_http(e)


@router.post("/wait")
async def wait_endpoint(request: WaitRequest) -> Dict[str, Any]:
    try:
        poller = TaskPoller(transport, credential_provider.resolve())
        return await poller.submit_and_wait(request.search, request.poll)
    except PearchError as e:
        logger.error("Wait endpoint error: %s", e)
        raise _to_http(e)


@router.post("/batch", response_model=BatchResponse)
async def batch_endpoint(request: BatchRequest) -> BatchResponse:
    runner = BatchRunner(transport, credential_provider)
    try:
        results = await runner.run(request.items, request.operation, request.continue_on_fail)
    except PearchError as e:
        raise _to_http(e)
    return BatchResponse(results=results)

"""
Data Endpoints
POST /api/data/upload - Upload and ingest a CSV file
GET /api/data/results - List aggregate results with filters
GET /api/data/values/{file_name} - Last values for a file
"""

import asyncio
import logging
import os
import threading
from pathlib import PurePosixPath
from typing import List
from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from ..config import get_settings, APISettings
from ..dependencies import get_ingestion_service, get_request_id, get_result_query_service
from ..errors import APIError, IngestionFailedError, InvalidRequestError, ResourceNotFoundError
from ..models.results import ResultFilter, ResultResponse, UploadResponse, ValueResponse
from ..services.result_service import ResultQueryService
from ...ingestion import CsvIngestionService, IngestionCancelled

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])

DISCONNECT_POLL_SECONDS = 0.5


def _base_name(file_name: str) -> str:
    """Strip any client-side directory part, POSIX or Windows style."""
    return PurePosixPath(file_name.replace("\\", "/")).name


def _upload_size(upload: UploadFile) -> int:
    stream = upload.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


async def _watch_disconnect(request: Request, cancel_event: threading.Event) -> None:
    """Set cancel_event when the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info(f"Client disconnected, cancelling ingestion ({request.url.path})")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_200_OK)
async def upload_csv(
    request: Request,
    file: UploadFile = File(None),
    service: CsvIngestionService = Depends(get_ingestion_service),
    settings: APISettings = Depends(get_settings),
    request_id: str = Depends(get_request_id),
) -> UploadResponse:
    """
    Upload a CSV file, validate it and store its rows and aggregate.

    Re-uploading a file with the same name replaces the earlier data.

    Args:
        request: Incoming request (used to detect client disconnects)
        file: Multipart CSV upload
        service: Ingestion service
        settings: API settings
        request_id: Request ID for tracing

    Returns:
        Upload confirmation with the computed statistics
    """
    if file is None or not file.filename:
        raise InvalidRequestError("File was not provided or is empty")

    size = _upload_size(file)
    if size == 0:
        raise InvalidRequestError("File was not provided or is empty")
    if size > settings.max_upload_bytes:
        raise APIError(
            message=f"File is too large: {size} bytes (limit {settings.max_upload_bytes})",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details={"size": size, "limit": settings.max_upload_bytes},
        )

    if not file.filename.lower().endswith(".csv"):
        raise InvalidRequestError(
            "File must have a .csv extension", details={"file_name": file.filename}
        )

    file_name = _base_name(file.filename)
    logger.info(
        f"Upload received: file='{file_name}', size={size} bytes",
        extra={"request_id": request_id},
    )

    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        summary = await run_in_threadpool(service.ingest, file.file, file_name, cancel_event)
    except IngestionCancelled as e:
        raise IngestionFailedError(
            f"Upload of '{file_name}' was cancelled before it was stored",
            details={"line": e.line_number},
        ) from e
    finally:
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.warning(f"Disconnect watcher for '{file_name}' failed", exc_info=True)
        await file.close()

    return UploadResponse(
        message=f"File '{file_name}' processed and saved",
        result=summary,
    )


@router.get("/results", response_model=List[ResultResponse], status_code=status.HTTP_200_OK)
def list_results(
    filters: ResultFilter = Depends(),
    query_service: ResultQueryService = Depends(get_result_query_service),
) -> List[ResultResponse]:
    """
    List aggregate results, newest first.

    Filters: file name substring, min_date range, avg_value range,
    avg_execution_time range (all inclusive).
    """
    results = query_service.list_results(filters)
    return [ResultResponse.model_validate(result) for result in results]


@router.get(
    "/values/{file_name}", response_model=List[ValueResponse], status_code=status.HTTP_200_OK
)
def last_values(
    file_name: str,
    query_service: ResultQueryService = Depends(get_result_query_service),
) -> List[ValueResponse]:
    """
    Get the last 10 values for a file, ordered by timestamp descending.

    Raises:
        ResourceNotFoundError: If no values are stored for the file
    """
    values = query_service.last_values(file_name)
    if not values:
        raise ResourceNotFoundError("File", file_name)
    return [ValueResponse.model_validate(value) for value in values]

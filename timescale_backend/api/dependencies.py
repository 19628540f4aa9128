"""
Dependency Injection
FastAPI dependencies for database sessions and services.
"""

import logging
import uuid
from typing import Generator, Optional
from fastapi import Depends, Header, Request

from sqlalchemy.orm import Session, sessionmaker

from ..db.session import get_session_factory
from ..ingestion import CsvIngestionService
from .services.result_service import ResultQueryService

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_session_factory() -> sessionmaker:
    """Session factory for services that manage their own transaction."""
    return get_session_factory()


def get_ingestion_service(
    session_factory: sessionmaker = Depends(get_db_session_factory),
) -> CsvIngestionService:
    """
    Get CSV ingestion service.

    The service opens its own session so the whole upload is one transaction.
    """
    return CsvIngestionService(session_factory=session_factory)


def get_result_query_service(db: Session = Depends(get_db)) -> ResultQueryService:
    """Get read-only query service for results and values."""
    return ResultQueryService(db)


def get_request_id(request: Request, x_request_id: Optional[str] = Header(None)) -> str:
    """
    Get the request ID for tracing.

    Prefers the ID assigned by RequestLoggingMiddleware so handler logs and
    access logs agree.
    """
    request_id = getattr(request.state, "request_id", None) or x_request_id
    if request_id:
        return request_id

    return uuid.uuid4().hex

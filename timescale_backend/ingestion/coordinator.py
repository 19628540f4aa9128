"""
CSV Ingestion Coordinator
Replaces, parses, validates, aggregates and persists one file as a single transaction.
"""

import logging
import time
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..config.settings import IngestionSettings, get_ingestion_settings
from ..models.timeseries import IngestionStage, IngestionSummary
from .aggregator import compute_aggregate
from .csv_parser import CancellationToken, TimeSeriesCsvParser
from .errors import IngestionCancelled, IngestionError, ParseError, StorageError, ValidationError
from .locks import FileNameLockRegistry
from .store import ResultStore
from .validator import RowValidator

logger = logging.getLogger(__name__)

# Shared by every service instance in the process
_default_locks = FileNameLockRegistry()


class CsvIngestionService:
    """
    Main CSV ingestion pipeline.

    Each ingest() call runs START -> REPLACED -> VALIDATED -> AGGREGATED ->
    COMMITTED inside one database transaction. Any failure rolls the whole
    transaction back, so a failed re-upload leaves the previous result and
    values for that file name untouched.
    """

    def __init__(
        self,
        session_factory: Union[sessionmaker, Callable[[], Session]],
        parser: Optional[TimeSeriesCsvParser] = None,
        validator: Optional[RowValidator] = None,
        settings: Optional[IngestionSettings] = None,
        locks: Optional[FileNameLockRegistry] = None,
    ):
        """
        Initialize the ingestion service.

        Args:
            session_factory: Creates a fresh Session per ingestion
            parser: CSV parser (default: TimeSeriesCsvParser)
            validator: Row validator (default: built from settings)
            settings: Ingestion limits
            locks: Per-file-name lock registry (default: process-wide registry)
        """
        self.session_factory = session_factory
        self.settings = settings if settings is not None else get_ingestion_settings()
        self.parser = parser if parser is not None else TimeSeriesCsvParser()
        self.validator = (
            validator if validator is not None else RowValidator.from_settings(self.settings)
        )
        self.locks = locks if locks is not None else _default_locks

    def ingest(
        self,
        stream: Union[bytes, BinaryIO],
        file_name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> IngestionSummary:
        """
        Ingest a CSV file, replacing any earlier upload with the same name.

        Args:
            stream: Readable binary stream or raw bytes
            file_name: Key under which the result is stored
            cancellation: Optional token checked between parsed lines

        Returns:
            Summary of the committed result

        Raises:
            ParseError: Malformed line
            ValidationError: Row count or row value out of range
            IngestionCancelled: Cancellation token was set while parsing
            StorageError: Persistence failure
        """
        start_time = time.time()
        stage = IngestionStage.START
        logger.info(f"Starting ingestion for {file_name}")

        with self.locks.hold(file_name):
            session = self.session_factory()
            store = ResultStore(session, batch_size=self.settings.insert_batch_size)
            try:
                store.lock_file_name(file_name)

                replaced_existing = False
                existing = store.find_by_file_name(file_name)
                if existing is not None:
                    deleted_values = store.delete_cascade(existing)
                    replaced_existing = True
                    logger.info(
                        f"{file_name}: removing previous result {existing.id} "
                        f"with {deleted_values} values"
                    )
                stage = IngestionStage.REPLACED

                rows = self.parser.parse(stream, file_name, cancellation)
                self.validator.validate(rows)
                stage = IngestionStage.VALIDATED

                stats = compute_aggregate(rows, file_name)
                stage = IngestionStage.AGGREGATED

                result = store.insert_aggregate(stats)
                store.insert_rows(rows, result.id)
                summary = IngestionSummary(
                    result_id=result.id,
                    file_name=file_name,
                    row_count=len(rows),
                    replaced_existing=replaced_existing,
                    created_at=result.created_at,
                    stats=stats,
                )

                store.commit()
                stage = IngestionStage.COMMITTED

            except (ParseError, ValidationError, IngestionCancelled) as e:
                store.rollback()
                logger.warning(
                    f"Ingestion of {file_name} rejected ({stage.value} -> {IngestionStage.FAILED.value}): {e}"
                )
                raise

            except IngestionError:
                store.rollback()
                logger.error(
                    f"Ingestion of {file_name} failed ({stage.value} -> {IngestionStage.FAILED.value})",
                    exc_info=True,
                )
                raise

            except SQLAlchemyError as e:
                store.rollback()
                logger.error(
                    f"Database error while ingesting {file_name} at stage {stage.value}: {e}",
                    exc_info=True,
                )
                raise StorageError(f"Failed to store results for '{file_name}'") from e

            except Exception:
                store.rollback()
                logger.error(f"Unexpected error while ingesting {file_name}", exc_info=True)
                raise

            finally:
                session.close()

        processing_time = time.time() - start_time
        logger.info(
            f"Ingestion completed for {file_name}: {summary.row_count} rows "
            f"in {processing_time:.2f} seconds (stage={stage.value})"
        )
        return summary

    def ingest_path(self, path: str, file_name: Optional[str] = None) -> IngestionSummary:
        """Ingest a file from the local filesystem."""
        csv_path = Path(path)
        with open(csv_path, "rb") as f:
            return self.ingest(f, file_name or csv_path.name)

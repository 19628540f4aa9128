"""
Integration tests for the data and health endpoints.
"""

import logging

import pytest
from sqlalchemy.exc import OperationalError

from timescale_backend.api.dependencies import get_ingestion_service
from timescale_backend.api.routers import data as data_router_module
from timescale_backend.ingestion import IngestionCancelled
from timescale_backend.ingestion.store import ResultStore

pytestmark = pytest.mark.integration


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["upload"] == "/api/data/upload"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status_checks_database(self, client):
        response = client.get("/status")

        assert response.status_code == 200
        assert response.json()["components"]["database"]["status"] == "healthy"
        assert response.json()["components"]["storage"] == {"results": 0, "values": 0}

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert "X-Response-Time" in response.headers


class TestUpload:
    def test_upload_success(self, upload, sample_csv):
        response = upload(sample_csv)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "File 'run.csv' processed and saved"
        assert body["result"]["row_count"] == 3
        assert body["result"]["replaced_existing"] is False
        assert body["result"]["stats"]["median_value"] == 200.0
        assert body["result"]["stats"]["delta_seconds"] == 2.0

    def test_reupload_replaces(self, client, upload, sample_csv, csv_bytes):
        upload(sample_csv)
        response = upload(csv_bytes("2024-02-01T00-00-00.0000Z;1;50"))

        assert response.status_code == 200
        assert response.json()["result"]["replaced_existing"] is True

        results = client.get("/api/data/results").json()
        assert len(results) == 1
        assert results[0]["avg_value"] == 50.0
        assert len(client.get("/api/data/values/run.csv").json()) == 1

    def test_client_directory_is_stripped(self, client, upload, sample_csv):
        response = upload(sample_csv, file_name="uploads/run.csv")

        assert response.status_code == 200
        assert response.json()["result"]["file_name"] == "run.csv"

    def test_uppercase_extension_is_accepted(self, upload, sample_csv):
        assert upload(sample_csv, file_name="RUN.CSV").status_code == 200

    def test_missing_file(self, client):
        response = client.post("/api/data/upload")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "File was not provided or is empty"

    def test_empty_file(self, upload):
        response = upload(b"")

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "InvalidRequestError"

    def test_wrong_extension(self, upload, sample_csv):
        response = upload(sample_csv, file_name="run.txt")

        assert response.status_code == 400
        assert "csv" in response.json()["error"]["message"]

    def test_too_large(self, upload, sample_csv, small_upload_limit):
        response = upload(sample_csv)

        assert response.status_code == 413
        assert response.json()["error"]["details"]["limit"] == 16

    def test_parse_error_is_400_with_line(self, client, upload, csv_bytes):
        response = upload(csv_bytes("2024-01-15T10-30-45.0000Z;1;1", "not-a-date;1;1"))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "ParseError"
        assert error["message"].startswith("Line 3:")
        assert error["details"]["line"] == 3
        assert error["details"]["field"] == "timestamp"
        assert client.get("/api/data/results").json() == []

    def test_validation_error_is_400_with_rule(self, upload, csv_bytes):
        response = upload(csv_bytes("2024-01-15T10-30-45.0000Z;1;-2"))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "ValidationError"
        assert error["details"]["rule"] == "value_non_negative"
        assert error["details"]["line"] == 2

    def test_header_only_is_400(self, upload, csv_bytes):
        response = upload(csv_bytes())

        assert response.status_code == 400
        assert response.json()["error"]["details"]["rule"] == "row_count"

    def test_failed_reupload_keeps_previous(self, client, upload, sample_csv, csv_bytes):
        upload(sample_csv)

        response = upload(csv_bytes("2024-01-15T10-30-45.0000Z;1"))

        assert response.status_code == 400
        assert len(client.get("/api/data/values/run.csv").json()) == 3

    def test_storage_error_is_500_without_details(self, upload, sample_csv, monkeypatch):
        def failing_insert(self, rows, result_id):
            raise OperationalError("INSERT INTO values", {}, Exception("secret connection detail"))

        monkeypatch.setattr(ResultStore, "insert_rows", failing_insert)

        response = upload(sample_csv)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["message"] == "Internal server error while processing file"
        assert "secret" not in response.text


class TestResults:
    @pytest.fixture
    def two_files(self, upload, csv_bytes):
        upload(
            csv_bytes("2024-01-15T10-30-45.0000Z;1.0;100", "2024-01-15T10-30-50.0000Z;3.0;300"),
            file_name="alpha.csv",
        )
        upload(
            csv_bytes("2024-03-01T00-00-00.0000Z;10;5", "2024-03-01T00-00-01.0000Z;20;15"),
            file_name="beta_run.csv",
        )

    def test_lists_newest_first(self, client, two_files):
        results = client.get("/api/data/results").json()

        assert [r["file_name"] for r in results] == ["beta_run.csv", "alpha.csv"]
        alpha = results[1]
        assert alpha["avg_value"] == 200.0
        assert alpha["avg_execution_time"] == 2.0
        assert alpha["delta_time"] == 5.0
        assert alpha["min_date"].startswith("2024-01-15T10:30:45")

    def test_filter_by_file_name_substring(self, client, two_files):
        results = client.get("/api/data/results", params={"file_name": "alp"}).json()

        assert [r["file_name"] for r in results] == ["alpha.csv"]

    def test_file_name_wildcards_are_literal(self, client, two_files):
        assert client.get("/api/data/results", params={"file_name": "%"}).json() == []
        assert [
            r["file_name"] for r in client.get("/api/data/results", params={"file_name": "_run"}).json()
        ] == ["beta_run.csv"]

    def test_filter_by_avg_value_range(self, client, two_files):
        results = client.get(
            "/api/data/results", params={"avg_value_from": 10, "avg_value_to": 200}
        ).json()

        assert [r["file_name"] for r in results] == ["beta_run.csv", "alpha.csv"]

        results = client.get("/api/data/results", params={"avg_value_from": 10.5}).json()
        assert [r["file_name"] for r in results] == ["alpha.csv"]

    def test_filter_by_min_date_range(self, client, two_files):
        results = client.get(
            "/api/data/results",
            params={"min_date_from": "2024-02-01T00:00:00Z", "min_date_to": "2024-03-01T00:00:00Z"},
        ).json()

        assert [r["file_name"] for r in results] == ["beta_run.csv"]

    def test_filter_by_avg_execution_time(self, client, two_files):
        results = client.get("/api/data/results", params={"avg_execution_time_to": 2.0}).json()

        assert [r["file_name"] for r in results] == ["alpha.csv"]

    def test_invalid_filter_is_422(self, client):
        response = client.get("/api/data/results", params={"avg_value_from": "lots"})

        assert response.status_code == 422


class TestValues:
    def test_last_ten_newest_first(self, client, upload, csv_bytes):
        lines = [f"2024-01-15T10-30-{second:02d}.0000Z;1;{second}" for second in range(12)]
        upload(csv_bytes(*lines))

        values = client.get("/api/data/values/run.csv").json()

        assert len(values) == 10
        assert [v["value"] for v in values] == [float(s) for s in range(11, 1, -1)]
        assert all(v["file_name"] == "run.csv" for v in values)

    def test_unknown_file_is_404(self, client):
        response = client.get("/api/data/values/missing.csv")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "File not found: missing.csv"


class TestCancelledUpload:
    def test_cancellation_is_reported_as_failed_ingestion(self, app, client, sample_csv):
        class CancellingService:
            def ingest(self, stream, file_name, cancellation=None):
                raise IngestionCancelled(2)

        app.dependency_overrides[get_ingestion_service] = lambda: CancellingService()

        response = client.post(
            "/api/data/upload", files={"file": ("run.csv", sample_csv, "text/csv")}
        )

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "IngestionFailedError"
        assert error["details"] == {"line": 2}

    def test_watcher_failure_is_logged_not_lost(self, monkeypatch, upload, sample_csv, caplog):
        async def broken_watcher(request, cancel_event):
            raise RuntimeError("receive channel closed")

        monkeypatch.setattr(data_router_module, "_watch_disconnect", broken_watcher)

        with caplog.at_level(logging.WARNING, logger=data_router_module.__name__):
            response = upload(sample_csv)

        assert response.status_code == 200
        failures = [r for r in caplog.records if "Disconnect watcher" in r.getMessage()]
        assert len(failures) == 1
        assert failures[0].exc_info[0] is RuntimeError

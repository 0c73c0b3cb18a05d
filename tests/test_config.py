"""Tests for settings, logging configuration and error mapping."""

import pytest

from neo_attachments.config.logging_config import LoggingConfig, get_log_level_from_verbosity
from neo_attachments.config.settings import AttachmentSettings
from neo_attachments.core.exceptions import (
    DatabaseError,
    GoneError,
    InvalidStateError,
    NeoAttachmentsError,
    NotFoundError,
    QuotaExceededError,
    StorageBackendError,
    ValidationError,
    create_error_response,
    get_http_status_code,
)


class TestSettings:

    def test_defaults(self):
        settings = AttachmentSettings(_env_file=None)

        assert settings.attachments_max_bytes == 52_428_800
        assert settings.presign_put_ttl_seconds == 900
        assert settings.presign_get_ttl_seconds == 60
        assert settings.storage_warning_threshold == 0.8
        assert settings.attachments_stale_pending_sweep_enabled is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ATTACHMENTS_MAX_BYTES", "1024")
        monkeypatch.setenv("S3_BUCKET", "tenant-files")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = AttachmentSettings(_env_file=None)

        assert settings.attachments_max_bytes == 1024
        assert settings.s3_bucket == "tenant-files"
        assert settings.is_production

    def test_database_url_drops_driver_suffix(self):
        settings = AttachmentSettings(_env_file=None, database_url="postgresql+asyncpg://db:5432/neo")
        assert settings.database_url == "postgresql://db:5432/neo"

    def test_elevated_roles_normalized(self):
        settings = AttachmentSettings(_env_file=None, attachments_elevated_roles=[" Owner", "ADMIN", ""])
        assert settings.attachments_elevated_roles == ["owner", "admin"]


class TestLoggingConfig:

    @pytest.mark.parametrize("verbosity,level", [
        ("quiet", "ERROR"),
        ("NORMAL", "WARNING"),
        ("verbose", "INFO"),
        ("debug", "DEBUG"),
        ("chatty", "WARNING"),
    ])
    def test_verbosity_levels(self, verbosity, level):
        assert get_log_level_from_verbosity(verbosity) == level

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_VERBOSITY", "QUIET")

        config = LoggingConfig.build_config()

        assert config["root"]["level"] == "DEBUG"

    def test_quiet_third_party_and_sql(self, monkeypatch):
        monkeypatch.delenv("ENABLE_SQL_LOGGING", raising=False)

        loggers = LoggingConfig.build_config()["loggers"]

        assert loggers["botocore"]["level"] == "ERROR"
        assert loggers["asyncpg"]["level"] == "WARNING"

    def test_sql_logging_enabled(self, monkeypatch):
        monkeypatch.setenv("ENABLE_SQL_LOGGING", "true")
        assert "asyncpg" not in LoggingConfig.build_config()["loggers"]


class TestErrorMapping:

    @pytest.mark.parametrize("error,status", [
        (ValidationError("bad"), 400),
        (InvalidStateError("not pending"), 400),
        (QuotaExceededError(10, 10, 1), 403),
        (NotFoundError("Attachment", "x"), 404),
        (GoneError(), 410),
        (DatabaseError("down"), 500),
        (StorageBackendError("down"), 502),
        (NeoAttachmentsError("other"), 500),
    ])
    def test_status_codes(self, error, status):
        assert get_http_status_code(error) == status

    def test_error_envelope(self):
        body = create_error_response(NotFoundError("Attachment", "abc"))

        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["type"] == "NotFoundError"
        assert body["error"]["details"]["identifier"] == "abc"

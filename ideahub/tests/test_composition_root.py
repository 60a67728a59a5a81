"""Integration tests for the composition root.

These tests verify that configuration loads and validates, that the
configured adapters are selected, and that bootstrap wires a working
CLI against a temporary database.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from ideahub.adapters.blob.local import LocalBlobStorageAdapter
from ideahub.adapters.blob.remote import HttpBlobStorageAdapter
from ideahub.config import Settings, load_settings
from ideahub.main import bootstrap, build_blob_storage, main


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        """Load settings with default values."""
        settings = load_settings()
        assert settings.store_sqlite_path == "./data/ideahub.db"
        assert settings.store_pool_size == 5
        assert settings.blob_backend == "local"
        assert settings.run_mode == "cli"
        assert settings.http_port == 8080
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    def test_load_settings_from_env(self) -> None:
        """Load settings from environment variables, case-insensitively."""
        with patch.dict(
            os.environ,
            {
                "STORE_SQLITE_PATH": "/tmp/other.db",
                "blob_backend": "http",
                "BLOB_CONTAINER_URL": "https://acct.blob.example.net/files/",
                "RUN_MODE": "server",
                "HTTP_PORT": "9090",
                "LOG_LEVEL": "DEBUG",
            },
        ):
            settings = load_settings()
            assert settings.store_sqlite_path == "/tmp/other.db"
            assert settings.blob_backend == "http"
            assert settings.blob_container_url == "https://acct.blob.example.net/files"
            assert settings.run_mode == "server"
            assert settings.http_port == 9090
            assert settings.log_level == "DEBUG"

    def test_load_settings_from_env_file(self) -> None:
        """An explicit .env file is honored."""
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / "test.env"
            env_file.write_text("STORE_POOL_SIZE=2\nLOG_FORMAT=json\n")

            settings = load_settings(str(env_file))

        assert settings.store_pool_size == 2
        assert settings.log_format == "json"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("STORE_POOL_SIZE", "0"),
            ("BLOB_TIMEOUT_SECONDS", "-1"),
            ("BLOB_CONTAINER_URL", "ftp://files"),
            ("HTTP_PORT", "70000"),
            ("RUN_MODE", "daemon"),
            ("BLOB_BACKEND", "s3"),
            ("LOG_FORMAT", "xml"),
        ],
    )
    def test_invalid_values_rejected(self, name: str, value: str) -> None:
        """Out-of-range and unknown values fail validation."""
        with patch.dict(os.environ, {name: value}):
            with pytest.raises(ValidationError):
                load_settings()


class TestAdapterSelection:
    """Test blob adapter selection."""

    def test_local_backend(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(blob_backend="local", blob_local_dir=str(Path(tmpdir) / "b"))
            assert isinstance(build_blob_storage(settings), LocalBlobStorageAdapter)

    @pytest.mark.asyncio
    async def test_http_backend(self) -> None:
        settings = Settings(
            blob_backend="http",
            blob_container_url="https://acct.blob.example.net/files",
            blob_sas_token="sig=abc",
        )
        blobs = build_blob_storage(settings)
        try:
            assert isinstance(blobs, HttpBlobStorageAdapter)
            assert blobs.container_url == "https://acct.blob.example.net/files"
        finally:
            await blobs.close()

    def test_http_backend_requires_url(self) -> None:
        with pytest.raises(ValueError, match="BLOB_CONTAINER_URL"):
            build_blob_storage(Settings(blob_backend="http"))


class TestBootstrap:
    """Test end-to-end wiring."""

    @pytest.mark.asyncio
    async def test_cli_mode_runs_commands(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Bootstrap in CLI mode serves commands against a fresh database."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(
                store_sqlite_path=str(Path(tmpdir) / "ideahub.db"),
                blob_local_dir=str(Path(tmpdir) / "blobs"),
                run_mode="cli",
            )
            with patch("builtins.input", side_effect=["health {}", "exit"]):
                await bootstrap(settings)

            assert (Path(tmpdir) / "ideahub.db").exists()

        assert '"operation": "health"' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_http_backend_without_url_exits(self) -> None:
        """A misconfigured blob backend stops bootstrap with exit code 1."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(
                store_sqlite_path=str(Path(tmpdir) / "ideahub.db"),
                blob_backend="http",
            )
            with pytest.raises(SystemExit) as exc_info:
                await bootstrap(settings)

        assert exc_info.value.code == 1


class TestMain:
    """Test process exit codes."""

    def test_keyboard_interrupt_exits_130(self) -> None:
        async def interrupted() -> None:
            raise KeyboardInterrupt

        with patch("ideahub.main.bootstrap", interrupted):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 130

    def test_fatal_error_exits_1(self) -> None:
        async def broken() -> None:
            raise RuntimeError("boom")

        with patch("ideahub.main.bootstrap", broken):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1

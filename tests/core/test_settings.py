"""
Tests for settings
"""

import pydantic
import pytest

from geostream.core.settings import Settings, get_settings


class TestSettings:
    """Test settings loading from the environment"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GEOSTREAM_QUERY_CONTEXT__CHUNK_BYTE_SIZE", raising=False)
        monkeypatch.delenv("GEOSTREAM_LOGGING__LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.query_context.chunk_byte_size == 1_048_576
        assert settings.logging.log_level == "INFO"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("GEOSTREAM_QUERY_CONTEXT__CHUNK_BYTE_SIZE", "4096")
        monkeypatch.setenv("GEOSTREAM_LOGGING__LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.query_context.chunk_byte_size == 4096
        assert settings.logging.log_level == "DEBUG"

    def test_non_positive_chunk_size_rejected(self, monkeypatch):
        monkeypatch.setenv("GEOSTREAM_QUERY_CONTEXT__CHUNK_BYTE_SIZE", "0")
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

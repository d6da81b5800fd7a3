"""
Bookshelf Backend: Settings Unit Tests
=======================================

What:  Tests for validation and derived values in bookshelf.config.Settings.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from bookshelf.config import Settings


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql+asyncpg://user:pw@localhost:5432/bookshelf",
            "sqlite+aiosqlite:///./bookshelf.db",
        ],
    )
    def test_async_drivers_accepted(self, url):
        assert Settings(database_url=url).database_url == url

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql://user:pw@localhost:5432/bookshelf",
            "sqlite:///./bookshelf.db",
            "mysql+pymysql://user:pw@localhost/bookshelf",
        ],
    )
    def test_sync_drivers_rejected(self, url):
        with pytest.raises(PydanticValidationError, match="async driver"):
            Settings(database_url=url)


class TestLogLevel:

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError, match="Invalid log_level"):
            Settings(log_level="chatty")


def test_cors_origins_list():
    s = Settings(cors_origins="http://localhost:3000, https://books.example.com,")
    assert s.cors_origins_list == ["http://localhost:3000", "https://books.example.com"]


def test_access_log_skip_paths_list():
    assert Settings().access_log_skip_paths_list == ["/health"]
    s = Settings(access_log_skip_paths="/health, /metrics")
    assert s.access_log_skip_paths_list == ["/health", "/metrics"]
    assert Settings(access_log_skip_paths="").access_log_skip_paths_list == []

"""Tests for configuration, result types, cache and exceptions."""

import logging
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from quotekit.core.cache import Cache
from quotekit.core.config import Settings, clear_settings_cache, get_settings
from quotekit.core.exceptions import MalformedCatalogError, QuotaExceededError
from quotekit.core.logging_utils import get_logger
from quotekit.core.result_types import Err, Ok


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, settings: Settings) -> None:
        """Email and extraction are off by default."""
        assert settings.is_development
        assert not settings.is_production
        assert not settings.email_enabled
        assert settings.catalog_dir.is_dir()

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Variables use the QUOTEKIT_ prefix."""
        monkeypatch.setenv("QUOTEKIT_API_PORT", "9001")
        monkeypatch.setenv("QUOTEKIT_SMTP_HOST", "smtp.example.com")

        settings = Settings()

        assert settings.api_port == 9001
        assert settings.email_enabled

    def test_public_base_url_trailing_slash(self) -> None:
        """Trailing slashes are stripped."""
        assert Settings(public_base_url="https://q.test/").public_base_url == "https://q.test"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"api_cors_origins": ["localhost:3000"]},
            {"public_base_url": "q.test"},
            {"api_env": "qa"},
            {"smtp_password": "secret"},
        ],
    )
    def test_invalid_settings(self, kwargs: dict) -> None:
        """Misconfiguration fails at start-up."""
        with pytest.raises(ValidationError):
            Settings(**kwargs)

    def test_settings_cached(self) -> None:
        """get_settings returns one instance until the cache is cleared."""
        clear_settings_cache()
        first = get_settings()

        assert get_settings() is first
        clear_settings_cache()
        assert get_settings() is not first
        clear_settings_cache()


class TestResultTypes:
    """Ok/Err wrappers."""

    def test_ok(self) -> None:
        """Ok exposes its value."""
        result = Ok(42)

        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 42
        assert result.err_value is None
        with pytest.raises(ValueError):
            result.unwrap_err()

    def test_err(self) -> None:
        """Err exposes its error and refuses to unwrap."""
        result = Err("boom")

        assert result.is_err()
        assert result.err_value == "boom"
        assert result.unwrap_err() == "boom"
        with pytest.raises(ValueError, match="boom"):
            result.unwrap()


class TestCache:
    """In-process TTL cache."""

    async def test_set_get_delete(self) -> None:
        """Values can be stored, read and removed."""
        cache = Cache()
        await cache.set("key", "value", ttl_seconds=60)

        assert await cache.get("key") == "value"
        assert await cache.delete("key")
        assert await cache.get("key") is None
        assert not await cache.delete("key")

    async def test_expired_entries_dropped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Entries past their deadline are gone."""
        clock = iter([100.0, 200.0])
        monkeypatch.setattr(
            "quotekit.core.cache.time", SimpleNamespace(monotonic=lambda: next(clock))
        )
        cache = Cache()
        await cache.set("key", "value", ttl_seconds=10)

        assert await cache.get("key") is None

    async def test_set_sweeps_expired_entries(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Abandoned keys are evicted without being read again."""
        clock = iter([100.0, 100.0, 100.0, 200.0])
        monkeypatch.setattr(
            "quotekit.core.cache.time", SimpleNamespace(monotonic=lambda: next(clock))
        )
        cache = Cache()
        await cache.set("abandoned", "value", ttl_seconds=10)
        await cache.set("other", "value", ttl_seconds=10)
        await cache.set("pinned", "value", ttl_seconds=0)

        await cache.set("fresh", "value", ttl_seconds=10)

        assert set(cache._store.entries) == {"pinned", "fresh"}

    async def test_zero_ttl_never_expires(self) -> None:
        """A ttl of 0 keeps the entry."""
        cache = Cache()
        await cache.set("key", "value", ttl_seconds=0)

        assert await cache.get("key") == "value"
        await cache.clear()
        assert await cache.get("key") is None


class TestExceptions:
    """Error bodies."""

    def test_malformed_catalog_lists_violations(self) -> None:
        """Every violation is kept."""
        error = MalformedCatalogError("x", ["a", "b"])

        assert error.details == ["a", "b"]
        assert "2 violation(s)" in error.message
        assert error.to_dict()["error"] == "malformed_catalog"

    def test_quota_body(self) -> None:
        """Details are omitted when empty."""
        assert QuotaExceededError("limit").to_dict() == {
            "error": "quota_exceeded",
            "message": "limit",
        }


def test_get_logger_namespaced() -> None:
    """Loggers are standard library loggers."""
    logger = get_logger("quotekit.test")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "quotekit.test"

"""Tests for settings parsing."""
import pytest
from pydantic import ValidationError

from core.config import DEFAULT_OPENAI_MODEL, Settings


def _settings(**values: object) -> Settings:
    values.setdefault("database_url", "postgresql+asyncpg://u:p@localhost/db")
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize(
    ("given", "expected"),
    [
        ("postgres://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+psycopg2://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
    ],
)
def test__database_url__uses_async_driver(given: str, expected: str) -> None:
    assert _settings(database_url=given).database_url == expected


def test__database_url__required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test__defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENAI_MODEL", "OPENAI_EXTRA_HEADERS", "CORS_ORIGINS", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = _settings()

    assert settings.openai_model == DEFAULT_OPENAI_MODEL
    assert settings.openai_extra_headers == {}
    assert settings.cors_origins == ["*"]
    assert settings.port == 3000
    assert settings.log_level == "INFO"


def test__reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://env:pw@db/linkman")
    monkeypatch.setenv("OPENAI_URL", "http://gateway.local/v1")
    monkeypatch.setenv("OPENAI_MODEL", "small-model")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql+asyncpg://env:pw@db/linkman"
    assert settings.openai_url == "http://gateway.local/v1"
    assert settings.openai_model == "small-model"
    assert settings.port == 8080


class TestOpenaiExtraHeaders:
    """Tests for OPENAI_EXTRA_HEADERS parsing."""

    def test__pairs(self) -> None:
        settings = _settings(openai_extra_headers_str="X-Api-Key: abc , X-Team:search")
        assert settings.openai_extra_headers == {"X-Api-Key": "abc", "X-Team": "search"}

    def test__value_may_contain_colon(self) -> None:
        settings = _settings(openai_extra_headers_str="Authorization: Basic a:b")
        assert settings.openai_extra_headers == {"Authorization": "Basic a:b"}

    def test__malformed_pairs_skipped(self) -> None:
        settings = _settings(openai_extra_headers_str="novalue, :empty-name, X-Ok: 1,")
        assert settings.openai_extra_headers == {"X-Ok": "1"}


def test__cors_origins_list() -> None:
    settings = _settings(cors_origins_str="https://a.example, https://b.example,")
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    ("given", "expected"),
    [
        ("info", "INFO"),
        ("Debug", "DEBUG"),
        ("WARN", "WARNING"),
        ("warning", "WARNING"),
        ("fatal", "CRITICAL"),
        (" error ", "ERROR"),
    ],
)
def test__log_level__normalized(given: str, expected: str) -> None:
    assert _settings(log_level=given).log_level == expected


@pytest.mark.parametrize("given", ["verbose", "NOTSET", "10", ""])
def test__log_level__invalid(given: str) -> None:
    with pytest.raises(ValidationError):
        _settings(log_level=given)

"""Settings parsing tests."""

import re

from app.config import DEFAULT_CORS_ORIGIN_REGEX, Settings


def test_cors_origins_accept_comma_and_json_lists() -> None:
    settings = Settings(cors_origins="https://a.example, https://b.example/")
    assert settings.cors_origin_list == ["https://a.example", "https://b.example"]

    settings = Settings(cors_origins='["https://a.example", "https://a.example"]')
    assert settings.cors_origin_list == ["https://a.example"]

    assert Settings(cors_origins="").cors_origin_list == []


def test_default_origin_regex_allows_localhost_and_vercel() -> None:
    pattern = re.compile(DEFAULT_CORS_ORIGIN_REGEX)
    assert pattern.match("http://localhost:5173")
    assert pattern.match("https://chat-app-git-main.vercel.app")
    assert not pattern.match("https://evil.example.com")


def test_blank_origin_regex_disables_pattern() -> None:
    assert Settings(cors_origin_regex="  ").cors_origin_regex is None


def test_typing_timeout_is_exposed_in_seconds() -> None:
    assert Settings(typing_timeout_ms=3000).typing_timeout_seconds == 3.0
    assert Settings(typing_timeout_ms=-5).typing_timeout_seconds == 0.0


def test_log_level_is_normalised() -> None:
    assert Settings(log_level=" debug ").log_level == "DEBUG"

from pathlib import Path

import pytest

from config import Settings
from errors import ConfigError


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})

    assert settings.target_url is None
    assert settings.pages_to_crawl == ["/"]
    assert settings.max_attempts == 3
    assert settings.llm_temperature == 0.3
    assert settings.llm_retry_temperature == 0.2
    assert settings.dom_depth_cap == 5
    assert settings.output_dir == Path("output")
    assert not settings.has_credentials


def test_values_are_parsed_from_strings():
    settings = Settings.from_env({
        "TARGET_URL": "https://app.example.com/",
        "PAGES_TO_CRAWL": "/home, /projects ,,/tasks",
        "MASK_SELECTORS": ".avatar",
        "MAX_ATTEMPTS": "5",
        "HEADLESS": "false",
        "ATTACH_SCREENSHOTS": "0",
        "LLM_TEMPERATURE": "0.5",
        "APP_DIR": "out/app",
        "LOGIN_EMAIL": "me@example.com",
        "LOGIN_PASSWORD": "secret",
    })

    assert settings.target_url == "https://app.example.com"
    assert settings.pages_to_crawl == ["/home", "/projects", "/tasks"]
    assert settings.mask_selectors == [".avatar"]
    assert settings.max_attempts == 5
    assert settings.headless is False
    assert settings.attach_screenshots is False
    assert settings.llm_temperature == 0.5
    assert settings.app_dir == Path("out/app")
    assert settings.has_credentials


def test_blank_values_count_as_unset():
    settings = Settings.from_env({"MAX_ATTEMPTS": "  ", "LLM_MODEL": ""})
    assert settings.max_attempts == 3
    assert settings.llm_model == "gpt-4o"


@pytest.mark.parametrize(
    "key, value",
    [
        ("MAX_ATTEMPTS", "0"),
        ("MAX_ATTEMPTS", "three"),
        ("DOM_DEPTH_CAP", "-1"),
        ("LLM_TIMEOUT", "soon"),
        ("HEADLESS", "maybe"),
    ],
)
def test_invalid_values_raise_config_error(key, value):
    with pytest.raises(ConfigError, match=key):
        Settings.from_env({key: value})


def test_run_requires_target_and_key():
    with pytest.raises(ConfigError) as exc_info:
        Settings.from_env({}).require_for("run")
    assert "TARGET_URL, OPENAI_API_KEY" in str(exc_info.value)


def test_regenerate_requires_only_key():
    settings = Settings.from_env({"OPENAI_API_KEY": "sk-test"})
    settings.require_for("regenerate")
    with pytest.raises(ConfigError, match="TARGET_URL"):
        settings.require_for("run")


def test_validate_and_history_need_nothing():
    settings = Settings.from_env({})
    settings.require_for("validate")
    settings.require_for("history")

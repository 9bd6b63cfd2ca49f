"""Unit tests for configuration models and layered loading."""

import pytest
from pydantic import ValidationError

from debt_collector.config.legacy import SETTINGS_FILENAME, load_settings_file
from debt_collector.config.loader import load_config
from debt_collector.config.models import ENV_VARS, CollectorConfig
from debt_collector.scanner import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of configuration tests."""
    for var in ENV_VARS:
        # Set first so the original state is restored after the test
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


class TestCollectorConfig:
    """Test CollectorConfig validation."""

    def test_defaults(self):
        config = CollectorConfig()

        assert config.chat_model == "gpt-3.5-turbo"
        assert config.embedding_provider == "openai"
        assert config.enable_llm is True
        assert config.enrich_limit == 10
        assert config.request_delay_seconds == 0.1
        assert config.max_concurrency == 1
        assert config.exclude_dirs == list(DEFAULT_EXCLUDE_DIRS)
        assert config.include_extensions == list(DEFAULT_EXTENSIONS)
        assert config.output_path == "report.json"
        assert not config.has_openai_key

    def test_comma_separated_lists(self):
        config = CollectorConfig(
            exclude_dirs="dist, target ,", include_extensions="py,.go"
        )

        assert config.exclude_dirs == ["dist", "target"]
        assert config.include_extensions == [".py", ".go"]

    @pytest.mark.parametrize(
        "field,value",
        [
            ("enrich_limit", -1),
            ("max_concurrency", 0),
            ("request_delay_seconds", -0.5),
            ("confidence_threshold", 1.5),
            ("embedding_provider", "voyage"),
            ("output_format", "xml"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            CollectorConfig(**{field: value})


class TestLoadSettingsFile:
    """Test KEY=value settings parsing."""

    def test_parses_and_coerces(self, tmp_path):
        path = tmp_path / SETTINGS_FILENAME
        path.write_text(
            "# comment\n"
            "\n"
            "OPENAI_MODEL=gpt-4\n"
            "ENRICH_LIMIT=25  # trailing comment\n"
            "REQUEST_DELAY=0.5\n"
            "ENABLE_LLM=false\n"
            "EXCLUDE_DIRS=dist,target\n"
            "skip_hidden=False\n"
            "not a setting\n"
        )

        settings = load_settings_file(path)

        assert settings == {
            "chat_model": "gpt-4",
            "enrich_limit": 25,
            "request_delay_seconds": 0.5,
            "enable_llm": False,
            "exclude_dirs": "dist,target",
            "skip_hidden": False,
        }

    def test_missing_file(self, tmp_path):
        assert load_settings_file(tmp_path / "missing.txt") == {}


class TestLoadConfig:
    """Test configuration precedence."""

    def test_defaults_without_sources(self, tmp_path):
        config = load_config(tmp_path)
        assert config == CollectorConfig()

    def test_settings_file_in_directory(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text("ENRICH_LIMIT=3\n")

        assert load_config(tmp_path).enrich_limit == 3

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.txt"
        path.write_text("OUTPUT_FORMAT=text\n")

        assert load_config(path).output_format == "text"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / SETTINGS_FILENAME).write_text("OPENAI_MODEL=gpt-4\n")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")

        assert load_config(tmp_path).chat_model == "gpt-4o"

    def test_overrides_win_and_none_is_ignored(self, tmp_path, monkeypatch):
        (tmp_path / SETTINGS_FILENAME).write_text("ENRICH_LIMIT=3\nOPENAI_MODEL=a\n")
        monkeypatch.setenv("OPENAI_MODEL", "b")

        config = load_config(tmp_path, enrich_limit=7, chat_model=None)

        assert config.enrich_limit == 7
        assert config.chat_model == "b"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-dotenv\n")

        config = load_config(tmp_path)

        assert config.openai_api_key == "sk-dotenv"

    def test_dotenv_does_not_override_environment(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-dotenv\n")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-real")

        assert load_config(tmp_path).openai_api_key == "sk-real"

    def test_dotenv_can_be_disabled(self, tmp_path):
        (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-dotenv\n")

        assert load_config(tmp_path, load_env_file=False).openai_api_key == ""

    def test_invalid_setting_is_dropped(self, tmp_path):
        (tmp_path / SETTINGS_FILENAME).write_text(
            "ENRICH_LIMIT=-5\nMAX_CONCURRENCY=4\nOUTPUT_FORMAT=xml\n"
        )

        config = load_config(tmp_path)

        assert config.enrich_limit == 10
        assert config.max_concurrency == 4
        assert config.output_format == "json"

"""Tests for the local config store."""

import json
import stat

import pytest

from commit_cli.config import ConfigStore, default_config_path
from commit_cli.models import CommitStyle, Preferences


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return ConfigStore(tmp_path / "nested" / "config.json")


class TestDefaultConfigPath:
    def test_home_directory(self, monkeypatch, tmp_path):
        monkeypatch.delenv("COMMIT_CLI_CONFIG", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_config_path() == tmp_path / ".commit-cli.json"

    def test_environment_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COMMIT_CLI_CONFIG", str(tmp_path / "custom.json"))
        assert default_config_path() == tmp_path / "custom.json"


class TestConfigStore:
    def test_missing_file_is_empty(self, store):
        assert store.load() == {}
        assert store.get_api_key() is None
        assert store.get_preferences() is None

    def test_corrupt_file_is_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        assert store.load() == {}

    def test_non_object_file_is_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2, 3]")
        assert store.load() == {}

    def test_store_api_key(self, store):
        store.store_api_key("sk-stored")

        assert store.get_api_key() == "sk-stored"
        assert json.loads(store.path.read_text()) == {"ANTHROPIC_API_KEY": "sk-stored"}
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_keys_per_provider(self, store):
        store.store_api_key("sk-ant")
        store.store_api_key("sk-oai", provider="openai")
        assert store.get_api_key("anthropic") == "sk-ant"
        assert store.get_api_key("openai") == "sk-oai"

    def test_environment_wins(self, store, monkeypatch):
        store.store_api_key("sk-stored")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        assert store.get_api_key() == "sk-env"

    def test_preferences_round_trip_keeps_api_key(self, store):
        store.store_api_key("sk-stored")
        preferences = Preferences(
            use_conventional_commits=False,
            style=CommitStyle.DESCRIPTIVE,
            custom_guideline="Mention ticket ids",
        )

        store.store_preferences(preferences)

        assert store.get_preferences() == preferences
        assert store.get_api_key() == "sk-stored"
        assert json.loads(store.path.read_text())["preferences"] == {
            "useConventionalCommits": False,
            "commitMessageStyle": "descriptive",
            "customGuideline": "Mention ticket ids",
        }

    def test_invalid_stored_style_ignored(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"preferences": {"commitMessageStyle": "poetic"}}))
        assert store.get_preferences() is None

    def test_existing_file_tightened_to_owner_only(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{}")
        store.path.chmod(0o644)

        assert store.store_api_key("sk-stored")

        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_unwritable_location_is_reported_not_raised(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        blocker = tmp_path / "home"
        blocker.write_text("not a directory")
        store = ConfigStore(blocker / ".commit-cli.json")

        assert store.store_api_key("sk-stored") is False
        assert store.store_preferences(Preferences()) is False
        assert store.get_api_key() is None

"""Local credential and preference storage (``~/.commit-cli.json``)."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from commit_cli.models import CommitStyle, Preferences

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "COMMIT_CLI_CONFIG"
DEFAULT_CONFIG_FILENAME = ".commit-cli.json"
CONFIG_FILE_MODE = 0o600

API_KEY_FIELDS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def default_config_path() -> Path:
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_FILENAME


class ConfigStore:
    """JSON config file holding API keys and commit preferences.

    A missing or unreadable file behaves like an empty configuration.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else default_config_path()

    def load(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> bool:
        """Write the file owner-only. Returns False if it could not be written."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                # O_CREAT's mode only applies to new files
                os.chmod(self.path, CONFIG_FILE_MODE)
                handle.write(json.dumps(data, indent=2))
        except OSError as exc:
            logger.warning("Could not write config file %s: %s", self.path, exc)
            return False
        return True

    def get_api_key(self, provider: str = "anthropic") -> str | None:
        """Environment variable first, then the config file."""
        field = API_KEY_FIELDS[provider]
        value = os.getenv(field) or self.load().get(field)
        return value if isinstance(value, str) and value else None

    def store_api_key(self, api_key: str, provider: str = "anthropic") -> bool:
        data = self.load()
        data[API_KEY_FIELDS[provider]] = api_key
        return self._save(data)

    def get_preferences(self) -> Preferences | None:
        raw = self.load().get("preferences")
        if not isinstance(raw, dict):
            return None
        try:
            return Preferences(
                use_conventional_commits=bool(raw.get("useConventionalCommits", True)),
                style=CommitStyle(raw.get("commitMessageStyle", CommitStyle.CONCISE.value)),
                custom_guideline=raw.get("customGuideline") or None,
            )
        except ValueError as exc:
            logger.warning("Ignoring invalid stored preferences: %s", exc)
            return None

    def store_preferences(self, preferences: Preferences) -> bool:
        data = self.load()
        stored: dict[str, Any] = {
            "useConventionalCommits": preferences.use_conventional_commits,
            "commitMessageStyle": preferences.style.value,
        }
        if preferences.custom_guideline:
            stored["customGuideline"] = preferences.custom_guideline
        data["preferences"] = stored
        return self._save(data)

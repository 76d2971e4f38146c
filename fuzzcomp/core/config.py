"""Completion preferences loaded from the environment and editor settings."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_MAX_ITEM_COUNT = 50
DEFAULT_TIMEOUT_MS = 500

# Editor-side (camelCase) preference names mapped to model fields.
EDITOR_KEYS: dict[str, str] = {
    "maxCompleteItemCount": "max_complete_item_count",
    "timeout": "timeout",
    "autoTrigger": "auto_trigger",
    "noselect": "noselect",
    "triggerAfterInsertEnter": "trigger_after_insert_enter",
    "editor": "editor",
    "logLevel": "log_level",
}

_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


@dataclass(frozen=True)
class CompleteConfig:
    """Settings handed to the aggregator for one request."""

    max_item_count: int = DEFAULT_MAX_ITEM_COUNT
    timeout: int = DEFAULT_TIMEOUT_MS  # milliseconds


class CompletionPreferences(BaseSettings):
    """Completion preferences loaded from environment variables."""

    max_complete_item_count: int = Field(default=DEFAULT_MAX_ITEM_COUNT, ge=1)
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0)
    auto_trigger: str = "always"
    noselect: bool = False
    trigger_after_insert_enter: bool = False

    # Backend flavour; selects the fresh-insertion window
    editor: Literal["vim", "neovim"] = "neovim"

    log_level: str = "info"

    model_config = {
        "env_prefix": "FUZZCOMP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        level = str(value).strip().lower()
        if level == "warn":
            level = "warning"
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def complete_config(self) -> CompleteConfig:
        """Per-request aggregator settings."""
        return CompleteConfig(max_item_count=self.max_complete_item_count, timeout=self.timeout)


class PreferenceStore:
    """Holds the live preferences and notifies listeners when they change."""

    def __init__(self, preferences: CompletionPreferences | None = None) -> None:
        self._preferences = preferences or CompletionPreferences()
        self._listeners: list[Callable[[CompletionPreferences], None]] = []

    def get(self) -> CompletionPreferences:
        return self._preferences

    def update(self, **changes: Any) -> CompletionPreferences:
        """Apply changes, validating them through the model.

        Raises:
            KeyError: If a key is not a known preference.
            pydantic.ValidationError: If a value is invalid.
        """
        unknown = set(changes) - set(CompletionPreferences.model_fields)
        if unknown:
            raise KeyError(f"Unknown preference(s): {', '.join(sorted(unknown))}")
        data = self._preferences.model_dump()
        data.update(changes)
        # Validate only; settings sources were read once at construction
        self._preferences = CompletionPreferences.model_validate(data)
        for listener in list(self._listeners):
            listener(self._preferences)
        return self._preferences

    def update_from_editor(self, settings: Mapping[str, Any]) -> CompletionPreferences:
        """Apply preferences keyed by their editor-side names."""
        changes: dict[str, Any] = {}
        for key, value in settings.items():
            if key not in EDITOR_KEYS:
                raise KeyError(f"Unknown preference: {key}")
            changes[EDITOR_KEYS[key]] = value
        return self.update(**changes)

    def on_did_change(self, listener: Callable[[CompletionPreferences], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

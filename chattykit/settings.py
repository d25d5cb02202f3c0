"""Application settings: defaults, persistence, validation and change events."""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any, Callable

_EVENTS = ("api_key_changed", "model_changed", "theme_changed", "settings_changed")


@dataclass
class AppSettings:
    """Every configurable value with its default."""

    api_key: str = ""
    selected_model: str = "openai/gpt-3.5-turbo"
    base_url: str = "https://openrouter.ai/api/v1"

    dark_mode: bool = True
    font_size: int = 14
    font_path: str = ""
    code_font_path: str = ""
    ui_scale: float = 1.0

    show_token_stats: bool = True
    auto_scroll: bool = True
    show_timestamps: bool = True
    enable_sound_notifications: bool = False
    max_history_messages: int = 1000
    save_history: bool = True

    max_file_size: int = 10 * 1024 * 1024
    allowed_image_types: list[str] = field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"]
    )
    allowed_file_types: list[str] = field(
        default_factory=lambda: [
            ".txt", ".md", ".cpp", ".h", ".py", ".js", ".json", ".xml", ".csv",
        ]
    )

    request_timeout: int = 30
    max_retries: int = 3
    enable_logging: bool = False
    log_level: str = "INFO"

    window_size: tuple[int, int] = (1280, 720)
    window_position: tuple[int, int] = (-1, -1)
    maximized: bool = False
    remember_window_state: bool = True

    shortcuts: dict[str, str] = field(
        default_factory=lambda: {
            "send_message": "Return",
            "new_chat": "Ctrl+N",
            "save_chat": "Ctrl+S",
            "open_settings": "Ctrl+Comma",
            "toggle_sidebar": "Ctrl+B",
        }
    )


def encrypt_api_key(key: str) -> str:
    """Obfuscate a key as base64 text plus its SHA-256 hex digest."""
    data = key.encode("utf-8")
    encoded = base64.b64encode(data).decode("ascii")
    return f"{encoded}:{hashlib.sha256(data).hexdigest()}"


def decrypt_api_key(encrypted_key: str) -> str:
    """Undo encrypt_api_key; plain text passes through, a bad digest gives ''."""
    parts = encrypted_key.split(":")
    if len(parts) != 2:
        return encrypted_key
    try:
        data = base64.b64decode(parts[0])
        actual = bytes.fromhex(parts[1])
    except (binascii.Error, ValueError):
        return ""
    if hashlib.sha256(data).digest() == actual:
        return data.decode("utf-8", errors="replace")
    return ""


def file_extension(filename: str) -> str:
    """The lower-case suffix of a file name with a leading dot, or ''."""
    name = PurePath(filename).name
    _, dot, suffix = name.rpartition(".")
    if not dot or not suffix:
        return ""
    return "." + suffix.lower()


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false")
    return bool(value)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float):
        return int(value)
    return int(value)


def _to_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _to_pair(value: Any) -> tuple[int, int]:
    first, second = value
    return int(first), int(second)


def _to_str_dict(value: Any) -> dict[str, str]:
    return {str(k): str(v) for k, v in dict(value).items()}


_FIELDS: tuple[tuple[str, str, str, Callable[[Any], Any]], ...] = (
    ("API", "selectedModel", "selected_model", str),
    ("API", "baseURL", "base_url", str),
    ("UI", "darkMode", "dark_mode", _to_bool),
    ("UI", "fontSize", "font_size", _to_int),
    ("UI", "fontPath", "font_path", str),
    ("UI", "codeFontPath", "code_font_path", str),
    ("UI", "uiScale", "ui_scale", float),
    ("Chat", "showTokenStats", "show_token_stats", _to_bool),
    ("Chat", "autoScroll", "auto_scroll", _to_bool),
    ("Chat", "showTimestamps", "show_timestamps", _to_bool),
    ("Chat", "enableSoundNotifications", "enable_sound_notifications", _to_bool),
    ("Chat", "maxHistoryMessages", "max_history_messages", _to_int),
    ("Chat", "saveHistory", "save_history", _to_bool),
    ("Files", "maxFileSize", "max_file_size", _to_int),
    ("Files", "allowedImageTypes", "allowed_image_types", _to_str_list),
    ("Files", "allowedFileTypes", "allowed_file_types", _to_str_list),
    ("Advanced", "requestTimeout", "request_timeout", _to_int),
    ("Advanced", "maxRetries", "max_retries", _to_int),
    ("Advanced", "enableLogging", "enable_logging", _to_bool),
    ("Advanced", "logLevel", "log_level", str),
    ("Window", "windowSize", "window_size", _to_pair),
    ("Window", "windowPosition", "window_position", _to_pair),
    ("Window", "maximized", "maximized", _to_bool),
    ("Window", "rememberWindowState", "remember_window_state", _to_bool),
    ("Shortcuts", "shortcuts", "shortcuts", _to_str_dict),
)


def _stored(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return value


def _json_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _json_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _json_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _json_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _default_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "Chatty" / "Chatty.json"


class Settings:
    """Holds the application settings and persists them to a JSON file."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path is not None else _default_path()
        self.values = AppSettings()
        self._listeners: dict[str, list[Callable[..., None]]] = {
            event: [] for event in _EVENTS
        }

    def subscribe(self, event: str, callback: Callable[..., None]) -> None:
        """Call ``callback`` whenever ``event`` fires."""
        if event not in self._listeners:
            raise ValueError(f"unknown settings event: {event!r}")
        self._listeners[event].append(callback)

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    @property
    def api_key(self) -> str:
        return self.values.api_key

    @property
    def selected_model(self) -> str:
        return self.values.selected_model

    @property
    def dark_mode(self) -> bool:
        return self.values.dark_mode

    @property
    def font_size(self) -> int:
        return self.values.font_size

    def load(self) -> None:
        """Read stored values; a missing file leaves the current values."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"settings file {self.path} does not hold an object")

        api = data.get("API", {})
        if isinstance(api, dict) and "apiKey" in api:
            self.values.api_key = decrypt_api_key(str(api["apiKey"]))

        for group, key, attr, convert in _FIELDS:
            section = data.get(group, {})
            if not isinstance(section, dict) or key not in section:
                continue
            try:
                value = convert(section[key])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"invalid value for {group}/{key}") from exc
            setattr(self.values, attr, value)

    def save(self) -> None:
        """Write every value to the settings file."""
        data: dict[str, dict[str, Any]] = {
            "API": {"apiKey": encrypt_api_key(self.values.api_key)}
        }
        for group, key, attr, _ in _FIELDS:
            data.setdefault(group, {})[key] = _stored(getattr(self.values, attr))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        self._emit("settings_changed")

    def reset(self) -> None:
        self.values = AppSettings()
        self._emit("settings_changed")

    def set_api_key(self, key: str) -> None:
        if self.values.api_key != key:
            self.values.api_key = key
            self._emit("api_key_changed", key)
            self._emit("settings_changed")

    def set_selected_model(self, model: str) -> None:
        if self.values.selected_model != model:
            self.values.selected_model = model
            self._emit("model_changed", model)
            self._emit("settings_changed")

    def set_dark_mode(self, dark: bool) -> None:
        if self.values.dark_mode != dark:
            self.values.dark_mode = dark
            self._emit("theme_changed", dark)
            self._emit("settings_changed")

    def set_font_size(self, size: int) -> None:
        if self.values.font_size != size:
            self.values.font_size = size
            self._emit("settings_changed")

    def validate_api_key(self, key: str) -> bool:
        return bool(key) and len(key) >= 10

    def validate_model(self, model: str) -> bool:
        """A model id has the form provider/model."""
        return bool(model) and "/" in model

    def validate_file_type(self, filename: str, is_image: bool = False) -> bool:
        allowed = (
            self.values.allowed_image_types if is_image else self.values.allowed_file_types
        )
        extension = file_extension(filename).lower()
        return any(extension == entry.lower() for entry in allowed)

    def import_settings(self, filepath: str | os.PathLike[str]) -> None:
        """Replace the settings with those in an exported JSON file."""
        text = Path(filepath).read_text(encoding="utf-8")
        data = json.loads(text)
        if not isinstance(data, dict):
            data = {}

        imported = AppSettings()
        if "apiKey" in data:
            imported.api_key = _json_str(data["apiKey"])
        if "selectedModel" in data:
            imported.selected_model = _json_str(data["selectedModel"])
        if "baseURL" in data:
            imported.base_url = _json_str(data["baseURL"])
        if "darkMode" in data:
            imported.dark_mode = _json_bool(data["darkMode"])
        if "fontSize" in data:
            imported.font_size = _json_int(data["fontSize"])
        if "uiScale" in data:
            imported.ui_scale = _json_float(data["uiScale"])

        self.values = imported
        self._emit("settings_changed")

    def export_settings(self, filepath: str | os.PathLike[str]) -> None:
        """Write the shareable settings, without the API key, as JSON."""
        v = self.values
        data = {
            "selectedModel": v.selected_model,
            "baseURL": v.base_url,
            "darkMode": v.dark_mode,
            "fontSize": v.font_size,
            "uiScale": v.ui_scale,
            "showTokenStats": v.show_token_stats,
            "autoScroll": v.auto_scroll,
            "showTimestamps": v.show_timestamps,
            "maxHistoryMessages": v.max_history_messages,
            "saveHistory": v.save_history,
        }
        Path(filepath).write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
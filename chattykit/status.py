"""Texts shown in the main window's title, sidebar and status bar."""

from __future__ import annotations

from enum import Enum

APP_TITLE = "Chatty - AI Chat Assistant"


class NavigationView(Enum):
    """The sidebar's navigation entries."""

    NEW_CHAT = "new_chat"
    HISTORY = "history"
    SAVED_CHATS = "saved_chats"
    SETTINGS = "settings"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    NavigationView.NEW_CHAT: "🆕 New Chat",
    NavigationView.HISTORY: "📚 History",
    NavigationView.SAVED_CHATS: "💾 Saved Chats",
    NavigationView.SETTINGS: "⚙️ Settings",
}


def window_title(filename: str = "", modified: bool = False) -> str:
    """The window title, naming the open conversation and marking changes."""
    if not filename:
        return APP_TITLE
    title = f"{filename} - {APP_TITLE}"
    return f"*{title}" if modified else title


def user_status(api_key: str, request_active: bool) -> str:
    """The status line under the user's name in the sidebar."""
    if not api_key:
        return "Configure API key"
    if request_active:
        return "Thinking..."
    return "Ready to chat"


def status_text(total_tokens: int, average_tps: float) -> str:
    """The token statistics shown in the status bar."""
    if total_tokens > 0:
        return f"Tokens: {total_tokens} | TPS: {average_tps:.1f}"
    return "Tokens: 0"


def avatar_text(user_name: str) -> str:
    """The first letter of the user's name, in upper case."""
    return user_name[:1].upper()


def model_text(model: str) -> str:
    return f"Model: {model}"
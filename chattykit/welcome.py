"""Content of the welcome screen: greeting, chat templates and recent conversations."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping

NO_RECENT_TEXT = "No recent conversations"
SUBTITLE = "How can I help you today?"
DEFAULT_RECENT_LIMIT = 6


@dataclass(frozen=True)
class ChatTemplate:
    """A ready-made prompt offered on the welcome screen."""

    title: str
    description: str
    prompt: str
    icon: str


TEMPLATES: tuple[ChatTemplate, ...] = (
    ChatTemplate(
        "Code Review",
        "Analyze and review code for improvements",
        "Please review this code and suggest improvements:\n\n",
        ":/icons/code.png",
    ),
    ChatTemplate(
        "Explain Code",
        "Get detailed explanations of complex code",
        "Please explain how this code works:\n\n",
        ":/icons/explain.png",
    ),
    ChatTemplate(
        "Debug Help",
        "Help troubleshoot and fix bugs",
        "I'm having trouble with this code. Can you help me debug it?\n\n",
        ":/icons/debug.png",
    ),
    ChatTemplate(
        "Documentation",
        "Generate documentation for code",
        "Please generate documentation for this code:\n\n",
        ":/icons/docs.png",
    ),
    ChatTemplate(
        "Scala Expert",
        "Specialized help with Scala programming",
        "I need help with Scala. Here's my question:\n\n",
        ":/icons/scala.png",
    ),
    ChatTemplate(
        "General Chat",
        "Start a general conversation",
        "Hello! I'd like to chat about: ",
        ":/icons/chat.png",
    ),
)


@dataclass(frozen=True)
class RecentConversation:
    """A saved conversation file listed on the welcome screen."""

    name: str
    path: Path
    modified: datetime

    @property
    def modified_text(self) -> str:
        """The modification time as shown on the card, e.g. 'Jan 05, 14:30'."""
        return self.modified.strftime("%b %d, %H:%M")


def greeting(hour: int, user_name: str = "") -> str:
    """The greeting line: a welcome by name, or one for the time of day."""
    if user_name:
        return f"Welcome, {user_name}! 👋"
    if hour < 12:
        return "Good morning! 🌅"
    if hour < 17:
        return "Good afternoon! ☀️"
    return "Good evening! 🌙"


def current_user_name(environ: Mapping[str, str] | None = None) -> str:
    """The login name from USER, else USERNAME, else ''."""
    env = os.environ if environ is None else environ
    return env.get("USER") or env.get("USERNAME") or ""


def _base_name(filename: str) -> str:
    return filename.split(".", 1)[0]


def recent_conversations(
    directory: str | os.PathLike[str], limit: int = DEFAULT_RECENT_LIMIT
) -> list[RecentConversation]:
    """The newest ``*.json`` files in ``directory``, newest first, at most ``limit``."""
    folder = Path(directory)
    if not folder.is_dir():
        return []
    entries = []
    for path in folder.glob("*.json"):
        if not path.is_file():
            continue
        entries.append((path.stat().st_mtime, path))
    entries.sort(key=lambda entry: entry[0], reverse=True)
    return [
        RecentConversation(
            name=_base_name(path.name),
            path=path.resolve(),
            modified=datetime.fromtimestamp(mtime),
        )
        for mtime, path in entries[: max(limit, 0)]
    ]
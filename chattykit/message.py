"""Chat messages, their attachments and streaming bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable


class MessageRole(Enum):
    """Who a message comes from."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageStatus(Enum):
    """Where a message is in its life cycle."""

    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class Attachment:
    """A file attached to a message."""

    filename: str
    filepath: str
    mime_type: str
    is_image: bool = False
    data: bytes = b""


@dataclass
class Message:
    """One entry of a conversation."""

    content: str = ""
    role: MessageRole = MessageRole.USER
    status: MessageStatus = MessageStatus.COMPLETE
    timestamp: datetime | None = None
    id: str = ""
    attachments: list[Attachment] = field(default_factory=list)
    total_tokens: int = 0
    tokens_per_second: float = 0.0
    stream_start_time: datetime | None = None
    stream_end_time: datetime | None = None
    is_expanded: bool = True
    animation_progress: float = 0.0
    clock: Callable[[], datetime] = field(
        default=datetime.now, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        now = self.clock()
        if self.timestamp is None:
            self.timestamp = now
        if not self.id:
            self.id = f"msg_{int(now.timestamp() * 1000)}"

    def add_attachment(self, attachment: Attachment) -> None:
        self.attachments.append(attachment)

    def start_streaming(self) -> None:
        """Mark the message as streaming and reset its token statistics."""
        self.status = MessageStatus.STREAMING
        self.stream_start_time = self.clock()
        self.total_tokens = 0
        self.tokens_per_second = 0.0

    def update_streaming(self, new_content: str) -> None:
        """Replace the content and refresh the rough token statistics."""
        self.content = new_content
        self.total_tokens = len(self.content) // 4
        if self.stream_start_time is None:
            return
        elapsed = self.clock() - self.stream_start_time
        duration_ms = elapsed // timedelta(milliseconds=1)
        if duration_ms > 0:
            self.tokens_per_second = self.total_tokens * 1000.0 / duration_ms

    def complete_streaming(self) -> None:
        self.status = MessageStatus.COMPLETE
        self.stream_end_time = self.clock()

    def set_error(self) -> None:
        self.status = MessageStatus.ERROR

    def is_from_user(self) -> bool:
        return self.role is MessageRole.USER

    def is_from_assistant(self) -> bool:
        return self.role is MessageRole.ASSISTANT

    def is_system_message(self) -> bool:
        return self.role is MessageRole.SYSTEM

    def formatted_time(self) -> str:
        """The timestamp as hours, minutes and seconds."""
        assert self.timestamp is not None
        return self.timestamp.strftime("%H:%M:%S")
"""A chat conversation with pending attachments and a streamed assistant reply."""

from __future__ import annotations

from typing import Any, Callable, Sequence

from .message import Attachment, Message, MessageRole

_EVENTS = ("message_added", "conversation_changed", "token_stats_changed")

Sender = Callable[[Sequence[Message]], Any]


class ChatSession:
    """Holds a conversation and follows the streaming of the assistant's reply.

    ``sender`` is called with the whole conversation whenever a message is
    sent. Stream progress is then reported back through
    :meth:`on_stream_received`, :meth:`on_stream_completed` and
    :meth:`on_stream_error`.
    """

    def __init__(self, sender: Sender | None = None) -> None:
        self.sender = sender
        self.messages: list[Message] = []
        self.pending_attachments: list[Attachment] = []
        self.current_message: Message | None = None
        self.streaming_message: Message | None = None
        self.is_streaming = False
        self.auto_scroll = True
        self.indicator_text = ""
        self._listeners: dict[str, list[Callable[..., None]]] = {
            event: [] for event in _EVENTS
        }

    def subscribe(self, event: str, callback: Callable[..., None]) -> None:
        """Call ``callback`` whenever ``event`` fires."""
        if event not in self._listeners:
            raise ValueError(f"unknown chat event: {event!r}")
        self._listeners[event].append(callback)

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    def _emit_token_stats(self) -> None:
        self._emit(
            "token_stats_changed",
            self.total_tokens(),
            self.average_tokens_per_second(),
        )

    def add_message(self, message: Message) -> None:
        self.messages.append(message)
        self._emit("message_added", message)
        self._emit("conversation_changed")

    def clear_history(self) -> None:
        """Drop every message and every pending attachment."""
        self.messages.clear()
        self.clear_attachments()
        self._emit("conversation_changed")

    def total_messages(self) -> int:
        return len(self.messages)

    def total_tokens(self) -> int:
        return sum(message.total_tokens for message in self.messages)

    def average_tokens_per_second(self) -> float:
        """The mean rate over the messages that recorded one, or 0.0."""
        rates = [m.tokens_per_second for m in self.messages if m.tokens_per_second > 0.0]
        return sum(rates) / len(rates) if rates else 0.0

    def add_attachment(self, attachment: Attachment) -> None:
        self.pending_attachments.append(attachment)

    def remove_attachment(self, index: int) -> None:
        """Remove a pending attachment; an index out of range is ignored."""
        if 0 <= index < len(self.pending_attachments):
            del self.pending_attachments[index]

    def clear_attachments(self) -> None:
        self.pending_attachments.clear()

    def can_send(self, text: str) -> bool:
        """Whether there is something to send and no reply is streaming."""
        has_content = bool(text.strip()) or bool(self.pending_attachments)
        return has_content and not self.is_streaming

    def send_message(self, text: str) -> Message | None:
        """Send the text and pending attachments; return the streaming reply.

        Nothing is sent, and None is returned, when there is neither text
        nor an attachment.
        """
        text = text.strip()
        if not text and not self.pending_attachments:
            return None

        user_message = Message(content=text, role=MessageRole.USER)
        for attachment in self.pending_attachments:
            user_message.add_attachment(attachment)
        self.add_message(user_message)
        self.clear_attachments()

        reply = Message(content="", role=MessageRole.ASSISTANT)
        reply.start_streaming()
        self.current_message = reply
        self.streaming_message = reply
        self.add_message(reply)

        self.is_streaming = True
        self.indicator_text = "AI is thinking..."

        if self.sender is not None:
            self.sender(list(self.messages))
        return reply

    def on_stream_received(self, content: str) -> None:
        """Append a streamed piece of the reply."""
        message = self.streaming_message
        if not self.is_streaming or message is None:
            return
        message.update_streaming(message.content + content)
        self._emit_token_stats()

    def on_stream_completed(self, success: bool) -> None:
        """Finish the reply, marking it complete or failed."""
        if not self.is_streaming:
            return
        self.is_streaming = False
        self.indicator_text = ""
        message = self.streaming_message
        if message is not None:
            if success:
                message.complete_streaming()
            else:
                message.set_error()
            self.streaming_message = None
        self._emit("conversation_changed")
        self._emit_token_stats()

    def on_stream_error(self, error: str) -> None:
        """Stop streaming and mark the reply as failed."""
        self.is_streaming = False
        self.indicator_text = f"Error: {error}"
        if self.streaming_message is not None:
            self.streaming_message.set_error()
            self.streaming_message = None

    def token_stats_text(self) -> str:
        """The token statistics line under the input box."""
        message = self.streaming_message
        if self.is_streaming and message is not None:
            return (
                f"Tokens: {message.total_tokens} | "
                f"TPS: {message.tokens_per_second:.1f}"
            )
        total = self.total_tokens()
        if total > 0:
            return f"Total tokens: {total}"
        return "Ready"
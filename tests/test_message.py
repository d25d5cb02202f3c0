from datetime import datetime, timedelta

from chattykit.message import Attachment, Message, MessageRole, MessageStatus


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now


START = datetime(2024, 1, 2, 3, 4, 5)


def test_defaults():
    msg = Message()
    assert msg.role is MessageRole.USER
    assert msg.status is MessageStatus.COMPLETE
    assert msg.id.startswith("msg_")
    assert msg.id[len("msg_"):].isdigit()
    assert msg.attachments == []


def test_timestamp_from_clock():
    clock = FakeClock(START)
    msg = Message("hi", MessageRole.ASSISTANT, clock=clock)
    assert msg.timestamp == START
    assert msg.content == "hi"


def test_formatted_time():
    msg = Message(timestamp=START)
    assert msg.formatted_time() == "03:04:05"


def test_start_streaming_resets_stats():
    clock = FakeClock(START)
    msg = Message("", MessageRole.ASSISTANT, clock=clock)
    msg.total_tokens = 7
    msg.tokens_per_second = 3.5
    msg.start_streaming()
    assert msg.status is MessageStatus.STREAMING
    assert msg.total_tokens == 0
    assert msg.tokens_per_second == 0.0
    assert msg.stream_start_time == START


def test_update_streaming_computes_rate():
    clock = FakeClock(START)
    msg = Message("", MessageRole.ASSISTANT, clock=clock)
    msg.start_streaming()
    clock.now = START + timedelta(seconds=2)
    msg.update_streaming("a" * 40)
    assert msg.content == "a" * 40
    assert msg.total_tokens == 10
    assert msg.tokens_per_second == 5.0


def test_update_streaming_without_elapsed_time_keeps_rate():
    clock = FakeClock(START)
    msg = Message("", MessageRole.ASSISTANT, clock=clock)
    msg.start_streaming()
    msg.update_streaming("abcdefgh")
    assert msg.tokens_per_second == 0.0
    assert msg.total_tokens * 4 <= len(msg.content)


def test_complete_streaming():
    clock = FakeClock(START)
    msg = Message(clock=clock)
    msg.start_streaming()
    clock.now = START + timedelta(seconds=1)
    msg.complete_streaming()
    assert msg.status is MessageStatus.COMPLETE
    assert msg.stream_end_time == START + timedelta(seconds=1)


def test_set_error():
    msg = Message()
    msg.start_streaming()
    msg.set_error()
    assert msg.status is MessageStatus.ERROR


def test_role_predicates():
    user = Message("x", MessageRole.USER)
    assistant = Message("x", MessageRole.ASSISTANT)
    system = Message("x", MessageRole.SYSTEM)
    assert (user.is_from_user(), user.is_from_assistant(), user.is_system_message()) == (True, False, False)
    assert assistant.is_from_assistant() and not assistant.is_from_user()
    assert system.is_system_message() and not system.is_from_user()


def test_add_attachment_keeps_order():
    msg = Message()
    first = Attachment("a.png", "/tmp/a.png", "image/png", True)
    second = Attachment("b.txt", "/tmp/b.txt", "text/plain")
    msg.add_attachment(first)
    msg.add_attachment(second)
    assert msg.attachments == [first, second]
    assert msg.attachments[0].is_image is True
    assert msg.attachments[1].is_image is False
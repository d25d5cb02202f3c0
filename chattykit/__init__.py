"""Chat assistant toolkit: messages, chat sessions, settings, attachments and display texts."""

__version__ = "1.0.0"
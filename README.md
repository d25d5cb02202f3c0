# chattykit

Building blocks for an AI chat assistant: the conversation model, the settings, attachment handling, and the texts a chat window shows.

## Modules

- `chattykit.message`: `Message`, `Attachment`, `MessageRole` and `MessageStatus`. A message can stream its content with `start_streaming`, `update_streaming` and `complete_streaming`. While it streams, it estimates its tokens (one per four characters) and its tokens per second. `set_error` marks it as failed.
- `chattykit.settings`: `AppSettings` holds every value with its default. `Settings` does the following:
  - loads the values from a JSON file and saves them to it. A missing file leaves the defaults in place.
  - imports and exports a shareable subset of the values. The export leaves out the API key.
  - checks API keys, model names (`provider/model`) and file types.
  - calls subscribers on `api_key_changed`, `model_changed`, `theme_changed` and `settings_changed`.

  The API key is written in obfuscated form: base64 text followed by its SHA-256 digest. Use `encrypt_api_key` and `decrypt_api_key` for that form. This is not encryption.
- `chattykit.files`: `FileManager.process_file` does the following:
  - checks a file against the size limit and the supported MIME types.
  - shrinks and recompresses images with Pillow.
  - returns a `ProcessedFile`.

  When it fails, it raises `FileProcessingError`. `process_files` skips the files that fail. `file_filter` gives a file-dialog filter string, and `save_file` writes bytes to disk. The helpers `format_file_size` and `generate_file_id` (the SHA-256 hex digest) go with it.
- `chattykit.chat`: `ChatSession` keeps the conversation, the pending attachments and the state of the assistant's streamed reply. It passes the conversation to a `sender` callable of your choice. You report the stream back through `on_stream_received`, `on_stream_completed` and `on_stream_error`.
- `chattykit.welcome`: the following pieces of the welcome screen:
  - `greeting` and `current_user_name`.
  - the ready-made prompts in `TEMPLATES`, which are `ChatTemplate` values.
  - `recent_conversations`, which lists the newest `*.json` files in a folder as `RecentConversation` values.
- `chattykit.status`: the following texts:
  - the window title, from `window_title`.
  - the user's status, from `user_status`.
  - the token statistics, from `status_text`.
  - the avatar letter, from `avatar_text`.
  - the model label, from `model_text`.

  It also has the sidebar entries in `NavigationView`.

## Installation

```
pip install chattykit
```

To install what the tests need as well:

```
pip install "chattykit[test]"
```

## Example

```python
from chattykit.chat import ChatSession
from chattykit.message import Message, MessageRole

sent = []
session = ChatSession(sender=sent.append)

reply = session.send_message("Hello there")
session.on_stream_received("Hi! How can I help you today?")
session.on_stream_completed(True)

print(reply.content, reply.status)
print(session.total_messages(), session.token_stats_text())

note = Message("A note", MessageRole.SYSTEM)
print(note.formatted_time())
```

## What it does not do

chattykit is a library only. It has no command-line program and no graphical window. It does not talk to a language-model service over the network: the `sender` you give `ChatSession` has to deliver the conversation and feed the reply back. It does not render Markdown to HTML. It does not save or load whole conversations.
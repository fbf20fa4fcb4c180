# chatsuite

Building blocks for a workspace chat service, usable on their own or
behind any web framework.

## What is in the package

- **`chatsuite.ai`**: a small completion interface (`AiSdk`) with two
  adapters, `OllamaAdapter` (a local Ollama server, `llama3.2` by default)
  and `OpenAIAdapter` (the chat-completions API, configured from the
  `OPENAI_API_KEY` environment variable by `OpenAIAdapter.from_env()`).
  Conversations are lists of `Message` values built with `Message.user`,
  `Message.system` and `Message.assistant`.
- **`chatsuite.agents`**: chat agents that look at each message before it
  is stored. A `ProxyAgent` rewrites the message through the model, a
  `ReplyAgent` answers it, and a `TapAgent` only observes. Each returns an
  `AgentDecision`. `agent_from_record` turns a stored `ChatAgentRecord`
  into a working agent.
- **`chatsuite.chat_rules`**: the rules for new chats and messages.
  `chat_type_for` decides whether a chat is single, group, public channel
  or private channel, and rejects chats with fewer than two members,
  unnamed groups of more than eight, and unknown members.
  `ListMessages` clamps the page size to between 100 and 500.
- **`chatsuite.chat_files`**: content-addressed uploads. `ChatFile`
  hashes the upload with SHA-1 and stores it under
  `<base_dir>/<ws_id>/abc/def/<rest>.<ext>`, served as
  `/files/<ws_id>/abc/def/<rest>.<ext>`; `ChatFile.parse` reads such a
  URL back.
- **`chatsuite.chat_errors`**: the chat service's errors, each mapping to
  an HTTP status and a JSON body through `to_response()`.
- **`chatsuite.analytics_pb`** and **`chatsuite.analytics_events`**:
  client analytics events in their wire form, and their flattening into
  one `AnalyticsEventRow` per event for a columnar store.
- **`chatsuite.bot_notify`**: decides which chat notifications a bot
  should answer; `Notification.load` accepts a new message only when the
  one other member of the chat is a bot.
- **`chatsuite.config`**: YAML configuration for the chat, analytics and
  bot services.

## Examples

Storing an upload and addressing it later:

```python
from pathlib import Path
from chatsuite.chat_files import ChatFile

upload = ChatFile.from_upload(1, "photo.jpg", b"image bytes")
stored_at = upload.path(Path("/tmp/chat-files"))
url = upload.url()
assert ChatFile.parse(url) == upload
```

Checking a new chat before it is created:

```python
from chatsuite.chat_rules import CreateChat, ChatType, chat_type_for

request = CreateChat.new("", [1, 2], False)
assert chat_type_for(request, {1, 2}) is ChatType.SINGLE
```

Flattening an analytics event:

```python
from chatsuite.analytics_pb import AnalyticsEvent
from chatsuite.analytics_events import AnalyticsEventRow

event = AnalyticsEvent.from_bytes(payload)
row = AnalyticsEventRow.from_event(event).to_dict()
```

An event without a type, a context, or system information in its context
raises `MissingEventType`, `MissingEventContext` or `MissingSystemInfo`.

## Configuration

Each service looks for its YAML file in a fixed order and falls back to an
environment variable naming the file:

| Service   | Loader                      | Files tried                                            | Variable           |
|-----------|-----------------------------|--------------------------------------------------------|--------------------|
| chat      | `ChatConfig.try_load()`      | `../chat_server/app.yaml`, `chat_server/app.yaml`, `/app/app.yaml` | `CHAT_CONFIG`      |
| analytics | `AnalyticsConfig.try_load()` | `../analytics_server/analytics.yaml`, `/app/analytics.yaml`        | `ANALYTICS_CONFIG` |
| bot       | `BotConfig.try_load()`       | `../bot_server/bot.yaml`, `bot_server/bot.yaml`, `/app/bot.yaml`   | `BOT_CONFIG`       |

When none is found, `ConfigNotFoundError` is raised. A configuration can
also be built from an already parsed mapping with `from_mapping`.
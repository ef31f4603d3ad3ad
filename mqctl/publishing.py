"""Send requests for 'commands', 'events' and 'events store' channels."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from .errors import CommandError

DEFAULT_MESSAGES = 1
DEFAULT_TIMEOUT = 30

BodyLoader = Callable[[str], "bytes | str"]


class ChannelKind(Enum):
    """The kind of channel a message is sent to."""

    COMMANDS = "commands"
    EVENTS = "events"
    EVENTS_STORE = "events_store"

    @property
    def supports_batches(self) -> bool:
        """Whether many messages (and streaming) can be sent at once."""
        return self is not ChannelKind.COMMANDS


@dataclass(frozen=True)
class SendRequest:
    """What to send: the channel, the body and how many copies of it."""

    kind: ChannelKind
    channel: str
    body: bytes
    metadata: str = ""
    messages: int = DEFAULT_MESSAGES
    timeout: int | None = None
    stream: bool = False

    def bodies(self) -> Iterator[dict]:
        """Yield each message to send, every one with a fresh id."""
        for _ in range(self.messages):
            message = {
                "id": str(uuid.uuid4()),
                "channel": self.channel,
                "body": self.body,
                "metadata": self.metadata,
            }
            if self.timeout is not None:
                message["timeout"] = self.timeout
            yield message


def _load(body_loader: BodyLoader | None, source: str) -> bytes:
    if body_loader is None:
        raise CommandError(f"no body loader available for --{source}")
    data = body_loader(source)
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def parse_send_args(
    kind: ChannelKind | str,
    args: Sequence[str],
    metadata: str = "",
    messages: int = DEFAULT_MESSAGES,
    timeout: int = DEFAULT_TIMEOUT,
    stream: bool = False,
    build: bool = False,
    from_file: bool = False,
    body_loader: BodyLoader | None = None,
) -> SendRequest:
    """Turn positional arguments and flags into a send request.

    The body comes from the loader when building a request ("build") or
    reading a file ("file"); otherwise it is the second argument.
    """
    kind = ChannelKind(kind)
    if not args:
        raise CommandError("missing channel argument")
    channel = args[0]
    if build:
        body = _load(body_loader, "build")
    elif from_file:
        body = _load(body_loader, "file")
    elif len(args) >= 2:
        body = args[1].encode("utf-8")
    else:
        raise CommandError("missing body argument")
    batches = kind.supports_batches
    return SendRequest(
        kind=kind,
        channel=channel,
        body=body,
        metadata=metadata,
        messages=messages if batches else 1,
        timeout=None if batches else timeout,
        stream=stream and batches,
    )
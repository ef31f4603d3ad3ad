"""Indented JSON views of messages, commands and responses for display."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime

from .subscription import format_duration

_JSON_SPACE = " \t\r\n"
_INDENT = "    "
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_FIELD_ORDER = (
    "id",
    "channel",
    "client_id",
    "metadata",
    "timestamp",
    "sequence",
    "tags",
    "executed",
    "timeout",
    "executed_at",
    "error",
    "body_json",
    "body_string",
)


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON literal {name}")


def _as_bytes(body: bytes | str | None) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def decode_body(body: bytes | str | None) -> tuple[str, str]:
    """Split a body into (raw JSON text, plain text); one of them is empty.

    JSON bodies are kept as JSON; otherwise base64 bodies are decoded, and
    anything else is shown as is.
    """
    data = _as_bytes(body)
    text = data.decode("utf-8", errors="replace")
    try:
        json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        pass
    else:
        return text.strip(_JSON_SPACE), ""
    try:
        decoded = base64.b64decode(
            data.replace(b"\r", b"").replace(b"\n", b""), validate=True
        )
    except (binascii.Error, ValueError):
        return "", text
    return "", decoded.decode("utf-8", errors="replace")


def format_timestamp(moment: datetime) -> str:
    """Render a moment with at most millisecond precision, trailing zeros dropped."""
    base = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    fraction = f"{moment.microsecond // 1000:03d}".rstrip("0")
    return f"{base}.{fraction}" if fraction else base


def _indent(compact: str) -> str:
    out: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    pending_open = False
    for ch in compact:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch in _JSON_SPACE:
            continue
        if pending_open and ch not in "]}":
            pending_open = False
            depth += 1
            out.append("\n" + _INDENT * depth)
        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch in "{[":
            out.append(ch)
            pending_open = True
        elif ch in "]}":
            if pending_open:
                pending_open = False
            else:
                depth -= 1
                out.append("\n" + _INDENT * depth)
            out.append(ch)
        elif ch == ",":
            out.append(",\n" + _INDENT * depth)
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)
    return "".join(out)


@dataclass
class MessageView:
    """Display fields of a message; empty fields other than id are omitted."""

    id: str = ""
    channel: str = ""
    client_id: str = ""
    metadata: str = ""
    timestamp: str = ""
    sequence: int = 0
    tags: dict[str, str] | None = None
    executed: str = ""
    timeout: str = ""
    executed_at: str = ""
    error: str = ""
    body_json: str = ""
    body_string: str = ""

    def _present(self):
        for name in _FIELD_ORDER:
            value = getattr(self, name)
            if name == "id" or value:
                yield name, value

    def to_dict(self) -> dict:
        """The shown fields, in display order, with the JSON body parsed."""
        result = {}
        for name, value in self._present():
            if name == "tags":
                value = dict(sorted(value.items()))
            elif name == "body_json":
                value = json.loads(value)
            result[name] = value
        return result

    def to_json(self) -> str:
        """Four-space indented JSON, keeping the JSON body's literal text."""
        parts = []
        for name, value in self._present():
            if name == "body_json":
                encoded = value
            else:
                encoded = json.dumps(value, ensure_ascii=False, sort_keys=True)
            parts.append(f'"{name}":{encoded}')
        compact = "{" + ",".join(parts) + "}"
        for raw, escape in _HTML_ESCAPES.items():
            compact = compact.replace(raw, escape)
        return _indent(compact)

    def __str__(self) -> str:
        return self.to_json()


def message_view(
    id: str,
    channel: str = "",
    client_id: str = "",
    metadata: str = "",
    tags: dict[str, str] | None = None,
    body: bytes | str | None = None,
    timeout: float | None = None,
) -> MessageView:
    """View of an event, stored event, command or received command."""
    body_json, body_string = decode_body(body)
    return MessageView(
        id=id,
        channel=channel,
        client_id=client_id,
        metadata=metadata,
        tags=dict(tags) if tags else None,
        timeout="" if timeout is None else format_duration(timeout),
        body_json=body_json,
        body_string=body_string,
    )


def command_response_view(
    command_id: str,
    response_client_id: str = "",
    tags: dict[str, str] | None = None,
    executed: bool = False,
    executed_at: datetime | None = None,
    error: str = "",
) -> MessageView:
    """View of a command response; the execution time shows only when executed."""
    shown_at = ""
    if executed:
        shown_at = format_timestamp(executed_at or datetime(1, 1, 1))
    return MessageView(
        id=command_id,
        client_id=response_client_id,
        tags=dict(tags) if tags else None,
        executed="true" if executed else "false",
        executed_at=shown_at,
        error=error,
    )


def event_store_receive_view(
    id: str,
    channel: str = "",
    client_id: str = "",
    metadata: str = "",
    tags: dict[str, str] | None = None,
    body: bytes | str | None = None,
    timestamp: datetime | None = None,
    sequence: int = 0,
) -> MessageView:
    """View of an event received from an events store."""
    view = message_view(id, channel, client_id, metadata, tags, body)
    view.timestamp = format_timestamp(timestamp or datetime(1, 1, 1))
    view.sequence = sequence
    return view
"""Events-store channel and client statistics: fetching, parsing and tables."""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime

from .errors import CommandError

STATS_PATH = "/v1/stats/events_stores"
NOT_AVAILABLE = (
    "not available in current Kubemq version, consider upgrade Kubemq version"
)

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


class StatsError(CommandError):
    """Statistics could not be fetched or understood."""


@dataclass
class ClientStats:
    """A subscriber of an events-store channel."""

    client_id: str = ""
    active: bool = False
    last_sequence_sent: int = 0
    is_stalled: bool = False
    pending: int = 0


@dataclass
class ChannelStats:
    """An events-store channel and its subscribers."""

    name: str = ""
    messages: int = 0
    bytes: int = 0
    first_sequence: int = 0
    last_sequence: int = 0
    clients: list[ClientStats] = field(default_factory=list)


@dataclass
class StoreStats:
    """A snapshot of all events-store channels."""

    now: datetime | None = None
    total: int = 0
    channels: list[ChannelStats] = field(default_factory=list)


def _object(value, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise StatsError(f"invalid stats response: {what} must be an object")
    return value


def _int(obj: dict, key: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise StatsError(f"invalid stats response: {key} must be an integer")
    return value


def _bool(obj: dict, key: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise StatsError(f"invalid stats response: {key} must be a boolean")
    return value


def _str(obj: dict, key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise StatsError(f"invalid stats response: {key} must be a string")
    return value


def _list(obj: dict, key: str) -> list:
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise StatsError(f"invalid stats response: {key} must be a list")
    return value


def _parse_time(value) -> datetime | None:
    if value is None:
        return None
    match = _RFC3339.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise StatsError(f"invalid stats response: bad time {value!r}")
    date, clock, fraction, zone = match.groups()
    micros = (fraction or "").ljust(6, "0")[:6]
    zone = "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(f"{date}T{clock}.{micros}{zone}")
    except ValueError as exc:
        raise StatsError(f"invalid stats response: bad time {value!r}") from exc


def _client(value) -> ClientStats:
    obj = _object(value, "client")
    return ClientStats(
        client_id=_str(obj, "client_id"),
        active=_bool(obj, "active"),
        last_sequence_sent=_int(obj, "last_sequence_sent"),
        is_stalled=_bool(obj, "is_stalled"),
        pending=_int(obj, "pending"),
    )


def _channel(value) -> ChannelStats:
    obj = _object(value, "queue")
    return ChannelStats(
        name=_str(obj, "name"),
        messages=_int(obj, "messages"),
        bytes=_int(obj, "bytes"),
        first_sequence=_int(obj, "first_sequence"),
        last_sequence=_int(obj, "last_sequence"),
        clients=[_client(item) for item in _list(obj, "clients")],
    )


def parse_stats_response(payload) -> StoreStats:
    """Parse the server's stats response (JSON text, bytes or a decoded dict)."""
    if isinstance(payload, (bytes, bytearray, str)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise StatsError(f"invalid stats response: {exc}") from exc
    if not isinstance(payload, dict):
        raise StatsError("invalid stats response: expected an object")
    if _bool(payload, "error"):
        raise StatsError(_str(payload, "error_string"))
    if "data" not in payload:
        raise StatsError("unexpected end of JSON input")
    data = payload["data"]
    if data is None:
        return StoreStats()
    data = _object(data, "data")
    return StoreStats(
        now=_parse_time(data.get("now")),
        total=_int(data, "total"),
        channels=[_channel(item) for item in _list(data, "queues")],
    )


def _render_row(cells: list[str], widths: list[int]) -> str:
    parts = []
    leading = True
    for column, text in enumerate(cells):
        if text:
            leading = False
        if column < len(widths):
            if not text and leading:
                continue
            parts.append(text.ljust(widths[column]))
        else:
            parts.append(text)
    return "".join(parts)


def _align(rows: list[str], padding: int = 2) -> str:
    """Align tab-separated cells into columns, block by block."""
    cells = [row.split("\t") for row in rows]
    row_widths: list[list[int]] = [[] for _ in cells]

    def assign(low: int, high: int, current: list[int]) -> None:
        for index in range(low, high):
            row_widths[index] = current

    def layout(line0: int, line1: int, current: list[int]) -> None:
        column = len(current)
        this = line0
        while this < line1:
            if column >= len(cells[this]) - 1:
                this += 1
                continue
            assign(line0, this, current)
            line0 = this
            width = 0
            while this < line1 and column < len(cells[this]) - 1:
                width = max(width, len(cells[this][column]) + padding)
                this += 1
            layout(line0, this, current + [width])
            line0 = this
        assign(line0, line1, current)

    layout(0, len(cells), [])
    return "\n".join(_render_row(c, w) for c, w in zip(cells, row_widths))


def render_channels(stats: StoreStats, name_filter: str = "") -> str:
    """Table of channels whose name contains the filter."""
    shown = [c for c in stats.channels if not name_filter or name_filter in c.name]
    rows = ["CHANNELS:", "NAME\tCLIENTS\tMESSAGES\tBYTES\tFIRST_SEQUENCE\tLAST_SEQUENCE"]
    rows += [
        f"{c.name}\t{len(c.clients)}\t{c.messages}\t{c.bytes}"
        f"\t{c.first_sequence}\t{c.last_sequence}"
        for c in shown
    ]
    rows += ["", f"TOTAL CHANNELS:\t{len(shown)}", ""]
    return _align(rows)


def render_clients(stats: StoreStats, name_filter: str = "") -> str:
    """Table of clients whose id contains the filter; empty ids show as N/A."""
    rows = ["", "CLIENTS:", "CLIENT_ID\tCHANNEL\tACTIVE\tLAST_SENT\tPENDING\tSTALLED"]
    count = 0
    for channel in stats.channels:
        for client in channel.clients:
            if name_filter and name_filter not in client.client_id:
                continue
            count += 1
            active = "true" if client.active else "false"
            stalled = "true" if client.is_stalled else "false"
            rows.append(
                f"{client.client_id or 'N/A'}\t{channel.name}\t{active}"
                f"\t{client.last_sequence_sent}\t{client.pending}"
                f"\t{stalled}"
            )
    rows += ["", f"TOTAL CLIENTS:\t{count}", ""]
    return _align(rows)


def fetch_stats(api_url: str, timeout: float = 10.0) -> StoreStats:
    """Fetch events-store statistics from the server's API interface."""
    url = f"{api_url}{STATS_PATH}"
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        exc.close()
        raise StatsError(NOT_AVAILABLE) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise StatsError(f"get {url}: {exc}") from exc
    return parse_stats_response(body)
import json
import re
import socket
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from mqctl.stats import (
    NOT_AVAILABLE,
    STATS_PATH,
    StatsError,
    StoreStats,
    fetch_stats,
    parse_stats_response,
    render_channels,
    render_clients,
)

SAMPLE = {
    "node": "node-a",
    "error": False,
    "error_string": "",
    "data": {
        "now": "2023-01-02T03:04:05.123456789Z",
        "total": 2,
        "queues": [
            {
                "name": "orders",
                "messages": 5,
                "bytes": 100,
                "first_sequence": 1,
                "last_sequence": 5,
                "clients": [
                    {
                        "client_id": "worker-1",
                        "active": True,
                        "last_sequence_sent": 5,
                        "is_stalled": False,
                        "pending": 0,
                    },
                    {
                        "client_id": "",
                        "active": False,
                        "last_sequence_sent": 2,
                        "is_stalled": True,
                        "pending": 3,
                    },
                ],
            },
            {
                "name": "audit",
                "messages": 0,
                "bytes": 0,
                "first_sequence": 0,
                "last_sequence": 0,
                "clients": [],
            },
        ],
    },
}


def _starts(line):
    return [match.start() for match in re.finditer(r"\S+", line)]


def test_parse_sample():
    stats = parse_stats_response(SAMPLE)
    assert stats.total == 2
    assert [c.name for c in stats.channels] == ["orders", "audit"]
    orders = stats.channels[0]
    assert (orders.messages, orders.bytes, orders.first_sequence, orders.last_sequence) == (5, 100, 1, 5)
    assert [c.client_id for c in orders.clients] == ["worker-1", ""]
    assert orders.clients[1].is_stalled is True
    assert orders.clients[1].pending == 3
    assert stats.now == datetime(2023, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)


def test_parse_from_text_matches_dict():
    assert parse_stats_response(json.dumps(SAMPLE).encode()) == parse_stats_response(SAMPLE)


def test_error_flag_raises_error_string():
    with pytest.raises(StatsError, match="boom"):
        parse_stats_response({"error": True, "error_string": "boom", "data": None})


def test_missing_data_raises():
    with pytest.raises(StatsError):
        parse_stats_response({"node": "n", "error": False})


def test_null_data_is_empty():
    assert parse_stats_response({"error": False, "data": None}) == StoreStats()


def test_bad_field_type_raises():
    payload = {"data": {"total": "two", "queues": []}}
    with pytest.raises(StatsError):
        parse_stats_response(payload)


def test_bad_time_raises():
    with pytest.raises(StatsError):
        parse_stats_response({"data": {"now": "yesterday"}})


def test_invalid_json_raises():
    with pytest.raises(StatsError):
        parse_stats_response("{not json")


def test_channels_table_is_aligned():
    lines = render_channels(parse_stats_response(SAMPLE)).split("\n")
    assert lines[0] == "CHANNELS:"
    header, first, second = lines[1], lines[2], lines[3]
    assert first.split() == ["orders", "2", "5", "100", "1", "5"]
    assert second.split() == ["audit", "0", "0", "0", "0", "0"]
    assert _starts(header) == _starts(first) == _starts(second)
    assert lines[4] == ""
    assert lines[5].split() == ["TOTAL", "CHANNELS:", "2"]
    assert lines[-1] == ""


def test_channels_filter():
    lines = render_channels(parse_stats_response(SAMPLE), "aud").split("\n")
    assert lines[2].split()[0] == "audit"
    assert lines[3] == ""
    assert lines[4].split()[-1] == "1"


def test_clients_table():
    lines = render_clients(parse_stats_response(SAMPLE)).split("\n")
    assert lines[0] == ""
    assert lines[1] == "CLIENTS:"
    assert lines[3].split() == ["worker-1", "orders", "true", "5", "0", "false"]
    assert lines[4].split() == ["N/A", "orders", "false", "2", "3", "true"]
    assert _starts(lines[2]) == _starts(lines[3]) == _starts(lines[4])
    assert lines[6].split()[-1] == "2"


def test_clients_filter_uses_raw_id():
    stats = parse_stats_response(SAMPLE)
    worker_lines = render_clients(stats, "worker").split("\n")
    assert worker_lines[3].split()[0] == "worker-1"
    assert worker_lines[5].split()[-1] == "1"
    na_lines = render_clients(stats, "N/A").split("\n")
    assert na_lines[4].split()[-1] == "0"


@pytest.fixture
def stats_server():
    responses = {}

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            status, body = responses.get(self.path, (404, b""))
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}", responses
    server.shutdown()
    server.server_close()


def test_fetch_stats_success(stats_server):
    url, responses = stats_server
    responses[STATS_PATH] = (200, json.dumps(SAMPLE).encode())
    assert fetch_stats(url, timeout=5) == parse_stats_response(SAMPLE)


def test_fetch_stats_not_available(stats_server):
    url, responses = stats_server
    responses[STATS_PATH] = (500, b"{}")
    with pytest.raises(StatsError) as info:
        fetch_stats(url, timeout=5)
    assert str(info.value) == NOT_AVAILABLE


def test_fetch_stats_server_error_flag(stats_server):
    url, responses = stats_server
    payload = {"error": True, "error_string": "store offline", "data": None}
    responses[STATS_PATH] = (200, json.dumps(payload).encode())
    with pytest.raises(StatsError, match="store offline"):
        fetch_stats(url, timeout=5)


def test_fetch_stats_connection_refused():
    with socket.socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    with pytest.raises(StatsError):
        fetch_stats(f"http://127.0.0.1:{port}", timeout=2)
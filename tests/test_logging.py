import json
import logging

from teamtemp.core.logging import JSONFormatter, bind_request, current_request_id, mask_url, reset_request

API = "/api/v1"


def _record(msg, *args, extra_data=None):
    record = logging.LogRecord("teamtemp.test", logging.INFO, __file__, 1, msg, args, None)
    if extra_data is not None:
        record.extra_data = extra_data
    return record


def test_mask_url():
    assert mask_url("postgresql://app:s3cret@db:5432/teamtemp") == "postgresql://app:***@db:5432/teamtemp"
    assert mask_url("sqlite:///./teamtemp.db") == "sqlite:///./teamtemp.db"


def test_formatter_masks_message_and_data():
    url = "postgresql://app:s3cret@db/teamtemp"
    record = _record("connecting to %s", url, extra_data={"url": url, "hosts": [url], "n": 3})

    line = JSONFormatter().format(record)
    entry = json.loads(line)

    assert "s3cret" not in line
    assert entry["message"] == "connecting to postgresql://app:***@db/teamtemp"
    assert entry["data"] == {"url": "postgresql://app:***@db/teamtemp", "hosts": ["postgresql://app:***@db/teamtemp"], "n": 3}


def test_formatter_includes_request_context():
    assert "request" not in json.loads(JSONFormatter().format(_record("idle")))

    token = bind_request("POST", "/api/v1/rounds/abc/responses", "req-42")
    try:
        entry = json.loads(JSONFormatter().format(_record("submission recorded")))
        assert current_request_id() == "req-42"
    finally:
        reset_request(token)

    assert entry["request"] == {"request_id": "req-42", "method": "POST", "path": "/api/v1/rounds/abc/responses"}
    assert current_request_id() is None


def test_bind_request_generates_id():
    token = bind_request("GET", "/")
    try:
        assert len(current_request_id()) == 12
    finally:
        reset_request(token)


def test_requests_are_logged_with_their_id(client, caplog):
    caplog.set_level(logging.INFO)
    caplog.handler.setFormatter(JSONFormatter())

    res = client.post(f"{API}/teams", json={"name": "Logged Team"}, headers={"X-Request-ID": "abc123"})
    assert res.status_code == 201

    # caplog.text se formatea al emitir, dentro del request
    entries = [e for e in map(json.loads, caplog.text.splitlines()) if e["logger"].startswith("teamtemp")]
    assert entries
    assert all(e["request"]["request_id"] == "abc123" for e in entries)
    assert current_request_id() is None

from sentrywire.response import SentryResponse


def test_ok_keeps_data():
    payload = {"status": "ok", "count": 2}
    resp = SentryResponse.ok(payload)
    assert resp.is_ok()
    assert resp.data == payload
    assert resp.message is None


def test_ok_simple_is_status_ok():
    resp = SentryResponse.ok_simple()
    assert resp.is_ok()
    assert resp.data == {"status": "ok"}


def test_error_keeps_message():
    resp = SentryResponse.error("policy not found")
    assert not resp.is_ok()
    assert resp.message == "policy not found"


def test_error_stringifies_exceptions():
    resp = SentryResponse.error(ValueError("bad input"))
    assert not resp.is_ok()
    assert resp.message == "bad input"


def test_ok_with_plain_string():
    resp = SentryResponse.ok("PONG")
    assert resp.is_ok()
    assert resp.data == "PONG"
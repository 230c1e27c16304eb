import json

import pytest

from sentrywire.acl import AclRequirement, Scope
from sentrywire.commands import CommandKind, SentryCommand
from sentrywire.protocol import SentryProtocol
from sentrywire.response import SentryResponse


@pytest.fixture
def proto():
    return SentryProtocol()


def _bulk_payload(frame):
    header, _, rest = frame.partition(b"\r\n")
    assert header.startswith(b"$")
    assert rest.endswith(b"\r\n")
    body = rest[:-2]
    assert int(header[1:]) == len(body)
    return body


def test_engine_name(proto):
    assert proto.engine_name() == "sentry"


def test_parse_command_delegates(proto):
    cmd = proto.parse_command(["policy", "get", "p"])
    assert cmd.kind is CommandKind.POLICY_GET
    assert cmd.name == "p"


def test_parse_command_rejects_unknown(proto):
    with pytest.raises(ValueError):
        proto.parse_command(["FOOBAR"])


def test_auth_token(proto):
    assert proto.auth_token(proto.parse_command(["AUTH", "token"])) == "token"
    assert proto.auth_token(proto.parse_command(["PING"])) is None


def test_acl_requirement_matches_command(proto):
    cmd = proto.parse_command(["EVALUATE", "{}"])
    assert proto.acl_requirement(cmd) == AclRequirement(
        namespace="sentry.evaluate.*", scope=Scope.READ
    )
    assert proto.acl_requirement(proto.parse_command(["JWKS"])).is_none


def test_ok_frame_bytes(proto):
    frame = proto.response_to_frame(SentryResponse.ok_simple())
    assert frame == b'$15\r\n{"status":"ok"}\r\n'


def test_error_frame_bytes(proto):
    frame = proto.response_to_frame(SentryResponse.error("unknown command: FOOBAR"))
    assert frame == b"-ERR unknown command: FOOBAR\r\n"


def test_error_frame_stays_single_line(proto):
    frame = proto.response_to_frame(SentryResponse.error("a\r\nb"))
    assert frame.count(b"\r\n") == 1
    assert frame.startswith(b"-ERR ")


def test_bulk_frame_round_trips_json(proto):
    data = {"status": "ok", "policies": ["a", "é"], "count": 2, "nested": {"x": None}}
    body = _bulk_payload(proto.response_to_frame(SentryResponse.ok(data)))
    assert json.loads(body.decode("utf-8")) == data


def test_unserialisable_data_gives_empty_bulk(proto):
    frame = proto.response_to_frame(SentryResponse.ok({"x": object()}))
    assert _bulk_payload(frame) == b""


def test_error_and_ok_responses(proto):
    err = proto.error_response("denied")
    assert not err.is_ok()
    assert err.message == "denied"
    ok = proto.ok_response()
    assert ok.is_ok()
    assert ok.data == {"status": "ok"}


@pytest.mark.asyncio
async def test_dispatch_ping(proto):
    resp = await proto.dispatch(object(), proto.parse_command(["PING"]), None)
    assert resp.data == "PONG"
    assert _bulk_payload(proto.response_to_frame(resp)) == b'"PONG"'


@pytest.mark.asyncio
async def test_dispatch_auth_is_error(proto):
    resp = await proto.dispatch(object(), SentryCommand(CommandKind.AUTH, token="token"), None)
    assert not resp.is_ok()
    assert proto.response_to_frame(resp).startswith(b"-ERR ")
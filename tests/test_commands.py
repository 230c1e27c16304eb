import pytest

from sentrywire.acl import AclRequirement, Scope
from sentrywire.commands import CommandKind, SentryCommand, parse_command


def test_parse_auth():
    cmd = parse_command(["AUTH", "my-token"])
    assert cmd.kind is CommandKind.AUTH
    assert cmd.token == "my-token"


def test_parse_policy_create():
    cmd = parse_command(["POLICY", "CREATE", "test", "{}"])
    assert cmd.kind is CommandKind.POLICY_CREATE
    assert cmd.name == "test"
    assert cmd.policy_json == "{}"


def test_parse_policy_list():
    assert parse_command(["POLICY", "LIST"]).kind is CommandKind.POLICY_LIST


def test_parse_evaluate():
    body = '{"principal":{"id":"x"}}'
    cmd = parse_command(["EVALUATE", body])
    assert cmd.kind is CommandKind.EVALUATE
    assert cmd.request_json == body


@pytest.mark.parametrize(
    "args, force, dryrun",
    [
        (["KEY", "ROTATE", "FORCE"], True, False),
        (["KEY", "ROTATE", "DRYRUN"], False, True),
        (["KEY", "ROTATE", "FORCE", "DRYRUN"], True, True),
        (["KEY", "ROTATE"], False, False),
    ],
)
def test_parse_key_rotate(args, force, dryrun):
    cmd = parse_command(args)
    assert cmd.kind is CommandKind.KEY_ROTATE
    assert (cmd.force, cmd.dryrun) == (force, dryrun)


@pytest.mark.parametrize(
    "args, kind",
    [
        (["JWKS"], CommandKind.JWKS),
        (["HEALTH"], CommandKind.HEALTH),
        (["PING"], CommandKind.PING),
        (["COMMAND"], CommandKind.COMMAND_LIST),
        (["HELLO"], CommandKind.HELLO),
        (["KEY", "INFO"], CommandKind.KEY_INFO),
    ],
)
def test_parse_simple(args, kind):
    assert parse_command(args).kind is kind


def test_parse_policy_history():
    cmd = parse_command(["POLICY", "HISTORY", "my-policy"])
    assert cmd.kind is CommandKind.POLICY_HISTORY
    assert cmd.name == "my-policy"


@pytest.mark.parametrize(
    "args",
    [
        ["FOOBAR"],
        [],
        ["AUTH"],
        ["POLICY"],
        ["POLICY", "UNKNOWN"],
        ["POLICY", "GET"],
        ["POLICY", "DELETE"],
        ["POLICY", "CREATE", "name"],
        ["POLICY", "UPDATE"],
        ["POLICY", "UPDATE", "name"],
        ["EVALUATE"],
        ["KEY"],
        ["KEY", "UNKNOWN"],
        ["POLICY", "HISTORY"],
    ],
)
def test_parse_errors(args):
    with pytest.raises(ValueError):
        parse_command(args)


def test_unknown_command_message():
    with pytest.raises(ValueError, match="unknown command: FOOBAR"):
        parse_command(["FOOBAR"])


def test_empty_command_message():
    with pytest.raises(ValueError, match="empty command"):
        parse_command([])


@pytest.mark.parametrize(
    "args, kind",
    [
        (["health"], CommandKind.HEALTH),
        (["Health"], CommandKind.HEALTH),
        (["policy", "list"], CommandKind.POLICY_LIST),
        (["key", "info"], CommandKind.KEY_INFO),
        (["jwks"], CommandKind.JWKS),
        (["evaluate", "{}"], CommandKind.EVALUATE),
        (["policy", "history", "x"], CommandKind.POLICY_HISTORY),
    ],
)
def test_parse_case_insensitive(args, kind):
    assert parse_command(args).kind is kind


def test_acl_requirements():
    assert SentryCommand(CommandKind.AUTH, token="x").acl_requirement() == AclRequirement()
    create = SentryCommand(CommandKind.POLICY_CREATE, name="x", policy_json="{}")
    assert create.acl_requirement() == AclRequirement(admin=True)
    evaluate = SentryCommand(CommandKind.EVALUATE, request_json="{}")
    assert evaluate.acl_requirement() == AclRequirement(
        namespace="sentry.evaluate.*", scope=Scope.READ
    )


def test_acl_all_commands_covered():
    public = {
        CommandKind.AUTH,
        CommandKind.HEALTH,
        CommandKind.PING,
        CommandKind.COMMAND_LIST,
        CommandKind.HELLO,
        CommandKind.KEY_INFO,
        CommandKind.JWKS,
    }
    admin = {
        CommandKind.POLICY_CREATE,
        CommandKind.POLICY_DELETE,
        CommandKind.POLICY_UPDATE,
        CommandKind.KEY_ROTATE,
    }
    policy_read = {
        CommandKind.POLICY_GET,
        CommandKind.POLICY_HISTORY,
        CommandKind.POLICY_LIST,
    }
    for kind in CommandKind:
        req = SentryCommand(kind).acl_requirement()
        if kind in public:
            assert req.is_none
        elif kind in admin:
            assert req.admin
        elif kind in policy_read:
            assert req.namespace == "sentry.policies.*"
            assert req.scope is Scope.READ
        else:
            assert req.namespace == "sentry.evaluate.*"
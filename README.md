# sentrywire

The protocol layer of the Sentry authorization policy engine. It turns
request arguments into typed commands, checks each command against the
caller's access grants, routes it to an engine object you supply and
shapes the reply for the wire. It also reads the server's TOML
configuration.

Only the Python standard library is used.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Parsing commands (`sentrywire.commands`)

`parse_command(args)` takes the arguments of one request and returns a
frozen `SentryCommand` whose `kind` is a `CommandKind` member. Command
and subcommand words are case-insensitive. A malformed request raises
`ValueError` with a usage message (for example `usage: AUTH <token>` or
`unknown command: FOOBAR`).

```python
from sentrywire.commands import CommandKind, parse_command

cmd = parse_command(["POLICY", "CREATE", "editors-write", '{"effect":"permit","priority":10}'])
assert cmd.kind is CommandKind.POLICY_CREATE
assert cmd.name == "editors-write"

rotate = parse_command(["key", "rotate", "force", "dryrun"])
assert rotate.force and rotate.dryrun
```

A command carries only the fields its kind uses: `token` (AUTH),
`name` and `policy_json` (POLICY subcommands), `request_json`
(EVALUATE), `force` and `dryrun` (KEY ROTATE).

| Command | Access needed |
|---|---|
| `AUTH <token>` | none |
| `HEALTH`, `PING`, `COMMAND`, `HELLO` | none |
| `KEY INFO`, `JWKS` | none |
| `POLICY CREATE <name> <json>` | admin |
| `POLICY UPDATE <name> <json>` | admin |
| `POLICY DELETE <name>` | admin |
| `KEY ROTATE [FORCE] [DRYRUN]` | admin |
| `POLICY GET <name>`, `POLICY LIST`, `POLICY HISTORY <name>` | read on `sentry.policies.*` |
| `EVALUATE <json>` | read on `sentry.evaluate.*` |

`SentryCommand.acl_requirement()` returns the `AclRequirement` for a
command.

## Access control (`sentrywire.acl`)

An `AclRequirement` is either empty (anyone), `admin=True`, or a
`namespace` plus a `Scope` (`Scope.READ`, `Scope.WRITE`), optionally
with a `tenant_override`.

An `AuthContext` describes the caller. `AuthContext.platform(tenant,
actor)` builds an identity that passes every check;
`AuthContext.tenant(tenant, actor, grants, expires_at)` builds one
limited to its `Grant`s. A grant's namespace may end in `*` to cover
everything with that prefix, and `*` alone covers all namespaces.

```python
from sentrywire.acl import AuthContext, Grant, Scope, check_dispatch_acl
from sentrywire.commands import parse_command

reader = AuthContext.tenant(
    "tenant-a",
    "reader",
    [Grant(namespace="sentry.policies.*", scopes=[Scope.READ])],
    None,
)
check_dispatch_acl(reader, parse_command(["POLICY", "LIST"]).acl_requirement())
```

`check_dispatch_acl` raises `AclError` (a `PermissionError`) when the
context is expired, lacks admin rights, acts for another tenant, or has
no grant for the namespace and scope. Passing `None` as the context
means authentication is not enforced, and every command is allowed.

## Responses (`sentrywire.response`)

`SentryResponse` holds either JSON-compatible `data` or an error
`message`. Build one with `SentryResponse.ok(data)`,
`SentryResponse.ok_simple()` (`{"status": "ok"}`) or
`SentryResponse.error(message)`; `is_ok()` tells them apart.

## Dispatching (`sentrywire.dispatch`)

`await dispatch(engine, cmd, auth_context)` checks access, runs the
command on `engine` and returns a `SentryResponse`. Access failures,
bad JSON arguments and any exception raised by the engine come back as
error responses; AUTH is always answered with an error, since it belongs
to the connection layer. The caller's actor (or `"anonymous"`) is passed
to the engine for mutating policy calls.

The engine is any object with these methods:

| Method | Kind |
|---|---|
| `policy_count()`, `policy_get(name)`, `policy_list()`, `key_info()`, `jwks()` | plain |
| `policy_create(policy, actor)`, `policy_update(name, updates, actor)`, `policy_delete(name, actor)`, `policy_history(name)`, `evaluate_request(request)`, `key_rotate(force, dryrun)` | coroutine |

Policies and evaluation requests are passed as decoded JSON objects
(dicts). For POLICY CREATE the `name` is set from the command and
`created_at` / `updated_at` are filled with the current Unix time.
Values the engine returns may be mappings or objects with attributes;
enum values such as an effect or decision are reported by their value.
`policy_to_json(policy)` gives the full document returned by POLICY GET
and POLICY HISTORY. `COMMAND_LIST` holds the names reported by COMMAND
and HELLO.

```python
from sentrywire.commands import parse_command
from sentrywire.dispatch import dispatch

response = await dispatch(engine, parse_command(["HEALTH"]), None)
if response.is_ok():
    print(response.data["policy_count"])
```

## Wire frames (`sentrywire.protocol`)

`SentryProtocol` bundles `parse_command`, `auth_token`,
`acl_requirement`, `dispatch`, `error_response` and `ok_response` for a
server loop. `response_to_frame(response)` encodes a reply as RESP3
bytes: data becomes a bulk string of compact JSON with sorted keys,
errors a simple error `-ERR <message>` with line breaks replaced by
spaces.

## Configuration (`sentrywire.config`)

`load_config(path)` reads a TOML file (`None` gives the defaults) and
`parse_config(text)` reads a string; `SentryServerConfig.from_dict`
takes already-decoded data. Every section is optional. The defaults are:
bind `0.0.0.0:6799`, embedded store in `./sentry-data`, ES256 signing,
90-day rotation, 30-day drain, 300-second decision TTL, 3600-second
scheduler interval, audit not required. The `[auth]` and `[audit]`
tables and `server.tls` are kept as plain dicts.

```toml
[server]
tcp_bind = "127.0.0.1:6799"

[store]
mode = "remote"
uri = "shroudb://token@localhost:6399"

[engine]
signing_algorithm = "ES256"
decision_ttl_secs = 120

[policies."editors-write"]
effect = "permit"
priority = 10
principal_roles = ["editor"]
resource_type = "document"
action_names = ["write"]
```

```python
from sentrywire.config import load_config

cfg = load_config("sentry.toml")
print(cfg.store.mode, cfg.engine.rotation_days)
```

Malformed TOML, wrongly typed or out-of-range values, an invalid bind
address or a policy seed without `effect` raise `ConfigError`.

## What this package does not do

It contains no policy engine: no policy storage, no evaluator, no
signing keys or JWKS generation and no key rotation scheduler. Those
come from the engine object you pass to `dispatch`. It also has no
network server or command-line program; `SentryProtocol` gives a server
loop what it needs, but accepting connections and handling AUTH is left
to the caller.
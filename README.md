# mqctl

`mqctl` is a small library and command-line tool for a message-queue cluster
that offers `commands`, `events` and `events_store` channels. It covers:

- **message views**: printing messages, commands and command responses as
  indented JSON, with each body shown as JSON where it parses as JSON and as
  decoded text otherwise;
- **requests**: turning command-line arguments into send, attach and receive
  requests, and events-store subscription start positions;
- **statistics**: fetching events-store channel and client statistics over
  HTTP and printing them as aligned tables;
- **manifests**: building cluster and connector manifests from deployment
  options and printing them as YAML.

## Installation

```console
pip install .
```

To run the tests:

```console
pip install ".[test]"
pytest
```

## Command line

The package installs an `mqctl` command:

```console
mqctl --help
mqctl create --help
```

`mqctl create cluster` (aliases `c`, `create`) reads the deployment flags,
loads any files they name, checks them and prints the cluster manifest as
YAML on standard output. See `mqctl create cluster --help` for the flags:
`--name`, `--namespace`, `--replicas`, `--key`, `--config-file`, and the
`--api-*`, `--grpc-*`, `--rest-*`, `--image*`, `--authentication-*`,
`--authorization-*`, `--tls-*`, `--license-*`, `--log-*`, `--health-*`,
`--notification-*`, `--queue-*`, `--store-*`, `--resources-*`,
`--routing-*`, `--volume-*` and `--node-selectors-keys key=value,...` groups.

```console
mqctl create cluster --name my-cluster --replicas 5 --grpc-expose NodePort
```

`mqctl create connector` (aliases `cn`, `con`) prints a connector manifest.
When `--type` is not given it asks on the terminal for one of `targets`,
`sources` or `bridges`. Without `--config` the connector's configuration is
`bindings: null`.

```console
mqctl create connector --type targets --config connector.yaml
```

Both commands accept `--dry-run`; the manifest is printed either way. Invalid
options print `Error: <message>` on standard error and exit with status 1.

## Library use

### Message views (`mqctl.messages`)

`decode_body` splits a body into JSON text and plain text: a body that is
valid JSON is kept as JSON; otherwise it is decoded from base64 where that
works and used as plain text where it does not.

```python
from mqctl.messages import message_view

view = message_view(id="1", channel="orders", body=b'{"qty": 3}', timeout=30)
print(view)            # four-space indented JSON; empty fields except id are left out
data = view.to_dict()  # the same fields, with the JSON body parsed
```

`command_response_view` shows the execution time only for executed
commands; `event_store_receive_view` adds a timestamp and sequence.
`format_timestamp` renders a moment to at most millisecond precision.

### Subscription start positions (`mqctl.subscription`)

An events-store subscription starts from new messages, the first message,
the last message, a sequence number, a UTC time (`YYYY-MM-DD HH:MM:SS`) or a
duration back from now:

```python
from mqctl.subscription import parse_duration, subscription_from_flags

option = subscription_from_flags(start_duration="1h30m")  # StartKind.TIME_DELTA, 5400.0
seconds = parse_duration("250ms")                           # 0.25
```

`subscription_from_flags` returns `None` when no flag is set;
`subscription_from_choice` builds a `SubscriptionOption` from a menu choice
and its typed value. `format_duration` renders seconds as `1h2m3.5s`.

### Send, attach and receive requests

`mqctl.publishing.parse_send_args` turns a channel kind (`ChannelKind`),
positional arguments and flags into a `SendRequest`. The body is the second
argument, or comes from the `body_loader` callable when `build` or
`from_file` is set. `SendRequest.bodies()` yields one message dict per copy,
each with a fresh id; `commands` requests always hold one message and carry a
timeout.

`mqctl.listening.parse_attach_args` builds an `AttachRequest` whose
`resources` are `<kind>/<channel>` names and whose `matches(text)` applies the
include and exclude regular expressions. `parse_receive_args` builds a
`ReceiveRequest`; auto response applies to `commands` only.

Missing channel or body arguments raise `mqctl.errors.CommandError`.

### Events-store statistics (`mqctl.stats`)

`fetch_stats(api_url)` requests `<api_url>/v1/stats/events_stores` and returns
a `StoreStats`; `parse_stats_response` does the same for a response already
in hand. `render_channels` and `render_clients` return aligned tables,
optionally filtered by part of a channel name or client id. `StatsError` is
raised when the server reports an error, answers with an HTTP error, or sends
something that cannot be understood.

### Deployment manifests

`mqctl.deploy.ClusterDeployOptions` collects the cluster settings and its
option blocks from `mqctl.endpoints`, `mqctl.security` and `mqctl.storage`.
`complete()` loads the files the options name and falls back to a given
license key and data; `validate()` raises `OptionsError` for the first bad
value; `to_manifest()` builds the manifest, leaving out blocks that are at
their defaults or not enabled; `manifest_to_yaml()` renders it.
`mqctl.connector.ConnectorDeployOptions` does the same for connectors.

## What it does not do

- It has no client for the message-queue server: it builds send, attach and
  receive requests and message views, but does not send, subscribe to or
  attach to channels itself. Only the statistics request talks to a server.
- It does not talk to Kubernetes: manifests are printed, not applied, and
  there are no commands to install operators, list or delete clusters and
  connectors, or choose a cluster context.
- It keeps no saved configuration and has no configuration wizard.
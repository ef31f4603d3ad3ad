"""Command line: create cluster and connector manifests."""

from __future__ import annotations

import argparse
import functools
import sys
from collections.abc import Sequence

from .connector import ConnectorDeployOptions
from .deploy import ClusterDeployOptions, manifest_to_yaml
from .endpoints import (
    DEFAULT_API_PORT,
    DEFAULT_EXPOSE,
    DEFAULT_GRPC_PORT,
    DEFAULT_IMAGE,
    DEFAULT_PULL_POLICY,
    DEFAULT_REST_PORT,
    ApiOptions,
    GrpcOptions,
    ImageOptions,
    RestOptions,
)
from .errors import CommandError
from .security import AuthenticationOptions, AuthorizationOptions, LicenseOptions, TlsOptions
from .storage import (
    HealthOptions,
    LogOptions,
    NodeSelectorOptions,
    NotificationOptions,
    QueueOptions,
    ResourceOptions,
    RoutingOptions,
    StoreOptions,
    VolumeOptions,
)


def _key_values(text: str) -> dict[str, str]:
    pairs = {}
    for item in text.split(","):
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"{item} must be formatted as key=value")
        pairs[key] = value
    return pairs


class _MergeKeyValues(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        merged = dict(getattr(namespace, self.dest) or {})
        merged.update(values)
        setattr(namespace, self.dest, merged)


def _flag(parser, name, help_text, short=None):
    names = [f"-{short}", f"--{name}"] if short else [f"--{name}"]
    parser.add_argument(*names, action="store_true", help=help_text)


def _int(parser, name, default, help_text, short=None):
    names = [f"-{short}", f"--{name}"] if short else [f"--{name}"]
    parser.add_argument(*names, type=int, default=default, help=help_text)


def _text(parser, name, default, help_text, short=None, dest=None):
    names = [f"-{short}", f"--{name}"] if short else [f"--{name}"]
    extra = {"dest": dest} if dest else {}
    parser.add_argument(*names, default=default, help=help_text, **extra)


def _add_cluster_flags(p: argparse.ArgumentParser) -> None:
    _text(p, "config-file", "", "set kubemq config file", "c")
    _text(p, "name", "kubemq-cluster", "set kubemq cluster name")
    _text(p, "namespace", "kubemq", "set kubemq cluster namespace", "n")
    _text(p, "key", "", "set kubemq license key", "k")
    _text(p, "statefulset-config-data", "", "set kubemq cluster statefulset configuration data")
    _flag(p, "standalone", "set kubemq cluster standalone mode")
    _int(p, "replicas", 3, "set replicas", "r")
    _flag(p, "dry-run", "generate cluster configuration without execute")

    _flag(p, "api-disabled", "disable Api interface")
    _int(p, "api-port", DEFAULT_API_PORT, "set api port value")
    _text(p, "api-expose", DEFAULT_EXPOSE, "set api port service type (ClusterIP,NodePort,LoadBalancer)")
    _int(p, "api-node-port", 0, "set api node port value")

    _flag(p, "authentication-enabled", "enable authentication configuration")
    _text(p, "authentication-public-key-data", "", "set authentication public key data")
    _text(p, "authentication-public-key-file", "", "set authentication public key filename")
    _text(p, "authentication-public-key-type", "", "set authentication public key type")

    _flag(p, "authorization-enabled", "enable authorization configuration")
    _text(p, "authorization-policy-data", "", "set authorization policy data")
    _text(p, "authorization-policy-file", "", "set authorization policy filename")
    _text(p, "authorization-url", "", "set authorization policy loading url")
    _int(p, "authorization-auto-reload", 0, "set authorization auto policy loading time interval in minutes")

    for kind, port in (("grpc", DEFAULT_GRPC_PORT), ("rest", DEFAULT_REST_PORT)):
        _flag(p, f"{kind}-disabled", f"disable {kind} interface")
        _int(p, f"{kind}-port", port, f"set {kind} port value")
        _text(p, f"{kind}-expose", DEFAULT_EXPOSE, f"set {kind} port service type (ClusterIP,NodePort,LoadBalancer)")
        _int(p, f"{kind}-node-port", 0, f"set {kind} node port value")
        _int(p, f"{kind}-buffer-size", 0, "set subscribe message / requests buffer size to use on server")
        _int(p, f"{kind}-body-limit", 0, "set Max size of payload in bytes")

    _flag(p, "health-enabled", "enable resources configuration")
    _int(p, "health-initial-delay", 10, "set health prob initial delay seconds")
    _int(p, "health-period-seconds", 10, "set health prob period seconds")
    _int(p, "health-timout-seconds", 5, "set health prob timeout seconds")
    _int(p, "health-success-threshold", 1, "set health prob success threshold")
    _int(p, "health-failure-threshold", 12, "set health prob failure threshold")

    _text(p, "image", DEFAULT_IMAGE, "set image registry/repository:tag")
    _text(p, "image-pull-policy", DEFAULT_PULL_POLICY, "set image pull policy")

    _text(p, "license-data", "", "set license data")
    _text(p, "license-file", "", "set license file")

    _int(p, "log-level", 2, "set log level")
    _text(p, "log-file", "", "set log filename")

    p.add_argument(
        "--node-selectors-keys",
        type=_key_values,
        action=_MergeKeyValues,
        default={},
        help="set statefulset node selectors key-value (map)",
    )

    _flag(p, "notification-enabled", "set notification enable")
    _text(p, "notification-prefix", "", "set notification channel prefix")
    _flag(p, "notification-log", "set log notification to std-out")

    _int(p, "queue-max-receive-messages-request", 1024, "set max of sending / receiving batch of queue message")
    _int(p, "queue-max-wait-timeout-seconds", 3600, "set max wait timeout allowed for message")
    _int(p, "queue-max-expiration-seconds", 43200, "set max expiration allowed for message")
    _int(p, "queue-max-delay-seconds", 43200, "set max delay seconds allowed for message")
    _int(p, "queue-max-requeue", 1024, "set max retires to receive message before discard")
    _int(p, "queue-max-visibility-seconds", 43200, "set max time of hold received message before returning to queue")
    _int(p, "queue-default-visibility-seconds", 60, "set default time of hold received message before returning to queue")
    _int(p, "queue-default-wait-timeout-seconds", 1, "set default time to wait for a message in a queue")

    _flag(p, "resources-enabled", "enable resources configuration")
    _text(p, "resources-limits-cpu", "2", "set resources limits cpu")
    _text(p, "resources-limits-memory", "2Gi", "set resources limits memory")
    _text(p, "resources-limits-ephemeral-storage", "", "set resources limits ephemeral-storage")
    _text(p, "resources-requests-cpu", "2", "set resources requests cpu")
    # Both flags below share one destination; its default is empty.
    _text(p, "resources-requests-memory", "", "set resources request memory")
    _text(p, "resources-requests-ephemeral-storage", "", "set resources request ephemeral-storage",
          dest="resources_requests_memory")

    _text(p, "routing-data", "", "set routing data")
    _text(p, "routing-file", "", "set routing filename")
    _text(p, "routing-url", "", "set routing loading url")
    _int(p, "routing-auto-reload", 0, "set routing auto loading time interval in minutes")

    _flag(p, "store-clean", "set clear persistence data on start-up")
    _text(p, "store-path", "./store", "set persistence file path")
    _int(p, "store-max-channels", 0, "set limit number of persistence channels")
    _int(p, "store-max-subscribers", 0, "set limit of subscribers per channel")
    _int(p, "store-max-messages", 0, "set limit of messages per channel")
    _int(p, "store-max-channel-size", 0, "set limit size of channel in bytes")
    _int(p, "store-messages-retention-minutes", 1440, "set message retention time in minutes")
    _int(p, "store-purge-inactive-minutes", 1440, "set time in minutes of channel inactivity to delete")

    _flag(p, "tls-enabled", "enable tls configuration")
    _text(p, "tls-cert-data", "", "set tls certificate data")
    _text(p, "tls-cert-file", "", "set tls certificate filename")
    _text(p, "tls-key-data", "", "set tls key data")
    _text(p, "tls-key-file", "", "set tls key filename")
    _text(p, "tls-ca-data", "", "set tls ca certificate data")
    _text(p, "tls-ca-file", "", "set tls ca certificate filename")

    _text(p, "volume-size", "", "set persisted volume size", "v")
    _text(p, "volume-storage-class", "", "set persisted volume storage class")


def _add_connector_flags(p: argparse.ArgumentParser) -> None:
    _text(p, "name", "kubemq-connector", "set kubemq connector name")
    _text(p, "namespace", "kubemq", "set kubemq connector namespace", "n")
    _int(p, "port", 0, "set kubemq connector api port", "p")
    _int(p, "replicas", 1, "set kubemq connector replicas", "r")
    _text(p, "type", "", "set kubemq connector type: targets/sources/bridges", "t")
    _text(p, "image", "", "set kubemq connector docker image")
    _text(p, "service-type", "ClusterIP", "set kubemq connector api service type")
    _text(p, "config", "", "set kubemq connector config file name", "c")
    _flag(p, "dry-run", "generate connector configuration without execute")


def _cluster_options(a: argparse.Namespace) -> ClusterDeployOptions:
    return ClusterDeployOptions(
        name=a.name,
        namespace=a.namespace,
        replicas=a.replicas,
        standalone=a.standalone,
        config_filename=a.config_file,
        statefulset_config_data=a.statefulset_config_data,
        key=a.key,
        api=ApiOptions(a.api_disabled, a.api_port, a.api_expose, a.api_node_port),
        authentication=AuthenticationOptions(
            a.authentication_enabled,
            a.authentication_public_key_data,
            a.authentication_public_key_file,
            a.authentication_public_key_type,
        ),
        authorization=AuthorizationOptions(
            a.authorization_enabled,
            a.authorization_policy_data,
            a.authorization_policy_file,
            a.authorization_url,
            a.authorization_auto_reload,
        ),
        grpc=GrpcOptions(
            a.grpc_disabled, a.grpc_port, a.grpc_expose, a.grpc_node_port,
            a.grpc_buffer_size, a.grpc_body_limit,
        ),
        health=HealthOptions(
            a.health_enabled, a.health_initial_delay, a.health_period_seconds,
            a.health_timout_seconds, a.health_success_threshold, a.health_failure_threshold,
        ),
        image=ImageOptions(a.image, a.image_pull_policy),
        license=LicenseOptions(a.license_data, a.license_file),
        log=LogOptions(a.log_level, a.log_file),
        node_selector=NodeSelectorOptions(dict(a.node_selectors_keys)),
        notification=NotificationOptions(
            a.notification_enabled, a.notification_prefix, a.notification_log
        ),
        queue=QueueOptions(
            a.queue_max_receive_messages_request,
            a.queue_max_wait_timeout_seconds,
            a.queue_max_expiration_seconds,
            a.queue_max_delay_seconds,
            a.queue_max_requeue,
            a.queue_max_visibility_seconds,
            a.queue_default_visibility_seconds,
            a.queue_default_wait_timeout_seconds,
        ),
        resources=ResourceOptions(
            a.resources_enabled,
            a.resources_limits_cpu,
            a.resources_limits_memory,
            a.resources_limits_ephemeral_storage,
            a.resources_requests_cpu,
            a.resources_requests_memory,
            "",
        ),
        rest=RestOptions(
            a.rest_disabled, a.rest_port, a.rest_expose, a.rest_node_port,
            a.rest_buffer_size, a.rest_body_limit,
        ),
        routing=RoutingOptions(a.routing_data, a.routing_file, a.routing_url, a.routing_auto_reload),
        store=StoreOptions(
            a.store_clean, a.store_path, a.store_max_channels, a.store_max_subscribers,
            a.store_max_messages, a.store_max_channel_size,
            a.store_messages_retention_minutes, a.store_purge_inactive_minutes,
        ),
        tls=TlsOptions(
            a.tls_enabled, a.tls_cert_data, a.tls_cert_file, a.tls_key_data,
            a.tls_key_file, a.tls_ca_data, a.tls_ca_file,
        ),
        volume=VolumeOptions(a.volume_size, a.volume_storage_class),
    )


def _prompt_choice(options: Sequence[str]) -> str:
    print("Choose Connector type:")
    for number, option in enumerate(options, start=1):
        print(f"  {number}) {option}")
    try:
        answer = input("> ").strip()
    except (EOFError, OSError):
        return ""
    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return options[int(answer) - 1]
    return answer


def _create_cluster(args: argparse.Namespace) -> int:
    options = _cluster_options(args)
    options.complete()
    options.validate()
    print(manifest_to_yaml(options.to_manifest()), end="")
    return 0


def _create_connector(args: argparse.Namespace) -> int:
    options = ConnectorDeployOptions(
        name=args.name,
        namespace=args.namespace,
        port=args.port,
        replicas=args.replicas,
        connector_type=args.type,
        image=args.image,
        service_type=args.service_type,
        config_file=args.config,
    )
    options.complete(_prompt_choice)
    options.validate()
    print(manifest_to_yaml(options.to_manifest()), end="")
    return 0


def _show_help(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    parser.print_help()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for all commands."""
    parser = argparse.ArgumentParser(prog="mqctl", description="Kubemq command line tool")
    parser.set_defaults(handler=functools.partial(_show_help, parser))
    commands = parser.add_subparsers(dest="command")

    create = commands.add_parser(
        "create", aliases=["c"], help="Executes Kubemq create commands",
        description="Executes Kubemq create commands",
    )
    create.set_defaults(handler=functools.partial(_show_help, create))
    targets = create.add_subparsers(dest="target")

    cluster = targets.add_parser(
        "cluster", aliases=["c", "create"], help="Create a Kubemq cluster command",
        description="Create command allows to deploy a Kubemq cluster with configuration options",
    )
    _add_cluster_flags(cluster)
    cluster.set_defaults(handler=_create_cluster)

    connector = targets.add_parser(
        "connector", aliases=["cn", "con"], help="Create a Kubemq connector command",
        description="Create command allows to deploy a Kubemq connector with configuration options",
    )
    _add_connector_flags(connector)
    connector.set_defaults(handler=_create_connector)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the exit status."""
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except CommandError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
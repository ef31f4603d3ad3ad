"""Queue, store, volume, logging, resource and other cluster deployment options."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .endpoints import OptionsError


@dataclass
class QueueOptions:
    """Queue limits and defaults; left out of the spec while at its defaults."""

    max_receive_messages_request: int = 1024
    max_wait_timeout_seconds: int = 3600
    max_expiration_seconds: int = 43200
    max_delay_seconds: int = 43200
    max_requeues: int = 1024
    max_visibility_seconds: int = 43200
    default_visibility_seconds: int = 60
    default_wait_timeout_seconds: int = 1

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == QueueOptions():
            return None
        return {
            "maxReceiveMessagesRequest": self.max_receive_messages_request,
            "maxWaitTimeoutSeconds": self.max_wait_timeout_seconds,
            "maxExpirationSeconds": self.max_expiration_seconds,
            "maxDelaySeconds": self.max_delay_seconds,
            "maxReQueues": self.max_requeues,
            "maxVisibilitySeconds": self.max_visibility_seconds,
            "defaultVisibilitySeconds": self.default_visibility_seconds,
            "defaultWaitTimeoutSeconds": self.default_wait_timeout_seconds,
        }


@dataclass
class StoreOptions:
    """Persistence settings; left out of the spec while at its defaults."""

    clean: bool = False
    path: str = "./store"
    max_channels: int = 0
    max_subscribers: int = 0
    max_messages: int = 0
    max_channel_size: int = 0
    messages_retention_minutes: int = 1440
    purge_inactive_minutes: int = 1440

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == StoreOptions():
            return None
        return {
            "clean": self.clean,
            "path": self.path,
            "maxChannels": self.max_channels,
            "maxSubscribers": self.max_subscribers,
            "maxMessages": self.max_messages,
            "maxChannelSize": self.max_channel_size,
            "messagesRetentionMinutes": self.messages_retention_minutes,
            "purgeInactiveMinutes": self.purge_inactive_minutes,
        }


@dataclass
class VolumeOptions:
    """Persisted volume size and storage class."""

    size: str = ""
    storage_class: str = ""

    def spec(self) -> dict | None:
        """The spec section, or None when neither size nor class is set."""
        if self == VolumeOptions():
            return None
        return {"size": self.size, "storageClass": self.storage_class}


@dataclass
class LogOptions:
    """Server log level and log file."""

    level: int = 2
    file: str = ""

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == LogOptions():
            return None
        return {"level": self.level, "file": self.file}


@dataclass
class NotificationOptions:
    """Server notifications, published on prefixed channels."""

    enabled: bool = False
    prefix: str = ""
    log: bool = False

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {"enabled": self.enabled, "prefix": self.prefix, "log": self.log}


@dataclass
class ResourceOptions:
    """CPU, memory and ephemeral storage limits and requests."""

    enabled: bool = False
    limits_cpu: str = "2"
    limits_memory: str = "2Gi"
    limits_ephemeral_storage: str = ""
    requests_cpu: str = "2"
    # The requests ephemeral-storage flag writes to requests memory, so the
    # memory request ends up empty unless set.
    requests_memory: str = ""
    requests_ephemeral_storage: str = ""

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {
            "limitsCpu": self.limits_cpu,
            "limitsMemory": self.limits_memory,
            "limitsEphemeralStorage": self.limits_ephemeral_storage,
            "requestsCpu": self.requests_cpu,
            "requestsMemory": self.requests_memory,
            "requestsEphemeralStorage": self.requests_ephemeral_storage,
        }


@dataclass
class NodeSelectorOptions:
    """Node selector key-value pairs for the stateful set."""

    keys: dict[str, str] = field(default_factory=dict)

    def spec(self) -> dict | None:
        if not self.keys:
            return None
        return {"keys": dict(self.keys)}


@dataclass
class HealthOptions:
    """Health probe timing and thresholds."""

    enabled: bool = False
    initial_delay_seconds: int = 10
    period_seconds: int = 10
    timeout_seconds: int = 5
    success_threshold: int = 1
    failure_threshold: int = 12

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {
            "enabled": True,
            "initialDelaySeconds": self.initial_delay_seconds,
            "periodSeconds": self.period_seconds,
            "timeoutSeconds": self.timeout_seconds,
            "successThreshold": self.success_threshold,
            "failureThreshold": self.failure_threshold,
        }


@dataclass
class RoutingOptions:
    """Routing rules, given inline, from a file or loaded from a URL."""

    routing_data: str = ""
    routing_filename: str = ""
    url: str = ""
    auto_reload: int = 0

    def complete(self) -> None:
        """Load the routing data from its file when one is given."""
        if not self.routing_filename:
            return
        try:
            self.routing_data = Path(self.routing_filename).read_text(encoding="utf-8")
        except OSError as exc:
            raise OptionsError(f"error loading routing public key data: {exc}") from exc

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == RoutingOptions():
            return None
        return {
            "data": self.routing_data,
            "url": self.url,
            "autoReload": self.auto_reload,
        }
"""Cluster deployment options and the cluster manifest built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .endpoints import ApiOptions, GrpcOptions, ImageOptions, OptionsError, RestOptions
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

API_VERSION = "core.k8s.kubemq.io/v1alpha1"
CLUSTER_KIND = "KubemqCluster"
DEFAULT_NAME = "kubemq-cluster"
DEFAULT_NAMESPACE = "kubemq"
DEFAULT_REPLICAS = 3


def _is_blank(value) -> bool:
    return value is None or value is False or (isinstance(value, str) and value == "")


@dataclass
class ClusterDeployOptions:
    """Everything that goes into a cluster manifest."""

    name: str = DEFAULT_NAME
    namespace: str = DEFAULT_NAMESPACE
    replicas: int = DEFAULT_REPLICAS
    standalone: bool = False
    config_data: str = ""
    config_filename: str = ""
    statefulset_config_data: str = ""
    key: str = ""
    api: ApiOptions = field(default_factory=ApiOptions)
    authentication: AuthenticationOptions = field(default_factory=AuthenticationOptions)
    authorization: AuthorizationOptions = field(default_factory=AuthorizationOptions)
    grpc: GrpcOptions = field(default_factory=GrpcOptions)
    health: HealthOptions = field(default_factory=HealthOptions)
    image: ImageOptions = field(default_factory=ImageOptions)
    license: LicenseOptions = field(default_factory=LicenseOptions)
    log: LogOptions = field(default_factory=LogOptions)
    node_selector: NodeSelectorOptions = field(default_factory=NodeSelectorOptions)
    notification: NotificationOptions = field(default_factory=NotificationOptions)
    queue: QueueOptions = field(default_factory=QueueOptions)
    resources: ResourceOptions = field(default_factory=ResourceOptions)
    rest: RestOptions = field(default_factory=RestOptions)
    routing: RoutingOptions = field(default_factory=RoutingOptions)
    store: StoreOptions = field(default_factory=StoreOptions)
    tls: TlsOptions = field(default_factory=TlsOptions)
    volume: VolumeOptions = field(default_factory=VolumeOptions)

    def complete(self, license_key: str = "", license_data: str = "") -> None:
        """Load file contents and fall back to the configured license key and data."""
        if self.config_filename:
            try:
                self.config_data = Path(self.config_filename).read_text(encoding="utf-8")
            except OSError as exc:
                raise OptionsError(f"error config file data: {exc}") from exc
        self.authentication.complete()
        self.authorization.complete()
        self.license.complete()
        self.routing.complete()
        self.tls.complete()
        if not self.license.license_data and license_data:
            self.license.license_data = license_data
        if not self.key and license_key:
            self.key = license_key

    def validate(self) -> None:
        """Raise OptionsError for the first invalid option."""
        if not self.name:
            raise OptionsError(
                "error setting deploy configuration, missing kubemq cluster name"
            )
        if not self.namespace:
            raise OptionsError(
                "error setting deploy configuration, missing kubemq cluster namespace"
            )
        self.api.validate()
        self.authentication.validate()
        self.authorization.validate()
        self.grpc.validate()
        self.rest.validate()
        self.tls.validate()

    def to_manifest(self) -> dict:
        """The cluster resource; sections left at their defaults are omitted."""
        sections = [
            ("replicas", self.replicas),
            ("license", self.license.spec()),
            ("configData", self.config_data),
            ("key", self.key),
            ("standalone", self.standalone),
            ("volume", self.volume.spec()),
            ("image", self.image.spec()),
            ("api", self.api.spec()),
            ("rest", self.rest.spec()),
            ("grpc", self.grpc.spec()),
            ("tls", self.tls.spec()),
            ("resources", self.resources.spec()),
            ("nodeSelectors", self.node_selector.spec()),
            ("authentication", self.authentication.spec()),
            ("authorization", self.authorization.spec()),
            ("health", self.health.spec()),
            ("routing", self.routing.spec()),
            ("log", self.log.spec()),
            ("notification", self.notification.spec()),
            ("store", self.store.spec()),
            ("queue", self.queue.spec()),
            ("statefulSetConfigData", self.statefulset_config_data),
        ]
        spec = {key: value for key, value in sections if not _is_blank(value)}
        return {
            "apiVersion": API_VERSION,
            "kind": CLUSTER_KIND,
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": spec,
        }


def manifest_to_yaml(manifest: dict) -> str:
    """Render a manifest as block-style YAML, keeping key order."""
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)
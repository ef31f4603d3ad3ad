"""Connector deployment options and the connector manifest built from them."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .endpoints import OptionsError

API_VERSION = "core.k8s.kubemq.io/v1alpha1"
CONNECTOR_KIND = "KubemqConnector"
CONNECTOR_TYPES = ("targets", "sources", "bridges")
SERVICE_TYPES = ("ClusterIP", "NodePort", "LoadBalancer")
DEFAULT_NAME = "kubemq-connector"
DEFAULT_NAMESPACE = "kubemq"
EMPTY_CONFIG = "bindings: null"


@dataclass
class ConnectorDeployOptions:
    """Everything that goes into a connector manifest."""

    name: str = DEFAULT_NAME
    namespace: str = DEFAULT_NAMESPACE
    port: int = 0
    replicas: int = 1
    connector_type: str = ""
    image: str = ""
    service_type: str = "ClusterIP"
    config_file: str = ""
    config_data: str = ""

    def complete(self, choose_type: Callable[[Sequence[str]], str] | None = None) -> None:
        """Ask for a missing type, load the config file and default the config."""
        if not self.connector_type and choose_type is not None:
            self.connector_type = choose_type(CONNECTOR_TYPES) or ""
        if self.config_file:
            try:
                self.config_data = Path(self.config_file).read_text(encoding="utf-8")
            except OSError as exc:
                raise OptionsError(f"error reading config file data: {exc}") from exc
        if not self.config_data:
            self.config_data = EMPTY_CONFIG

    def validate(self) -> None:
        """Raise OptionsError for the first invalid option."""
        if self.replicas < 0:
            raise OptionsError("invalid replicas value, must be greater than 0")
        if self.port < 0:
            raise OptionsError("invalid port value, must be greater than 0")
        if self.connector_type not in CONNECTOR_TYPES:
            raise OptionsError(
                "invalid connector type, must be one of targets/sources/bridges"
            )
        if self.service_type not in SERVICE_TYPES:
            raise OptionsError(
                "invalid service type, must be one of ClusterIP/NodePort/LoadBalancer"
            )
        if not self.config_data:
            raise OptionsError(
                "invalid configuration data, cannot be empty configuration"
            )

    def to_manifest(self) -> dict:
        """The connector resource, named after its name and type."""
        return {
            "apiVersion": API_VERSION,
            "kind": CONNECTOR_KIND,
            "metadata": {
                "name": f"{self.name}-{self.connector_type}",
                "namespace": self.namespace,
            },
            "spec": {
                "replicas": self.replicas,
                "type": self.connector_type,
                "image": self.image,
                "config": self.config_data,
                "nodePort": self.port,
                "serviceType": self.service_type,
            },
        }
"""Network interface and image options of a cluster deployment."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import CommandError

SERVICE_TYPES = {
    "clusterip": "ClusterIP",
    "nodeport": "NodePort",
    "loadbalancer": "LoadBalancer",
}

DEFAULT_EXPOSE = "ClusterIP"
DEFAULT_API_PORT = 8080
DEFAULT_GRPC_PORT = 50000
DEFAULT_REST_PORT = 9090
DEFAULT_IMAGE = "docker.io/kubemq/kubemq:latest"
DEFAULT_PULL_POLICY = "Always"
# A deployment whose image options equal these leaves the image unset.
_UNSET_IMAGE = "docker.io"


class OptionsError(CommandError):
    """Deployment options are invalid or could not be completed."""


def validate_expose(flag: str, value: str) -> None:
    """Reject a service type other than ClusterIP, NodePort or LoadBalancer."""
    if value and value.lower() not in SERVICE_TYPES:
        raise OptionsError(f"invalid {flag} value: {value}")


@dataclass
class ApiOptions:
    """The API interface; left out of the spec while at its defaults."""

    disabled: bool = False
    port: int = DEFAULT_API_PORT
    expose: str = DEFAULT_EXPOSE
    node_port: int = 0

    def validate(self) -> None:
        validate_expose("api-expose", self.expose)

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == ApiOptions():
            return None
        return {
            "disabled": self.disabled,
            "port": self.port,
            "expose": self.expose,
            "nodePort": self.node_port,
        }


@dataclass
class GrpcOptions:
    """The gRPC interface; left out of the spec while at its defaults."""

    disabled: bool = False
    port: int = DEFAULT_GRPC_PORT
    expose: str = DEFAULT_EXPOSE
    node_port: int = 0
    buffer_size: int = 0
    body_limit: int = 0

    def validate(self) -> None:
        validate_expose("grpc-expose", self.expose)

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == GrpcOptions():
            return None
        return {
            "disabled": self.disabled,
            "port": self.port,
            "expose": self.expose,
            "nodePort": self.node_port,
            "bufferSize": self.buffer_size,
            "bodyLimit": self.body_limit,
        }


@dataclass
class RestOptions:
    """The REST interface; left out of the spec while at its defaults."""

    disabled: bool = False
    port: int = DEFAULT_REST_PORT
    expose: str = DEFAULT_EXPOSE
    node_port: int = 0
    buffer_size: int = 0
    body_limit: int = 0

    def validate(self) -> None:
        validate_expose("rest-expose", self.expose)

    def spec(self) -> dict | None:
        """The spec section, or None when every option is at its default."""
        if self == RestOptions():
            return None
        return {
            "disabled": self.disabled,
            "port": self.port,
            "expose": self.expose,
            "nodePort": self.node_port,
            "bufferSize": self.buffer_size,
            "bodyLimit": self.body_limit,
        }


@dataclass
class ImageOptions:
    """The container image and its pull policy."""

    image: str = DEFAULT_IMAGE
    pull_policy: str = DEFAULT_PULL_POLICY

    def spec(self) -> dict | None:
        """The spec section, or None for the bare registry with the default policy."""
        if self.image == _UNSET_IMAGE and self.pull_policy == DEFAULT_PULL_POLICY:
            return None
        return {"image": self.image, "pullPolicy": self.pull_policy}
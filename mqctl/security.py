"""Authentication, authorization, TLS and license options of a cluster deployment."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .endpoints import OptionsError


def _read(path: str, what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise OptionsError(f"error loading {what}: {exc}") from exc


@dataclass
class AuthenticationOptions:
    """Public key used to verify client tokens."""

    enabled: bool = False
    public_key_data: str = ""
    public_key_filename: str = ""
    public_key_type: str = ""

    def complete(self) -> None:
        """Load the public key from its file when one is given."""
        if self.enabled and self.public_key_filename:
            self.public_key_data = _read(
                self.public_key_filename, "authentication public key data"
            )

    def validate(self) -> None:
        if not self.enabled:
            return
        if not self.public_key_data:
            raise OptionsError(
                "error setting authentication configuration, missing publilc key data"
            )
        if not self.public_key_type:
            raise OptionsError(
                "error setting authentication configuration, missing public key type"
            )

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {"key": self.public_key_data, "type": self.public_key_type}


@dataclass
class AuthorizationOptions:
    """Access policy, given inline, from a file or loaded from a URL."""

    enabled: bool = False
    policy_data: str = ""
    policy_filename: str = ""
    url: str = ""
    auto_reload: int = 0

    def complete(self) -> None:
        """Load the policy from its file when one is given."""
        if self.enabled and self.policy_filename:
            self.policy_data = _read(
                self.policy_filename, "authorization public key data"
            )

    def validate(self) -> None:
        if self.enabled and not self.policy_data and not self.url:
            raise OptionsError(
                "error setting authorization configuration, "
                "no ploicy data or policy url was set"
            )

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {
            "policy": self.policy_data,
            "url": self.url,
            "autoReload": self.auto_reload,
        }


@dataclass
class TlsOptions:
    """Server certificate, key and optional CA certificate."""

    enabled: bool = False
    cert_data: str = ""
    cert_filename: str = ""
    key_data: str = ""
    key_filename: str = ""
    ca_data: str = ""
    ca_filename: str = ""

    def complete(self) -> None:
        """Load certificate, key and CA from their files when given."""
        if not self.enabled:
            return
        if self.cert_filename:
            self.cert_data = _read(self.cert_filename, "tls certifcate data")
        if self.key_filename:
            self.key_data = _read(self.key_filename, "tls key data")
        if self.ca_filename:
            self.ca_data = _read(self.ca_filename, "tls ca tls data")

    def validate(self) -> None:
        if not self.enabled:
            return
        if not self.cert_data:
            raise OptionsError("error setting tls configuration, missing certifcate data")
        if not self.key_data:
            raise OptionsError("error setting tls configuration, missing key data")

    def spec(self) -> dict | None:
        if not self.enabled:
            return None
        return {"cert": self.cert_data, "key": self.key_data, "ca": self.ca_data}


@dataclass
class LicenseOptions:
    """License data, inline or from a file."""

    license_data: str = ""
    license_filename: str = ""

    def complete(self) -> None:
        """Load the license from its file when one is given."""
        if self.license_filename:
            self.license_data = _read(self.license_filename, "license file data")

    def spec(self) -> str | None:
        """The license text, or None when neither data nor a file was given."""
        if not self.license_data and not self.license_filename:
            return None
        return self.license_data
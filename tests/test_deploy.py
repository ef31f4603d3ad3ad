import pytest
import yaml

from mqctl.deploy import ClusterDeployOptions, manifest_to_yaml
from mqctl.endpoints import DEFAULT_IMAGE, ApiOptions, OptionsError
from mqctl.security import TlsOptions
from mqctl.storage import NodeSelectorOptions


def test_default_manifest_identity():
    manifest = ClusterDeployOptions().to_manifest()
    assert manifest["kind"] == "KubemqCluster"
    assert manifest["apiVersion"] == "core.k8s.kubemq.io/v1alpha1"
    assert manifest["metadata"] == {"name": "kubemq-cluster", "namespace": "kubemq"}
    assert manifest["spec"]["replicas"] == 3


def test_default_manifest_omits_default_sections():
    spec = ClusterDeployOptions().to_manifest()["spec"]
    for section in ("api", "grpc", "rest", "queue", "store", "log", "tls", "volume"):
        assert section not in spec


def test_default_image_is_always_written():
    spec = ClusterDeployOptions().to_manifest()["spec"]
    assert spec["image"] == {"image": DEFAULT_IMAGE, "pullPolicy": "Always"}


def test_changed_api_port_is_written():
    options = ClusterDeployOptions(api=ApiOptions(port=9000))
    assert options.to_manifest()["spec"]["api"]["port"] == 9000


def test_node_selectors_are_written():
    options = ClusterDeployOptions(node_selector=NodeSelectorOptions({"zone": "a"}))
    assert options.to_manifest()["spec"]["nodeSelectors"] == {"keys": {"zone": "a"}}


def test_validate_missing_name():
    with pytest.raises(OptionsError, match="missing kubemq cluster name"):
        ClusterDeployOptions(name="").validate()


def test_validate_missing_namespace():
    with pytest.raises(OptionsError, match="missing kubemq cluster namespace"):
        ClusterDeployOptions(namespace="").validate()


def test_validate_checks_sections():
    with pytest.raises(OptionsError, match="invalid api-expose value: Bad"):
        ClusterDeployOptions(api=ApiOptions(expose="Bad")).validate()
    with pytest.raises(OptionsError, match="missing certifcate data"):
        ClusterDeployOptions(tls=TlsOptions(enabled=True)).validate()


def test_complete_reads_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("store: true\n", encoding="utf-8")
    options = ClusterDeployOptions(config_filename=str(path))
    options.complete()
    assert options.config_data == "store: true\n"
    assert options.to_manifest()["spec"]["configData"] == "store: true\n"


def test_complete_missing_config_file(tmp_path):
    options = ClusterDeployOptions(config_filename=str(tmp_path / "missing.yaml"))
    with pytest.raises(OptionsError, match="error config file data"):
        options.complete()


def test_complete_uses_configured_license():
    options = ClusterDeployOptions()
    options.complete(license_key="placeholder", license_data="license-text")
    spec = options.to_manifest()["spec"]
    assert spec["key"] == "placeholder"
    assert spec["license"] == "license-text"


def test_complete_keeps_explicit_key():
    options = ClusterDeployOptions(key="given")
    options.complete(license_key="placeholder")
    assert options.key == "given"


def test_yaml_round_trip():
    manifest = ClusterDeployOptions(replicas=5, standalone=True).to_manifest()
    assert yaml.safe_load(manifest_to_yaml(manifest)) == manifest
    assert manifest["spec"]["standalone"] is True
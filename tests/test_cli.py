import pytest
import yaml

from mqctl.cli import build_parser, main


def _run(capsys, *argv):
    status = main(list(argv))
    captured = capsys.readouterr()
    return status, captured.out, captured.err


def test_parser_defaults():
    args = build_parser().parse_args(["create", "cluster"])
    assert args.replicas == 3
    assert args.name == "kubemq-cluster"
    assert args.api_port == 8080
    assert args.resources_requests_memory == ""


def test_create_cluster_prints_manifest(capsys):
    status, out, _ = _run(capsys, "create", "cluster")
    manifest = yaml.safe_load(out)
    assert status == 0
    assert manifest["kind"] == "KubemqCluster"
    assert manifest["metadata"]["namespace"] == "kubemq"
    assert "api" not in manifest["spec"]


def test_aliases_and_replicas(capsys):
    status, out, _ = _run(capsys, "c", "c", "--replicas", "5", "--namespace", "ns1")
    manifest = yaml.safe_load(out)
    assert status == 0
    assert manifest["spec"]["replicas"] == 5
    assert manifest["metadata"]["namespace"] == "ns1"


def test_node_selectors(capsys):
    _, out, _ = _run(
        capsys, "create", "cluster", "--node-selectors-keys", "zone=a,disk=ssd"
    )
    assert yaml.safe_load(out)["spec"]["nodeSelectors"] == {
        "keys": {"zone": "a", "disk": "ssd"}
    }


def test_bad_node_selector_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["create", "cluster", "--node-selectors-keys", "zone"])


def test_invalid_expose_reports_error(capsys):
    status, out, err = _run(capsys, "create", "cluster", "--api-expose", "bogus")
    assert status == 1
    assert out == ""
    assert "invalid api-expose value: bogus" in err


def test_create_connector(capsys):
    status, out, _ = _run(capsys, "create", "connector", "--type", "sources")
    manifest = yaml.safe_load(out)
    assert status == 0
    assert manifest["kind"] == "KubemqConnector"
    assert manifest["metadata"]["name"].endswith("-sources")
    assert manifest["spec"]["config"] == "bindings: null"


def test_connector_invalid_service_type(capsys):
    status, _, err = _run(
        capsys, "create", "con", "-t", "targets", "--service-type", "Other"
    )
    assert status == 1
    assert "invalid service type" in err


def test_no_command_prints_help(capsys):
    status, out, _ = _run(capsys)
    assert status == 0
    assert "create" in out
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

import textwrap

import pytest

from config_loader import load_file, load_registry, load_source, load_sources
from consul_config import ConsulSourceConfig
from errors import DiscoveryConfigError, OverrideError

CONFIG = textwrap.dedent(
    """
    [[consul]]
    enabled = true
    name = "local"
    address = "127.0.0.1:8500"
    token = "secret-token"
    tag-separator = ""
    scheme = ""
    services = ["api", "db"]
    ssl-ca = "/etc/ssl/ca.pem"
    insecure-skip-verify = true

    [[consul]]
    name = "remote"
    address = "10.0.0.1:8500"
    datacenter = "dc2"

    [[static]]
    enabled = true
    name = "nodes"
    targets = ["10.0.0.2:9100"]
    labels = { env = "prod" }
    """
)


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "discovery.toml"
    path.write_text(CONFIG)
    return path


def test_load_source_applies_conditional_defaults():
    source = load_source("consul", {"name": "svc1", "tag-separator": "", "scheme": ""})
    assert isinstance(source, ConsulSourceConfig)
    assert source.tag_separator == ","
    assert source.scheme == "http"
    assert source.address == "127.0.0.1:8500"


def test_load_source_validates():
    with pytest.raises(DiscoveryConfigError, match="must be given a name"):
        load_source("consul", {"address": "10.0.0.1:8500"})


def test_load_source_unknown_kind():
    with pytest.raises(DiscoveryConfigError, match="unknown discovery kind 'dns'"):
        load_source("dns", {"name": "svc1"})


def test_load_source_unknown_option():
    with pytest.raises(OverrideError, match="consul discovery 'svc1' option 'datacentre'"):
        load_source("consul", {"name": "svc1", "datacentre": "dc1"})


def test_load_sources_single_table():
    (source,) = load_sources({"consul": {"name": "svc1"}})
    assert source.id() == "svc1"


def test_load_file(config_file):
    local, remote, nodes = load_file(config_file)

    assert local.enabled is True
    assert local.token == "secret-token"
    assert local.tag_separator == ","
    assert local.scheme == "http"
    assert local.services == ["api", "db"]
    assert local.ssl_ca == "/etc/ssl/ca.pem"
    assert local.insecure_skip_verify is True

    assert remote.enabled is False
    assert remote.datacenter == "dc2"
    assert remote.services == []

    assert nodes.service() == "static"
    assert nodes.labels == {"env": "prod"}


def test_load_file_invalid_toml(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[[consul]\nname = ")
    with pytest.raises(DiscoveryConfigError, match="failed to parse"):
        load_file(path)


def test_load_registry(config_file):
    registry = load_registry(config_file)
    assert len(registry) == 3
    assert registry.get("consul", "remote").datacenter == "dc2"
    assert [conf.job_name for conf in registry.scrape_configs()] == [
        "consul-local",
        "static-nodes",
    ]


def test_load_does_not_log_secrets(config_file, caplog):
    caplog.set_level("DEBUG")
    load_file(config_file)
    assert "secret-token" not in caplog.text


def test_load_source_names_failing_source():
    with pytest.raises(OverrideError, match="consul discovery 'remote' option 'enabled'"):
        load_source("consul", {"enabled": "maybe", "name": "remote"})


@pytest.mark.parametrize("tables", [5, "oops", True])
def test_load_sources_rejects_scalars(tables):
    with pytest.raises(DiscoveryConfigError, match="consul discovery must be a table"):
        load_sources({"consul": tables})


@pytest.mark.parametrize("table", [1, "oops", ["name"]])
def test_load_sources_rejects_non_table_entries(table):
    with pytest.raises(DiscoveryConfigError, match="consul discovery must be a table"):
        load_sources({"consul": [table]})


def test_load_sources_unknown_kind():
    with pytest.raises(DiscoveryConfigError, match="unknown discovery kind 'dns'"):
        load_sources({"dns": 5})

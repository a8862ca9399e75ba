#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Prometheus scrape configuration models.

Discovery sources write their blocks into a ScrapeConfig; render() turns
it into the dict layout Prometheus reads from its configuration file.
"""

from typing import Any

import yaml
from pydantic import BaseModel, Field


class TLSConfig(BaseModel):
    """TLS settings used when talking to a discovery server."""

    ca_file: str = Field(default="")
    cert_file: str = Field(default="")
    key_file: str = Field(default="")
    server_name: str = Field(default="")
    insecure_skip_verify: bool = Field(default=False)


class ConsulSDConfig(BaseModel):
    """A single consul_sd_configs entry."""

    server: str = Field(default="localhost:8500")
    token: str = Field(default="", repr=False)
    datacenter: str = Field(default="")
    tag_separator: str = Field(default=",")
    scheme: str = Field(default="http")
    username: str = Field(default="")
    password: str = Field(default="", repr=False)
    services: list[str] = Field(default_factory=list)
    tls_config: TLSConfig = Field(default_factory=TLSConfig)


class StaticConfig(BaseModel):
    """A single static_configs entry."""

    targets: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)


class ServiceDiscoveryConfig(BaseModel):
    """Discovery blocks of a scrape job, one list per discovery kind."""

    consul_sd_configs: list[ConsulSDConfig] = Field(default_factory=list)
    static_configs: list[StaticConfig] = Field(default_factory=list)


class ScrapeConfig(BaseModel):
    """A Prometheus scrape job."""

    job_name: str
    scrape_interval: str = Field(default="1m")
    scrape_timeout: str = Field(default="10s")
    metrics_path: str = Field(default="/metrics")
    scheme: str = Field(default="http")
    service_discovery_config: ServiceDiscoveryConfig = Field(
        default_factory=ServiceDiscoveryConfig
    )

    def render(self) -> dict:
        """Return the job in Prometheus layout.

        Discovery blocks sit at the top level of the job and empty
        discovery lists are left out.
        """
        rendered = self.model_dump(exclude={"service_discovery_config"})
        for key, blocks in self.service_discovery_config:
            if blocks:
                rendered[key] = [_prune(block.model_dump()) for block in blocks]
        return rendered


def _prune(value: Any) -> Any:
    """Drop unset values from a dumped block."""
    if isinstance(value, dict):
        pruned = {key: _prune(item) for key, item in value.items()}
        return {key: item for key, item in pruned.items() if item not in ("", [], {}, None)}
    if isinstance(value, list):
        return [_prune(item) for item in value]
    return value


def render_scrape_configs(configs: list[ScrapeConfig]) -> str:
    """Dump scrape jobs as the scrape_configs section of a Prometheus config file."""
    return yaml.safe_dump(
        {"scrape_configs": [config.render() for config in configs]},
        sort_keys=False,
    )

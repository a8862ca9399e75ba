#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Consul service discovery source configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import DiscoveryConfigError
from scrape_config import ConsulSDConfig, ScrapeConfig, TLSConfig

DEFAULT_ADDRESS = "127.0.0.1:8500"
DEFAULT_TAG_SEPARATOR = ","
DEFAULT_SCHEME = "http"


class ConsulSourceConfig(BaseModel):
    """Settings of a Consul discovery source.

    Field aliases are the keys used in the structured configuration file.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    kind: Literal["consul"] = Field(default="consul", exclude=True)
    enabled: bool = Field(default=False)
    name: str = Field(default="")
    address: str = Field(default=DEFAULT_ADDRESS)
    token: str = Field(default="", repr=False)
    datacenter: str = Field(default="")
    tag_separator: str = Field(default=DEFAULT_TAG_SEPARATOR, alias="tag-separator")
    scheme: str = Field(default=DEFAULT_SCHEME)
    username: str = Field(default="")
    password: str = Field(default="", repr=False)
    services: list[str] = Field(default_factory=list)
    ssl_ca: str = Field(default="", alias="ssl-ca")
    ssl_cert: str = Field(default="", alias="ssl-cert")
    ssl_key: str = Field(default="", alias="ssl-key")
    ssl_server_name: str = Field(default="", alias="ssl-server-name")
    # skips both chain and hostname checks
    insecure_skip_verify: bool = Field(default=False, alias="insecure-skip-verify")

    @field_validator("services", mode="before")
    @classmethod
    def services_not_null(cls, v):
        """Treat a missing services list as an empty one."""
        return [] if v is None else v

    def apply_conditional_defaults(self) -> None:
        """Refill defaults the loader may have overwritten with empty strings."""
        if self.tag_separator == "":
            self.tag_separator = DEFAULT_TAG_SEPARATOR
        if self.scheme == "":
            self.scheme = DEFAULT_SCHEME

    def validate_config(self) -> None:
        """Raise DiscoveryConfigError unless name and address are set."""
        if self.name == "":
            raise DiscoveryConfigError("consul discovery must be given a name")
        if not self.address.strip():
            raise DiscoveryConfigError("consul discovery requires a server address")

    def prom(self, conf: ScrapeConfig) -> None:
        """Replace the Consul discovery blocks of a scrape job with this source."""
        conf.service_discovery_config.consul_sd_configs = [
            ConsulSDConfig(
                server=self.address,
                token=self.token,
                datacenter=self.datacenter,
                tag_separator=self.tag_separator,
                scheme=self.scheme,
                username=self.username,
                password=self.password,
                services=list(self.services),
                tls_config=TLSConfig(
                    ca_file=self.ssl_ca,
                    cert_file=self.ssl_cert,
                    key_file=self.ssl_key,
                    server_name=self.ssl_server_name,
                    insecure_skip_verify=self.insecure_skip_verify,
                ),
            )
        ]

    def service(self) -> str:
        """Return the discoverer type."""
        return "consul"

    def id(self) -> str:
        """Return the discoverer name."""
        return self.name

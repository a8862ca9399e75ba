#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Static target list discovery source configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import DiscoveryConfigError
from scrape_config import ScrapeConfig, StaticConfig


class StaticSourceConfig(BaseModel):
    """A fixed list of scrape targets sharing one label set."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    kind: Literal["static"] = Field(default="static", exclude=True)
    enabled: bool = Field(default=False)
    name: str = Field(default="")
    targets: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("targets", "labels", mode="before")
    @classmethod
    def not_null(cls, v, info):
        """Treat missing collections as empty ones."""
        if v is None:
            return {} if info.field_name == "labels" else []
        return v

    def apply_conditional_defaults(self) -> None:
        """Nothing is defaulted after loading."""

    def validate_config(self) -> None:
        """Raise DiscoveryConfigError unless a name and a target are set."""
        if self.name == "":
            raise DiscoveryConfigError("static discovery must be given a name")
        if not any(target.strip() for target in self.targets):
            raise DiscoveryConfigError("static discovery requires at least one target")

    def prom(self, conf: ScrapeConfig) -> None:
        """Replace the static blocks of a scrape job with this source."""
        conf.service_discovery_config.static_configs = [
            StaticConfig(
                targets=[target.strip() for target in self.targets if target.strip()],
                labels=dict(self.labels),
            )
        ]

    def service(self) -> str:
        """Return the discoverer type."""
        return "static"

    def id(self) -> str:
        """Return the discoverer name."""
        return self.name

#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Registry of configured discovery sources.

The set of discovery kinds is closed: every kind is a member of the
SourceConfig union and has an entry in SOURCE_KINDS.
"""

import logging
from typing import Annotated, Protocol, runtime_checkable

from pydantic import Field

from consul_config import ConsulSourceConfig
from errors import DiscoveryConfigError
from scrape_config import ScrapeConfig
from static_config import StaticSourceConfig

logger = logging.getLogger(__name__)

SourceConfig = Annotated[
    ConsulSourceConfig | StaticSourceConfig, Field(discriminator="kind")
]

SOURCE_KINDS: dict[str, type] = {
    "consul": ConsulSourceConfig,
    "static": StaticSourceConfig,
}


@runtime_checkable
class DiscoverySource(Protocol):
    """Capabilities every discovery source kind provides."""

    enabled: bool

    def service(self) -> str:
        """Return the discoverer type."""
        ...

    def id(self) -> str:
        """Return the discoverer name."""
        ...

    def apply_conditional_defaults(self) -> None:
        """Refill defaults left empty by loading."""
        ...

    def validate_config(self) -> None:
        """Raise DiscoveryConfigError if the source is unusable."""
        ...

    def prom(self, conf: ScrapeConfig) -> None:
        """Write the discovery blocks of this source into a scrape job."""
        ...


class DiscoveryRegistry:
    """Discovery sources keyed by kind and name."""

    def __init__(self):
        self._sources: dict[tuple[str, str], SourceConfig] = {}

    def register(self, source: SourceConfig) -> None:
        """Add a source, rejecting unknown kinds and duplicate names."""
        kind = source.service()
        if not isinstance(source, SOURCE_KINDS.get(kind, ())):
            raise DiscoveryConfigError(f"unknown discovery kind {kind!r}")
        key = (kind, source.id())
        if key in self._sources:
            raise DiscoveryConfigError(f"duplicate {kind} discovery {source.id()!r}")
        self._sources[key] = source
        logger.debug("Registered %s discovery %r", kind, source.id())

    def get(self, service: str, source_id: str) -> SourceConfig:
        """Return a registered source; raise KeyError if there is none."""
        return self._sources[(service, source_id)]

    def sources(self, service: str | None = None) -> list[SourceConfig]:
        """Return registered sources in registration order."""
        return [
            source
            for (kind, _), source in self._sources.items()
            if service is None or kind == service
        ]

    def scrape_configs(self) -> list[ScrapeConfig]:
        """Build one scrape job per enabled source."""
        configs = []
        for source in self._sources.values():
            if not source.enabled:
                logger.debug("Skipping disabled %s discovery %r", source.service(), source.id())
                continue
            conf = ScrapeConfig(job_name=f"{source.service()}-{source.id()}")
            source.prom(conf)
            configs.append(conf)
        return configs

    def __len__(self) -> int:
        """Return the number of registered sources."""
        return len(self._sources)

#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Load discovery sources from a TOML configuration file.

Each discovery kind is an array of tables named after the kind:

    [[consul]]
    enabled = true
    name = "local"
    address = "127.0.0.1:8500"
    services = ["api", "db"]
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Mapping

from discovery import SOURCE_KINDS, DiscoveryRegistry, SourceConfig
from errors import DiscoveryConfigError
from overrides import redacted, set_option

logger = logging.getLogger(__name__)


def load_source(kind: str, table: Mapping[str, Any]) -> SourceConfig:
    """Build, default and validate a single source of the given kind."""
    if kind not in SOURCE_KINDS:
        raise DiscoveryConfigError(f"unknown discovery kind {kind!r}")
    if not isinstance(table, Mapping):
        raise DiscoveryConfigError(
            f"{kind} discovery must be a table, got {type(table).__name__}"
        )

    source = SOURCE_KINDS[kind]()
    # name first so errors on later options can say which source failed
    if "name" in table:
        set_option(source, "name", table["name"])
    for key, value in table.items():
        if key != "name":
            set_option(source, key, value)
    source.apply_conditional_defaults()
    source.validate_config()
    logger.debug("Loaded %s discovery: %s", kind, redacted(source))
    return source


def load_sources(data: Mapping[str, Any]) -> list[SourceConfig]:
    """Build sources from parsed configuration, keyed by discovery kind."""
    sources = []
    for kind, tables in data.items():
        if kind not in SOURCE_KINDS:
            raise DiscoveryConfigError(f"unknown discovery kind {kind!r}")
        # a single [kind] table instead of [[kind]]
        if isinstance(tables, Mapping):
            tables = [tables]
        if not isinstance(tables, list):
            raise DiscoveryConfigError(
                f"{kind} discovery must be a table or an array of tables, "
                f"got {type(tables).__name__}"
            )
        for table in tables:
            sources.append(load_source(kind, table))
    return sources


def load_file(path: Path) -> list[SourceConfig]:
    """Parse a TOML file and build the sources it declares."""
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise DiscoveryConfigError(f"failed to parse {path}: {e}") from e
    sources = load_sources(data)
    logger.info("Loaded %d discovery sources from %s", len(sources), path)
    return sources


def load_registry(path: Path) -> DiscoveryRegistry:
    """Build a registry holding every source declared in a TOML file."""
    registry = DiscoveryRegistry()
    for source in load_file(path):
        registry.register(source)
    return registry

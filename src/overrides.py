#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Redaction table and option overrides for discovery sources.

Options are addressed by their structured configuration keys. Values of
options marked for redaction never leave this module in cleartext.
"""

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from errors import OverrideError

logger = logging.getLogger(__name__)

REDACTED = "<redacted>"

# option key -> redact
REDACTED_FIELDS: dict[str, dict[str, bool]] = {
    "consul": {
        "enabled": False,
        "name": False,
        "address": False,
        "token": True,
        "datacenter": False,
        "tag-separator": False,
        "scheme": False,
        "username": False,
        "password": True,
        "services": False,
        "ssl-ca": False,
        "ssl-cert": False,
        "ssl-key": False,
        "ssl-server-name": False,
        "insecure-skip-verify": False,
    },
    "static": {
        "enabled": False,
        "name": False,
        "targets": False,
        "labels": False,
    },
}


def option_fields(model: type[BaseModel]) -> dict[str, str]:
    """Map structured configuration keys of a model to its field names."""
    return {
        (info.alias or name): name
        for name, info in model.model_fields.items()
        if not info.exclude
    }


def set_option(source: BaseModel, key: str, value: Any) -> None:
    """Set a single option on a source by its configuration key."""
    fields = option_fields(type(source))
    described = f"{source.service()} discovery"
    if source.id():
        described = f"{described} {source.id()!r}"
    if key not in fields:
        raise OverrideError(f"unknown {described} option {key!r}")
    try:
        setattr(source, fields[key], value)
    except ValidationError as e:
        # the pydantic error carries the input value
        cause = None if REDACTED_FIELDS[source.service()].get(key) else e
        raise OverrideError(
            f"invalid value for {described} option {key!r}: {e.errors()[0]['msg']}"
        ) from cause


def redact_options(service: str, options: Mapping[str, Any]) -> dict[str, Any]:
    """Return options with sensitive non-empty values masked."""
    table = REDACTED_FIELDS[service]
    return {
        key: REDACTED if table.get(key) and value else value for key, value in options.items()
    }


def redacted(source: BaseModel) -> dict[str, Any]:
    """Return the options of a source keyed by configuration key, safe to log."""
    options = source.model_dump(by_alias=True)
    keys = REDACTED_FIELDS[source.service()]
    return redact_options(source.service(), {key: options[key] for key in keys})


def apply_overrides(source: BaseModel, overrides: Mapping[str, Any]) -> BaseModel:
    """Return a copy of source with overrides applied and validated.

    The given source is left untouched.
    """
    updated = source.model_copy(deep=True)
    for key, value in overrides.items():
        set_option(updated, key, value)
    updated.apply_conditional_defaults()
    updated.validate_config()
    logger.info(
        "Applied overrides to %s discovery %r: %s",
        updated.service(),
        updated.id(),
        redact_options(updated.service(), overrides),
    )
    return updated

#!/usr/bin/env python3
# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Errors raised while building discovery source configuration."""


class DiscoveryConfigError(ValueError):
    """A discovery source configuration is invalid."""


class OverrideError(DiscoveryConfigError):
    """An override names an unknown option or carries an invalid value."""

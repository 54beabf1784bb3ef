#!/usr/bin/env python3
"""Exceptions raised by aviameter."""


class AviameterError(Exception):
    """Base class for all aviameter errors."""


class UnsupportedUnit(AviameterError, ValueError):
    """A conversion was requested for a unit the measurement does not know."""

    def __init__(self, kind: str, unit):
        self.kind = kind
        self.unit = unit
        super().__init__(f"Unsupported {kind} unit: {unit!r}")


class StorageError(AviameterError):
    """A store was used before a backing key-value store was set."""

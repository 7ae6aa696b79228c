# File: layergen/exceptions.py
"""
layergen - Error taxonomy
=========================

Every failure that aborts a generation run derives from ``LayergenError``.
None of these subclass ``ValueError``: pydantic only wraps ``ValueError`` /
``AssertionError`` raised inside validators, so raising one of these from a
``model_validator`` reaches the caller unchanged.
"""

from __future__ import annotations

from typing import List


class LayergenError(Exception):
    """Base class for all fatal generation errors."""


class ConfigurationError(LayergenError):
    """Generation settings are missing or inconsistent."""


class ConnectivityError(LayergenError):
    """The metadata source could not be reached, authenticated or loaded."""


class MalformedSchemaError(LayergenError):
    """
    Introspected metadata cannot produce consistent artifacts.

    Raised for a primary key naming a column that does not exist, for two
    columns deriving the same member name, and for rendering a table that
    has no primary key.
    """

    def __init__(self, table_name: str, message: str) -> None:
        self.table_name: str = table_name
        super().__init__(f"Table '{table_name}': {message}")


class ExportError(LayergenError):
    """An artifact could not be written to disk."""


__all__: List[str] = [
    "LayergenError",
    "ConfigurationError",
    "ConnectivityError",
    "MalformedSchemaError",
    "ExportError",
]

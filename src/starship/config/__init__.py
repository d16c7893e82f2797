"""Configuration persistence for Starship."""

from .flag_store import (
    HEADER,
    PROPERTIES_FILENAME,
    BuildFlagSet,
    FlagStore,
    PropertiesCodec,
    parse_bool,
)

__all__ = [
    "BuildFlagSet",
    "FlagStore",
    "PropertiesCodec",
    "parse_bool",
    "PROPERTIES_FILENAME",
    "HEADER",
]

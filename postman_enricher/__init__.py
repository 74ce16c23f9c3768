"""Postman collection enrichment."""

from .convert import ConversionError, convert_openapi, convert_openapi_file
from .enrich import (
    ConfigLoadError,
    EnrichmentStats,
    enrich_collection,
    load_collection,
    load_config,
    save_collection,
)

__all__ = [
    "ConfigLoadError",
    "ConversionError",
    "EnrichmentStats",
    "convert_openapi",
    "convert_openapi_file",
    "enrich_collection",
    "load_collection",
    "load_config",
    "save_collection",
]

"""Enrichment stages and shared traversal helpers for Postman collections."""

from .description_enricher import DescriptionEnricher
from .example_enricher import ExampleEnricher
from .filter_enricher import EndpointFilter
from .id_preserver import IdPreserver
from .matcher import normalize_path, should_include_endpoint
from .organize_enricher import ResourceOrganizer
from .path_variable_enricher import PathVariableEnricher
from .script_enricher import TestScriptEnricher
from .variable_enricher import VariableEnricher
from .walker import (
    as_mapping,
    count_requests,
    get_item_key,
    get_request_method,
    get_url_path,
    is_folder,
    is_request,
    walk_collection,
)

__all__ = [
    "DescriptionEnricher",
    "EndpointFilter",
    "ExampleEnricher",
    "IdPreserver",
    "PathVariableEnricher",
    "ResourceOrganizer",
    "TestScriptEnricher",
    "VariableEnricher",
    "as_mapping",
    "count_requests",
    "get_item_key",
    "get_request_method",
    "get_url_path",
    "is_folder",
    "is_request",
    "normalize_path",
    "should_include_endpoint",
    "walk_collection",
]

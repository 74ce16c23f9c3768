#!/usr/bin/env python3
"""Enrichment pipeline for Postman collections.

Applies filtering, resource organization, descriptions, examples, variables,
path variables and test scripts to a Postman collection, then restores ids
from a previously generated collection. Input is either an OpenAPI definition
(converted first) or an existing collection, plus a YAML configuration.

Stage order is fixed:
    1. filter          drop endpoints not in the allow-list
    2. organize        rebuild folders from URL paths
    3. descriptions    collection, folder and request descriptions
    4. examples        request bodies and response examples
    5. variables       host, path, query and environment variables
    6. pathVariables   point path variables at environment references
    7. tests           per-method test scripts
    8. preserve ids    restore ids/bodies/responses from the existing collection

Filtering runs before organizing because folder pruning relies on the original
structure, and id preservation runs last because it matches on the final tree.

Usage:
    python -m postman_enricher.enrich api.yaml config.yaml -o collection.json
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from postman_enricher.convert import ConversionError, convert_openapi_file
from postman_enricher.utils import (
    DescriptionEnricher,
    EndpointFilter,
    ExampleEnricher,
    IdPreserver,
    PathVariableEnricher,
    ResourceOrganizer,
    TestScriptEnricher,
    VariableEnricher,
    count_requests,
)

logger = logging.getLogger(__name__)

console = Console()

DEFAULT_OUTPUT = "enriched-collection.json"

OPENAPI_SUFFIXES = (".yaml", ".yml")


class ConfigLoadError(ValueError):
    """Raised when an enrichment configuration file cannot be loaded."""


@dataclass
class EnrichmentStats:
    """Statistics collected from every stage of one pipeline run."""

    requests_in: int = 0
    requests_out: int = 0
    stages: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "requests_in": self.requests_in,
            "requests_out": self.requests_out,
            "stages": self.stages,
        }


def load_config(config_path: Path | str) -> dict[str, Any]:
    """Load an enrichment configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration.

    Returns:
        Configuration dictionary (empty for an empty file).

    Raises:
        ConfigLoadError: If the file cannot be read or parsed.
    """
    path = Path(config_path)
    try:
        with path.open(encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Failed to load config from {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError(f"Failed to load config from {path}: expected a mapping")
    return config


def load_collection(collection_path: Path) -> dict[str, Any]:
    """Load a Postman collection from a JSON file."""
    with collection_path.open(encoding="utf-8") as f:
        return json.load(f)


def save_collection(collection: dict[str, Any], output_path: Path, indent: int = 2) -> None:
    """Save a Postman collection as indented JSON."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=indent, ensure_ascii=False)
        f.write("\n")


def _section(config: dict[str, Any], name: str) -> dict[str, Any] | None:
    """Return a config section, treating missing or malformed sections as absent."""
    section = config.get(name)
    return section if isinstance(section, dict) else None


def enrich_collection(
    collection: dict[str, Any],
    config: dict[str, Any] | Path | str | None = None,
    existing_path: Path | str | dict[str, Any] | None = None,
    stats: EnrichmentStats | None = None,
) -> dict[str, Any]:
    """Enrich a Postman collection.

    Args:
        collection: Postman collection to enrich.
        config: Configuration dictionary, or path to a YAML configuration.
        existing_path: Previously generated collection (path or dictionary)
            to restore ids, bodies and responses from.
        stats: Optional stats object filled with per-stage statistics.

    Returns:
        Enriched collection.

    Raises:
        ConfigLoadError: If ``config`` is a path that cannot be loaded.
    """
    if isinstance(config, (str, Path)):
        config = load_config(config)
    config = config or {}
    stats = stats if stats is not None else EnrichmentStats()

    enriched = dict(collection)
    stats.requests_in = count_requests(enriched.get("item"))

    # 1. Filter endpoints first (reduce what we're working with)
    filter_config = _section(config, "filter")
    if filter_config is not None:
        endpoint_filter = EndpointFilter(filter_config)
        enriched = endpoint_filter.filter_collection(enriched)
        stats.stages["filter"] = endpoint_filter.get_stats()

    # 2. Reorganize by resource path (needs the filtered tree)
    organize_config = _section(config, "organize")
    if organize_config is not None:
        organizer = ResourceOrganizer(organize_config)
        enriched = organizer.organize_collection(enriched)
        stats.stages["organize"] = organizer.get_stats()

    # 3. Descriptions (collection, folders, requests)
    descriptions_config = _section(config, "descriptions")
    if descriptions_config is not None:
        description_enricher = DescriptionEnricher(descriptions_config)
        enriched = description_enricher.enrich_collection(enriched)
        stats.stages["descriptions"] = description_enricher.get_stats()

    # 4. Examples (request bodies and responses)
    examples_config = _section(config, "examples")
    if examples_config is not None:
        example_enricher = ExampleEnricher(examples_config)
        enriched = example_enricher.add_examples(enriched)
        stats.stages["examples"] = example_enricher.get_stats()

    # 5. Variables (host, path, query, environment)
    variables_config = _section(config, "variables")
    if variables_config is not None:
        variable_enricher = VariableEnricher(variables_config)
        enriched = variable_enricher.setup_variables(enriched)
        stats.stages["variables"] = variable_enricher.get_stats()

    # 6. Path variable references
    path_variables_config = _section(config, "pathVariables")
    if path_variables_config is not None:
        path_variable_enricher = PathVariableEnricher(path_variables_config)
        enriched = path_variable_enricher.setup_path_variables(enriched)
        stats.stages["pathVariables"] = path_variable_enricher.get_stats()

    # 7. Test scripts
    tests_config = _section(config, "tests")
    if tests_config is not None:
        script_enricher = TestScriptEnricher(tests_config)
        enriched = script_enricher.add_tests(enriched)
        stats.stages["tests"] = script_enricher.get_stats()

    # 8. Preserve ids last, against the final tree shape
    if existing_path is not None:
        preserver = IdPreserver(existing_path)
        enriched = preserver.preserve_ids(enriched)
        stats.stages["preserveIds"] = preserver.get_stats()

    stats.requests_out = count_requests(enriched.get("item"))
    return enriched


def is_openapi_file(path: Path) -> bool:
    """Check if an input path is an OpenAPI definition rather than a collection."""
    return path.suffix.lower() in OPENAPI_SUFFIXES


def print_summary(stats: EnrichmentStats) -> None:
    """Print enrichment summary to console."""
    table = Table(title="Enrichment Summary")
    table.add_column("Stage", style="cyan")
    table.add_column("Metric", style="white")
    table.add_column("Value", style="green")

    table.add_row("collection", "requests_in", str(stats.requests_in))
    table.add_row("collection", "requests_out", str(stats.requests_out))
    for stage, stage_stats in stats.stages.items():
        for metric, value in stage_stats.items():
            if metric == "errors":
                continue
            table.add_row(stage, metric, str(value))

    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Convert OpenAPI definitions to enriched Postman collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  postman-enricher api.yaml config.yaml -o collection.json\n"
            "  postman-enricher collection.json config.yaml -o enriched.json"
        ),
    )
    parser.add_argument(
        "input",
        type=Path,
        help="OpenAPI definition (*.yaml, *.yml) or Postman collection (*.json)",
    )
    parser.add_argument("config", type=Path, help="Enrichment configuration YAML file")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path(DEFAULT_OUTPUT),
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--existing",
        type=Path,
        help="Existing collection to preserve ids from (default: the output file)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    console.print("[bold blue]Postman Collection Enrichment[/bold blue]")

    try:
        if is_openapi_file(args.input):
            console.print(f"  Converting OpenAPI definition: {args.input}")
            collection = convert_openapi_file(args.input)
        else:
            console.print(f"  Loading collection: {args.input}")
            collection = load_collection(args.input)

        console.print(f"  Loading config: {args.config}")
        config = load_config(args.config)

        existing = args.existing
        if existing is None and args.output.exists():
            existing = args.output

        stats = EnrichmentStats()
        enriched = enrich_collection(collection, config, existing, stats=stats)

        save_collection(enriched, args.output)
    except (ConversionError, ConfigLoadError, OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    print_summary(stats)
    console.print(f"\n[bold green]Saved enriched collection to {args.output}[/bold green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Path variable enricher.

Points declared path variables at collection or environment variables::

    pathVariables:
      enabled: true
      mapping:
        userId:
          reference: "{{userId}}"
          description: "User identifier from the environment"
"""

import logging
from dataclasses import dataclass
from typing import Any

from .walker import as_mapping, is_request, walk_collection

logger = logging.getLogger(__name__)


@dataclass
class PathVariableStats:
    """Statistics for path variable mapping."""

    variables_mapped: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {"variables_mapped": self.variables_mapped}


class PathVariableEnricher:
    """Overwrite path variable values with configured references."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.enabled: bool = bool(config.get("enabled", False))
        self.mapping: dict[str, dict[str, str]] = as_mapping(config.get("mapping"))
        self.stats = PathVariableStats()

    def setup_path_variables(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Apply the path variable mapping to every request URL."""
        if not self.enabled:
            return collection

        walk_collection(collection.get("item"), self._map_variables)
        return collection

    def _map_variables(self, item: dict[str, Any]) -> None:
        if not is_request(item):
            return

        url = item["request"].get("url")
        if not isinstance(url, dict) or not isinstance(url.get("variable"), list):
            return

        url["variable"] = [self._map_variable(variable) for variable in url["variable"]]

    def _map_variable(self, variable: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(variable, dict):
            return variable

        key = variable.get("key")
        mapping = self.mapping.get(key) if isinstance(key, str) else None
        if not isinstance(mapping, dict):
            return variable

        self.stats.variables_mapped += 1
        return {
            **variable,
            "value": mapping.get("reference"),
            "description": mapping.get("description") or variable.get("description"),
        }

    def get_stats(self) -> dict[str, Any]:
        """Get path variable statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset path variable statistics."""
        self.stats = PathVariableStats()

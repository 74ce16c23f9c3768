"""Variable enricher for Postman collections.

Rewrites requests so they reference variables instead of literal values:
- path variables (``:id``) get configured values and descriptions
- every request host becomes ``{{baseUrl}}`` (or the configured name)
- configured query parameters get values and are enabled
- a collection pre-request script warns about unset environment variables

Collection-level variables are cleared; values are expected to come from a
Postman environment instead.

Configuration::

    variables:
      baseUrlVar: baseUrl
      path:
        userId: "{{userId}}"
      descriptions:
        userId: "Identifier of the user"
      query:
        limit: "10"
      environment:
        apiKey: ""
"""

import logging
from dataclasses import dataclass
from typing import Any

from .walker import as_mapping, is_request, walk_collection

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL_VAR = "baseUrl"


@dataclass
class VariableStats:
    """Statistics for variable setup."""

    path_variables_set: int = 0
    hosts_rewritten: int = 0
    query_params_set: int = 0
    environment_checks: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "path_variables_set": self.path_variables_set,
            "hosts_rewritten": self.hosts_rewritten,
            "query_params_set": self.query_params_set,
            "environment_checks": self.environment_checks,
        }


class VariableEnricher:
    """Set up path, host, query and environment variables."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.path: dict[str, str] = as_mapping(config.get("path"))
        self.query: dict[str, str] = as_mapping(config.get("query"))
        self.environment: dict[str, str] = as_mapping(config.get("environment"))
        self.descriptions: dict[str, str] = as_mapping(config.get("descriptions"))
        self.base_url_var: str = config.get("baseUrlVar") or DEFAULT_BASE_URL_VAR
        self.stats = VariableStats()

    def setup_variables(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Apply variable configuration to a collection in place.

        Args:
            collection: Postman collection dictionary.

        Returns:
            The same collection with variables applied.
        """
        collection["variable"] = []

        items = collection.get("item")
        if self.path:
            walk_collection(items, self._set_path_variables)

        walk_collection(items, self._set_host)

        if self.query:
            walk_collection(items, self._set_query_params)

        if self.environment:
            events = collection.setdefault("event", [])
            events.append(self.build_environment_script())
            self.stats.environment_checks = len(self.environment)

        return collection

    def _set_path_variables(self, item: dict[str, Any]) -> None:
        url = _structured_url(item)
        if url is None or not isinstance(url.get("path"), list):
            return

        variables = url.setdefault("variable", [])
        if not isinstance(variables, list):
            return

        for name, value in self.path.items():
            if f":{name}" not in url["path"]:
                continue

            variable = {
                "key": name,
                "value": value,
                "description": self.descriptions.get(name, ""),
            }
            index = next(
                (
                    i
                    for i, existing in enumerate(variables)
                    if isinstance(existing, dict) and existing.get("key") == name
                ),
                None,
            )
            if index is None:
                variables.append(variable)
            else:
                variables[index] = variable
            self.stats.path_variables_set += 1

    def _set_host(self, item: dict[str, Any]) -> None:
        url = _structured_url(item)
        if url is None:
            return
        url["host"] = [f"{{{{{self.base_url_var}}}}}"]
        self.stats.hosts_rewritten += 1

    def _set_query_params(self, item: dict[str, Any]) -> None:
        url = _structured_url(item)
        if url is None or not isinstance(url.get("query"), list):
            return

        query = url["query"]
        for key, value in self.query.items():
            for index, param in enumerate(query):
                if not isinstance(param, dict) or param.get("key") != key:
                    continue
                updated: dict[str, Any] = {"key": key, "value": value, "disabled": False}
                if param.get("description"):
                    updated["description"] = param["description"]
                query[index] = updated
                self.stats.query_params_set += 1
                break

    def build_environment_script(self) -> dict[str, Any]:
        """Build the collection pre-request script validating environment variables."""
        exec_lines = ["// Validate required environment variables"]
        for name in self.environment:
            exec_lines.append(
                f'if (!pm.environment.get("{name}")) {{\n'
                f'    console.warn("Please set your {name} in the environment");\n'
                "}",
            )
        exec_lines.extend(
            [
                "",
                "// Save timestamp for chaining requests",
                'pm.globals.set("timestamp", new Date().toISOString());',
            ],
        )
        return {
            "listen": "prerequest",
            "script": {"type": "text/javascript", "exec": exec_lines},
        }

    def get_stats(self) -> dict[str, Any]:
        """Get variable statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset variable statistics."""
        self.stats = VariableStats()


def _structured_url(item: dict[str, Any]) -> dict[str, Any] | None:
    """Return the request's URL object, or None for folders and raw URLs."""
    if not is_request(item):
        return None
    url = item["request"].get("url")
    return url if isinstance(url, dict) else None

"""Endpoint filter for Postman collections.

Keeps only the requests listed in an allow-list and drops folders that end up
empty. Allow-list keys are ``"<METHOD> <normalized path>"`` strings, e.g.::

    filter:
      include:
        "GET /users/:id": true
        "POST /users": true
      normalizationRules:
        "user_id": ":id"
      note: "Only user endpoints are included."

Keys that match nothing are ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .description_format import append_text
from .matcher import should_include_endpoint
from .walker import as_mapping, get_request_method, get_url_path, is_request

logger = logging.getLogger(__name__)


@dataclass
class FilterStats:
    """Statistics for endpoint filtering."""

    requests_kept: int = 0
    requests_removed: int = 0
    folders_removed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "requests_kept": self.requests_kept,
            "requests_removed": self.requests_removed,
            "folders_removed": self.folders_removed,
            "error_count": len(self.errors),
        }


class EndpointFilter:
    """Filter a collection down to allow-listed endpoints.

    Attributes:
        include: Allow-list of endpoint keys to booleans.
        rules: Normalization rules applied to ``{param}`` segments.
        note: Optional text appended to the collection description.
        stats: Filtering statistics.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        include = config.get("include")
        self.include: dict[str, bool] | None = include if isinstance(include, dict) else None
        self.rules: dict[str, str] = as_mapping(config.get("normalizationRules"))
        note = config.get("note")
        self.note: str | None = note if isinstance(note, str) else None
        self.stats = FilterStats()

    def filter_collection(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Filter collection items against the allow-list.

        Surviving folders are shallow copies carrying only surviving
        children; everything else is passed through by reference.

        Args:
            collection: Postman collection dictionary.

        Returns:
            Filtered collection, or the input unchanged when no allow-list
            is configured.
        """
        if self.include is None:
            return collection

        filtered = dict(collection)
        filtered["item"] = self._filter_items(collection.get("item"))

        logger.debug(
            "Kept %d requests, removed %d requests and %d folders",
            self.stats.requests_kept,
            self.stats.requests_removed,
            self.stats.folders_removed,
        )

        info = filtered.get("info")
        if isinstance(info, dict) and self.note:
            info = dict(info)
            info["description"] = append_text(info.get("description"), self.note)
            filtered["info"] = info

        return filtered

    def _filter_items(self, items: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
        """Recursively keep allow-listed requests and non-empty folders."""
        if not items:
            return []

        kept: list[dict[str, Any]] = []
        for item in items:
            if is_request(item):
                if self._is_included(item):
                    self.stats.requests_kept += 1
                    kept.append(item)
                else:
                    self.stats.requests_removed += 1
            elif item.get("item") is not None:
                children = self._filter_items(item["item"])
                if children:
                    folder = dict(item)
                    folder["item"] = children
                    kept.append(folder)
                else:
                    self.stats.folders_removed += 1
            else:
                kept.append(item)
        return kept

    def _is_included(self, item: dict[str, Any]) -> bool:
        method = get_request_method(item)
        path = get_url_path(item["request"].get("url"))
        return should_include_endpoint(method, path, self.include or {}, self.rules)

    def get_stats(self) -> dict[str, Any]:
        """Get filtering statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset filtering statistics."""
        self.stats = FilterStats()

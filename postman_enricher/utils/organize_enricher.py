"""Resource organizer for Postman collections.

Rebuilds the folder tree so that it mirrors REST resource paths. A request
for ``GET /users/:id/posts`` ends up in ``users / posts`` when path
parameters are excluded (the default).

Configuration::

    organize:
      enabled: true
      strategy: resources
      excludePathParams: true
      nestingLevel: 2

Only the ``resources`` strategy is implemented; any other strategy leaves the
collection unchanged. Requests whose path yields no segments are dropped from
the rebuilt tree.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .walker import get_url_path, is_request

logger = logging.getLogger(__name__)

RESOURCES_STRATEGY = "resources"


@dataclass
class OrganizeStats:
    """Statistics for resource organization."""

    requests_placed: int = 0
    requests_dropped: int = 0
    folders_created: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "requests_placed": self.requests_placed,
            "requests_dropped": self.requests_dropped,
            "folders_created": self.folders_created,
        }


class ResourceOrganizer:
    """Reorganize collection items by URL path hierarchy."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.enabled: bool = bool(config.get("enabled", False))
        self.strategy: str | None = config.get("strategy")
        exclude = config.get("excludePathParams")
        self.exclude_path_params: bool = True if exclude is None else bool(exclude)
        level = config.get("nestingLevel")
        self.nesting_level: int | None = (
            level if isinstance(level, int) and not isinstance(level, bool) and level > 0 else None
        )
        self.stats = OrganizeStats()

    def organize_collection(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Replace the collection tree with a resource hierarchy.

        Args:
            collection: Postman collection dictionary.

        Returns:
            Collection whose ``item`` holds the top-level resource folders, or
            the input unchanged when disabled or nothing could be organized.
        """
        if not self.enabled or self.strategy != RESOURCES_STRATEGY:
            return collection

        requests = flatten_requests(collection.get("item") or [])
        organized = self._build_hierarchy(requests)

        if not organized:
            logger.debug("No requests could be organized, keeping original structure")
            return collection

        result = dict(collection)
        result["item"] = organized
        return result

    def _build_hierarchy(self, requests: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert requests into folders keyed by slash-joined path prefixes."""
        folders: dict[str, dict[str, Any]] = {}
        top_level: list[str] = []

        for item in requests:
            url = item["request"].get("url")
            if not url:
                continue

            segments = extract_segments(get_url_path(url), self.exclude_path_params)
            if self.nesting_level is not None:
                segments = segments[: self.nesting_level]

            if not segments:
                self.stats.requests_dropped += 1
                logger.debug("Dropping request without path segments: %s", item.get("name"))
                continue

            folder_path = ""
            parent: dict[str, Any] | None = None
            for segment in segments:
                folder_path = f"{folder_path}/{segment}" if folder_path else segment

                if folder_path not in folders:
                    folder: dict[str, Any] = {"name": segment, "item": []}
                    folders[folder_path] = folder
                    self.stats.folders_created += 1
                    if parent is not None:
                        parent["item"].append(folder)
                    else:
                        top_level.append(folder_path)

                parent = folders[folder_path]

            parent["item"].append(item)
            self.stats.requests_placed += 1

        return [folders[path] for path in top_level]

    def get_stats(self) -> dict[str, Any]:
        """Get organization statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset organization statistics."""
        self.stats = OrganizeStats()


def flatten_requests(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Collect every request from a nested item list, in walk order."""
    requests: list[dict[str, Any]] = []
    for item in items:
        if is_request(item):
            requests.append(item)
        elif isinstance(item.get("item"), list):
            requests.extend(flatten_requests(item["item"]))
    return requests


def extract_segments(path: str, exclude_path_params: bool = True) -> list[str]:
    """Split a URL path into folder segments.

    Empty segments and segments ending in ``:`` are skipped, as are ``:param``
    and ``{param}`` segments when ``exclude_path_params`` is set.
    """
    segments = [seg for seg in path.split("/") if seg and not seg.endswith(":")]
    if exclude_path_params:
        segments = [seg for seg in segments if not seg.startswith((":", "{"))]
    return segments

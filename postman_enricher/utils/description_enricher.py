"""Description enricher for Postman collections.

Adds markdown descriptions at three levels:
- collection: ``info.name`` / ``info.description`` from the first configured
  key contained in the collection name (case-insensitive)
- folders: looked up by lowercased folder name, retried without ``{}:``
- requests: looked up by exact request name; requests without a configured
  description get one derived from their name

Configuration::

    descriptions:
      collection:
        petstore:
          name: "Petstore API"
          description: "# Petstore\\n\\nManage pets."
      folders:
        pets: "Operations on pets."
      requests:
        "List pets": "Returns every pet in the store."
      generate: false

Usage:
    enricher = DescriptionEnricher(config["descriptions"])
    collection = enricher.enrich_collection(collection)
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from .description_format import is_blank, markdown, to_rich_text
from .walker import as_mapping, get_request_method, is_folder, is_request, walk_collection

logger = logging.getLogger(__name__)

FOLDER_KEY_STRIP = re.compile(r"[{}:]")


@dataclass
class DescriptionStats:
    """Statistics from description enrichment."""

    collection_updated: bool = False
    folders_described: int = 0
    requests_described: int = 0
    requests_defaulted: int = 0
    requests_converted: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "collection_updated": self.collection_updated,
            "folders_described": self.folders_described,
            "requests_described": self.requests_described,
            "requests_defaulted": self.requests_defaulted,
            "requests_converted": self.requests_converted,
        }


class DescriptionEnricher:
    """Enrich collections with collection, folder and request descriptions.

    Attributes:
        collection_config: Collection name fragment -> {name, description}.
        folders: Lowercased folder name -> description text.
        requests: Exact request name -> description text.
        generate: Derive blank request descriptions from method and name
            instead of copying the name.
        stats: Enrichment statistics.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.collection_config: dict[str, dict[str, str]] = as_mapping(config.get("collection"))
        self.folders: dict[str, str] = as_mapping(config.get("folders"))
        self.requests: dict[str, str] = as_mapping(config.get("requests"))
        self.generate: bool = bool(config.get("generate", False))
        self.stats = DescriptionStats()

    def enrich_collection(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Apply all configured descriptions to a collection in place.

        Args:
            collection: Postman collection dictionary.

        Returns:
            The same collection with descriptions applied.
        """
        if self.collection_config:
            self._apply_collection_info(collection)

        items = collection.get("item")
        if self.folders:
            walk_collection(items, self._describe_folder)

        walk_collection(items, self._describe_request)

        return collection

    def _apply_collection_info(self, collection: dict[str, Any]) -> None:
        info = collection.get("info")
        if not isinstance(info, dict):
            return

        name = str(info.get("name") or "").lower()
        for key, entry in self.collection_config.items():
            if str(key).lower() not in name:
                continue
            if not isinstance(entry, dict):
                return
            if entry.get("name"):
                info["name"] = entry["name"]
            if entry.get("description"):
                info["description"] = markdown(entry["description"])
            self.stats.collection_updated = True
            logger.debug("Applied collection info for key '%s'", key)
            return

    def _describe_folder(self, item: dict[str, Any]) -> None:
        if not is_folder(item):
            return

        description = self.get_folder_description(str(item.get("name") or ""))
        if description:
            item["description"] = markdown(description)
            self.stats.folders_described += 1

    def _describe_request(self, item: dict[str, Any]) -> None:
        if not is_request(item):
            return

        request = item["request"]
        name = str(item.get("name") or "")
        configured = self.requests.get(name)

        if configured:
            request["description"] = markdown(configured)
            self.stats.requests_described += 1
        elif is_blank(request.get("description")):
            if self.generate:
                text = generate_generic_description(get_request_method(item), name)
            else:
                text = name
            request["description"] = markdown(text)
            self.stats.requests_defaulted += 1
        elif isinstance(request.get("description"), str):
            request["description"] = to_rich_text(request["description"])
            self.stats.requests_converted += 1

    def get_folder_description(self, folder_name: str) -> str | None:
        """Look up a folder description.

        Tries the lowercased name first, then the name stripped of ``{``,
        ``}`` and ``:`` so that ``{userId}`` matches a ``userid`` entry.

        Args:
            folder_name: Folder name as it appears in the collection.

        Returns:
            Configured description text, or None.
        """
        key = folder_name.lower()
        if self.folders.get(key):
            return self.folders[key]

        clean_key = FOLDER_KEY_STRIP.sub("", key)
        return self.folders.get(clean_key) or None

    def get_stats(self) -> dict[str, Any]:
        """Get enrichment statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset enrichment statistics."""
        self.stats = DescriptionStats()


def generate_generic_description(method: str, name: str) -> str:
    """Generate a description sentence from an HTTP method and request name.

    Examples:
        >>> generate_generic_description("GET", "List Users")
        'Retrieve users'
        >>> generate_generic_description("POST", "Create Order")
        'Create new order'
    """
    lowered = name.lower()

    if method == "GET":
        return "Retrieve " + re.sub(r"^list\s+", "", re.sub(r"^get\s+", "", lowered))
    if method == "POST":
        return "Create new " + re.sub(r"^add\s+", "", re.sub(r"^create\s+", "", lowered))
    if method == "PUT":
        return "Update " + re.sub(r"^update\s+", "", lowered)
    if method == "PATCH":
        return "Partially update " + re.sub(r"^update\s+", "", lowered)
    if method == "DELETE":
        return "Delete " + re.sub(r"^remove\s+", "", re.sub(r"^delete\s+", "", lowered))

    return f"Perform {method} operation on {lowered}"

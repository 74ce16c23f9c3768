"""ID preservation across collection regenerations.

Regenerating a collection from an API definition assigns fresh ids, which
breaks links, forks and monitors in Postman. This module copies ids, request
bodies and response examples from a previously written collection onto the
matching items of the new one.

Items are matched by identity key (``GET_List users``, ``folder_users``), not
by position, so matching survives reorganization. When several items share a
key, the last one walked in the existing collection wins.

Failures to read or parse the existing collection are logged and leave the
new collection untouched.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .walker import get_item_key, is_request, walk_collection

logger = logging.getLogger(__name__)


@dataclass
class PreservationStats:
    """Statistics for id preservation."""

    collection_id_restored: bool = False
    ids_restored: int = 0
    bodies_restored: int = 0
    responses_restored: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "collection_id_restored": self.collection_id_restored,
            "ids_restored": self.ids_restored,
            "bodies_restored": self.bodies_restored,
            "responses_restored": self.responses_restored,
            "error_count": len(self.errors),
            "errors": self.errors,
        }


@dataclass
class ExistingItems:
    """Lookups built from an existing collection, keyed by identity key."""

    ids: dict[str, str] = field(default_factory=dict)
    responses: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    bodies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_collection(cls, collection: dict[str, Any]) -> "ExistingItems":
        """Index ids, response lists and raw bodies of an existing collection."""
        existing = cls()

        def _index(item: dict[str, Any]) -> None:
            key = get_item_key(item)
            if item.get("id"):
                existing.ids[key] = item["id"]

            if not is_request(item):
                return

            responses = item.get("response")
            if isinstance(responses, list) and responses:
                existing.responses[key] = responses

            body = item["request"].get("body")
            if isinstance(body, dict) and isinstance(body.get("raw"), str):
                existing.bodies[key] = body["raw"]

        walk_collection(collection.get("item"), _index)
        return existing


class IdPreserver:
    """Restore ids and recorded data from an existing collection.

    Attributes:
        existing: Path to the previously written collection, or the already
            loaded collection dictionary.
        stats: Preservation statistics.
    """

    def __init__(self, existing: Path | str | dict[str, Any] | None = None) -> None:
        self.existing = existing
        self.stats = PreservationStats()

    def preserve_ids(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Copy ids, bodies and responses onto matching items.

        Args:
            collection: Newly generated collection.

        Returns:
            The same collection with preserved data restored, or unchanged
            when there is no usable existing collection.
        """
        existing = self._load_existing()
        if existing is None:
            return collection

        try:
            lookups = ExistingItems.from_collection(existing)
        except (AttributeError, TypeError) as e:
            logger.warning("Existing collection is malformed, ids not preserved: %s", e)
            self.stats.errors.append({"error": str(e)})
            return collection

        existing_info = existing.get("info")
        if isinstance(existing_info, dict) and existing_info.get("_postman_id"):
            collection.setdefault("info", {})["_postman_id"] = existing_info["_postman_id"]
            self.stats.collection_id_restored = True

        def _restore(item: dict[str, Any]) -> None:
            key = get_item_key(item)
            if key in lookups.ids:
                item["id"] = lookups.ids[key]
                self.stats.ids_restored += 1

            if not is_request(item):
                return

            body = item["request"].get("body")
            if key in lookups.bodies and isinstance(body, dict):
                body["raw"] = lookups.bodies[key]
                self.stats.bodies_restored += 1

            if key in lookups.responses:
                item["response"] = copy.deepcopy(lookups.responses[key])
                self.stats.responses_restored += 1

        walk_collection(collection.get("item"), _restore)

        logger.info(
            "Restored %d ids, %d bodies and %d response sets",
            self.stats.ids_restored,
            self.stats.bodies_restored,
            self.stats.responses_restored,
        )
        return collection

    def _load_existing(self) -> dict[str, Any] | None:
        """Load the existing collection, returning None when unusable."""
        if self.existing is None:
            return None

        if isinstance(self.existing, dict):
            return self.existing

        path = Path(self.existing)
        if not path.exists():
            logger.debug("No existing collection at %s", path)
            return None

        try:
            with path.open(encoding="utf-8") as f:
                existing = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read existing collection %s: %s", path, e)
            self.stats.errors.append({"error": str(e), "path": str(path)})
            return None

        if not isinstance(existing, dict):
            logger.warning("Existing collection %s is not a JSON object", path)
            return None

        return existing

    def get_stats(self) -> dict[str, Any]:
        """Get preservation statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset preservation statistics."""
        self.stats = PreservationStats()

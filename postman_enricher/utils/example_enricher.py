"""Example enricher for Postman collections.

Merges configured example payloads into request bodies and attaches response
examples. Requests that have no responses at all get a default example based
on their HTTP method.

Configuration::

    examples:
      requests:
        "Create User":
          body: {name: "Jane", email: "jane@example.com"}
      responses:
        "Get User":
          name: "User found"
          code: 200
          body: {id: 1, name: "Jane"}
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from .walker import as_mapping, get_request_method, is_request, walk_collection

logger = logging.getLogger(__name__)

EXAMPLE_ID = "123e4567-e89b-12d3-a456-426614174000"
EXAMPLE_TIMESTAMP = "2024-01-01T00:00:00Z"

JSON_HEADER = {"key": "Content-Type", "value": "application/json"}

DEFAULT_STATUS = {
    "GET": ("OK", 200),
    "POST": ("Created", 201),
    "PUT": ("OK", 200),
    "PATCH": ("OK", 200),
    "DELETE": ("No Content", 204),
}


@dataclass
class ExampleStats:
    """Statistics for example enrichment."""

    bodies_merged: int = 0
    bodies_skipped: int = 0
    responses_configured: int = 0
    responses_defaulted: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "bodies_merged": self.bodies_merged,
            "bodies_skipped": self.bodies_skipped,
            "responses_configured": self.responses_configured,
            "responses_defaulted": self.responses_defaulted,
        }


def to_json(value: Any) -> str:
    """Serialize a payload the way collections store example bodies."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def get_default_status(method: str) -> tuple[str, int]:
    """Get the default (status text, status code) for an HTTP method."""
    return DEFAULT_STATUS.get(method, ("OK", 200))


def get_default_response_example(method: str) -> dict[str, Any]:
    """Build the default response example for an HTTP method."""
    if method == "DELETE":
        return {
            "name": "No Content",
            "status": "No Content",
            "code": 204,
            "header": [],
            "body": "",
        }

    if method == "POST":
        return {
            "name": "Created",
            "status": "Created",
            "code": 201,
            "_postman_previewlanguage": "json",
            "header": [dict(JSON_HEADER)],
            "body": to_json({"id": EXAMPLE_ID, "message": "Resource created successfully"}),
        }

    return {
        "name": "Success",
        "status": "OK",
        "code": 200,
        "_postman_previewlanguage": "json",
        "header": [dict(JSON_HEADER)],
        "body": to_json(
            {
                "id": EXAMPLE_ID,
                "name": "Example Resource",
                "createdAt": EXAMPLE_TIMESTAMP,
                "updatedAt": EXAMPLE_TIMESTAMP,
            },
        ),
    }


class ExampleEnricher:
    """Add request body and response examples to requests."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.request_examples: dict[str, dict[str, Any]] = as_mapping(config.get("requests"))
        self.response_examples: dict[str, dict[str, Any]] = as_mapping(config.get("responses"))
        self.stats = ExampleStats()

    def add_examples(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Add examples to every request in the collection.

        Args:
            collection: Postman collection dictionary.

        Returns:
            The same collection with examples applied.
        """
        walk_collection(collection.get("item"), self._enrich_item)
        return collection

    def _enrich_item(self, item: dict[str, Any]) -> None:
        if not is_request(item):
            return

        name = item.get("name")
        method = get_request_method(item)

        self._merge_body(item, name)

        configured = self.response_examples.get(name)
        if isinstance(configured, dict):
            item["response"] = [self._build_configured_response(configured, method)]
            self.stats.responses_configured += 1
        elif not item.get("response"):
            item["response"] = [get_default_response_example(method)]
            self.stats.responses_defaulted += 1

    def _merge_body(self, item: dict[str, Any], name: str | None) -> None:
        body = item["request"].get("body")
        entry = self.request_examples.get(name)
        override = entry.get("body") if isinstance(entry, dict) else None
        if not isinstance(body, dict) or not body.get("raw") or not override:
            return

        try:
            parsed = json.loads(body["raw"])
        except (json.JSONDecodeError, TypeError):
            self.stats.bodies_skipped += 1
            logger.debug("Body of '%s' is not JSON, leaving it untouched", name)
            return

        if not isinstance(parsed, dict) or not isinstance(override, dict):
            self.stats.bodies_skipped += 1
            return

        body["raw"] = to_json({**parsed, **override})
        self.stats.bodies_merged += 1

    def _build_configured_response(self, example: dict[str, Any], method: str) -> dict[str, Any]:
        status, code = get_default_status(method)
        body = example.get("body")
        return {
            "name": example.get("name") or "Success",
            "status": example.get("status") or status,
            "code": example.get("code") or code,
            "_postman_previewlanguage": "json",
            "header": [dict(JSON_HEADER)],
            "body": to_json(body) if body is not None else "",
        }

    def get_stats(self) -> dict[str, Any]:
        """Get example statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset example statistics."""
        self.stats = ExampleStats()

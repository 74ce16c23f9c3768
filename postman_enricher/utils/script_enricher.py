"""Test script enricher.

Appends a basic Postman test script to every request, chosen by HTTP method.
Enabled with::

    tests:
      auto: true
"""

import logging
from dataclasses import dataclass
from typing import Any

from .walker import get_request_method, is_request, walk_collection

logger = logging.getLogger(__name__)

TEST_TEMPLATES: dict[str, list[str]] = {
    "GET": [
        'pm.test("Status code is 200", () => {',
        "    pm.response.to.have.status(200);",
        "});",
        "",
        'pm.test("Response time is less than 1000ms", () => {',
        "    pm.expect(pm.response.responseTime).to.be.below(1000);",
        "});",
    ],
    "POST": [
        'pm.test("Successful creation", () => {',
        "    pm.expect(pm.response.code).to.be.oneOf([200, 201]);",
        "});",
        "",
        'pm.test("Response has data", () => {',
        "    const jsonData = pm.response.json();",
        '    pm.expect(jsonData).to.be.an("object");',
        "});",
    ],
    "PUT": [
        'pm.test("Successful update", () => {',
        "    pm.expect(pm.response.code).to.be.oneOf([200, 204]);",
        "});",
    ],
    "PATCH": [
        'pm.test("Successful partial update", () => {',
        "    pm.expect(pm.response.code).to.be.oneOf([200, 204]);",
        "});",
        "",
        'pm.test("Response has updated data", () => {',
        "    if (pm.response.code === 200) {",
        "        const jsonData = pm.response.json();",
        '        pm.expect(jsonData).to.be.an("object");',
        "    }",
        "});",
    ],
    "DELETE": [
        'pm.test("Successful deletion", () => {',
        "    pm.response.to.have.status(204);",
        "});",
    ],
}


def get_test_template(method: str) -> list[str] | None:
    """Get a copy of the test script lines for an HTTP method."""
    template = TEST_TEMPLATES.get(method)
    return list(template) if template else None


@dataclass
class TestScriptStats:
    """Statistics for test script generation."""

    __test__ = False

    scripts_added: int = 0
    requests_skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "scripts_added": self.scripts_added,
            "requests_skipped": self.requests_skipped,
        }


class TestScriptEnricher:
    """Append method-specific test scripts to requests."""

    __test__ = False

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.auto: bool = bool(config.get("auto", False))
        self.stats = TestScriptStats()

    def add_tests(self, collection: dict[str, Any]) -> dict[str, Any]:
        """Add test scripts to every request when ``auto`` is set."""
        if not self.auto:
            return collection

        walk_collection(collection.get("item"), self._add_test)
        return collection

    def _add_test(self, item: dict[str, Any]) -> None:
        if not is_request(item):
            return

        method = get_request_method(item)
        script = get_test_template(method)
        if script is None:
            self.stats.requests_skipped += 1
            logger.debug("No test template for method %s on '%s'", method, item.get("name"))
            return

        item.setdefault("event", []).append(
            {
                "listen": "test",
                "script": {"type": "text/javascript", "exec": script},
            },
        )
        self.stats.scripts_added += 1

    def get_stats(self) -> dict[str, Any]:
        """Get test script statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset test script statistics."""
        self.stats = TestScriptStats()

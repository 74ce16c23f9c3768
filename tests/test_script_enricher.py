"""Tests for TestScriptEnricher."""

import pytest

from postman_enricher.utils.script_enricher import (
    TEST_TEMPLATES,
    TestScriptEnricher,
    get_test_template,
)


@pytest.fixture
def collection():
    """Create a collection with a request per method."""
    methods = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    return {
        "info": {"name": "API"},
        "item": [
            {"name": method.title(), "request": {"method": method, "url": "/things"}}
            for method in methods
        ],
    }


class TestTemplates:
    """Test the per-method template table."""

    def test_get_template_is_verbatim(self):
        assert get_test_template("GET") == [
            'pm.test("Status code is 200", () => {',
            "    pm.response.to.have.status(200);",
            "});",
            "",
            'pm.test("Response time is less than 1000ms", () => {',
            "    pm.expect(pm.response.responseTime).to.be.below(1000);",
            "});",
        ]

    def test_delete_template(self):
        assert get_test_template("DELETE") == [
            'pm.test("Successful deletion", () => {',
            "    pm.response.to.have.status(204);",
            "});",
        ]

    def test_unknown_method_has_no_template(self):
        assert get_test_template("OPTIONS") is None

    def test_template_returns_copy(self):
        get_test_template("PUT").append("mutated")
        assert "mutated" not in TEST_TEMPLATES["PUT"]


class TestAddTests:
    """Test appending test scripts to requests."""

    def test_auto_disabled_is_noop(self, collection):
        TestScriptEnricher({}).add_tests(collection)
        assert all("event" not in item for item in collection["item"])

    def test_scripts_appended(self, collection):
        enricher = TestScriptEnricher({"auto": True})
        enricher.add_tests(collection)

        for item in collection["item"][:5]:
            assert item["event"][-1]["listen"] == "test"
            assert item["event"][-1]["script"]["type"] == "text/javascript"
            assert item["event"][-1]["script"]["exec"] == TEST_TEMPLATES[item["request"]["method"]]
        assert "event" not in collection["item"][5]
        assert enricher.get_stats() == {"scripts_added": 5, "requests_skipped": 1}

    def test_existing_events_preserved(self, collection):
        existing = {"listen": "prerequest", "script": {"type": "text/javascript", "exec": ["// setup"]}}
        collection["item"][0]["event"] = [existing]
        TestScriptEnricher({"auto": True}).add_tests(collection)

        events = collection["item"][0]["event"]
        assert events[0] is existing
        assert events[1]["listen"] == "test"

    def test_reset_stats(self, collection):
        enricher = TestScriptEnricher({"auto": True})
        enricher.add_tests(collection)
        enricher.reset_stats()
        assert enricher.get_stats() == {"scripts_added": 0, "requests_skipped": 0}

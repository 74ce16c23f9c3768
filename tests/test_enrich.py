"""Tests for the enrichment pipeline and CLI."""

import json

import pytest
import yaml

from postman_enricher.convert import convert_openapi
from postman_enricher.enrich import (
    ConfigLoadError,
    EnrichmentStats,
    enrich_collection,
    load_collection,
    load_config,
    main,
    save_collection,
)
from postman_enricher.utils.script_enricher import TEST_TEMPLATES
from postman_enricher.utils.walker import is_request, walk_collection

OPENAPI_SOURCE = """
openapi: 3.0.3
info:
  title: Users Service
  version: 1.0.0
servers:
  - url: https://api.example.com/v1
tags:
  - name: users
    description: User management
paths:
  /users:
    get:
      tags: [users]
      summary: List Users
      parameters:
        - name: limit
          in: query
          schema: {type: integer}
      responses:
        "200":
          description: OK
    post:
      tags: [users]
      summary: Create User
      requestBody:
        content:
          application/json:
            schema:
              type: object
              properties:
                name: {type: string}
      responses:
        "201":
          description: Created
  /users/{id}:
    get:
      tags: [users]
      summary: Get User
      parameters:
        - name: id
          in: path
          required: true
          schema: {type: string}
      responses:
        "200":
          description: OK
    delete:
      tags: [users]
      summary: Delete User
      parameters:
        - name: id
          in: path
          required: true
          schema: {type: string}
      responses:
        "204":
          description: Deleted
"""


@pytest.fixture
def single_request_collection():
    """Create a collection with one request."""
    return {
        "info": {"name": "Users", "schema": "v2.1"},
        "item": [
            {
                "name": "Get User",
                "request": {"method": "GET", "url": {"path": ["users", "{id}"]}},
            },
        ],
    }


def _requests(collection):
    found = []
    walk_collection(collection["item"], lambda item: found.append(item) if is_request(item) else None)
    return found


class TestEnrichCollection:
    """Test stage orchestration."""

    def test_empty_config_is_noop(self, single_request_collection):
        result = enrich_collection(single_request_collection, {})
        assert result == single_request_collection

    def test_filter_and_tests_end_to_end(self, single_request_collection):
        config = {"filter": {"include": {"GET /users/:id": True}}, "tests": {"auto": True}}
        result = enrich_collection(single_request_collection, config)

        requests = _requests(result)
        assert len(requests) == 1
        assert requests[0]["name"] == "Get User"
        assert requests[0]["request"] == {"method": "GET", "url": {"path": ["users", "{id}"]}}
        assert requests[0]["event"] == [
            {
                "listen": "test",
                "script": {"type": "text/javascript", "exec": TEST_TEMPLATES["GET"]},
            },
        ]

    def test_malformed_sections_skipped(self, single_request_collection):
        config = {"filter": "everything", "tests": ["auto"], "examples": None}
        result = enrich_collection(single_request_collection, config)
        assert result == single_request_collection

    @pytest.mark.parametrize(
        "config",
        [
            {"descriptions": {"folders": ["users"]}},
            {"descriptions": {"collection": {2024: {"name": "Renamed"}}}},
            {"descriptions": {"requests": "Get User"}},
            {"variables": {"path": ["id"], "query": "limit", "descriptions": ["id"]}},
            {"examples": {"requests": ["Create User"], "responses": ["ok"]}},
            {"organize": {"enabled": True, "strategy": "resources", "nestingLevel": "2"}},
            {"filter": {"include": {"GET /users": True}, "normalizationRules": ["id"], "note": 5}},
            {"pathVariables": {"enabled": True, "mapping": ["id"]}},
        ],
    )
    def test_malformed_entries_do_not_raise(self, config):
        result = enrich_collection(convert_openapi(OPENAPI_SOURCE), config)
        assert _requests(result)

    def test_config_loaded_from_path(self, single_request_collection, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"tests": {"auto": True}}), encoding="utf-8")

        result = enrich_collection(single_request_collection, str(config_path))
        assert result["item"][0]["event"][0]["listen"] == "test"

    def test_filter_runs_before_organize(self):
        collection = convert_openapi(OPENAPI_SOURCE)
        config = {
            "filter": {"include": {"GET /users": True, "GET /users/:id": True}},
            "organize": {"enabled": True, "strategy": "resources"},
        }
        stats = EnrichmentStats()
        result = enrich_collection(collection, config, stats=stats)

        assert [item["name"] for item in result["item"]] == ["users"]
        assert [item["name"] for item in result["item"][0]["item"]] == ["List Users", "Get User"]
        assert stats.requests_in == 4
        assert stats.requests_out == 2
        assert set(stats.stages) == {"filter", "organize"}

    def test_full_pipeline(self):
        collection = convert_openapi(OPENAPI_SOURCE)
        config = {
            "descriptions": {"folders": {"users": "All users"}, "requests": {"Get User": "One user"}},
            "examples": {"requests": {"Create User": {"body": {"name": "Jane"}}}},
            "variables": {"path": {"id": "{{userId}}"}, "query": {"limit": "5"}},
            "pathVariables": {"enabled": True, "mapping": {"id": {"reference": "{{id}}"}}},
            "tests": {"auto": True},
        }
        result = enrich_collection(collection, config)

        folder = result["item"][0]
        assert folder["description"] == {"content": "All users", "type": "text/markdown"}
        assert result["variable"] == []

        by_name = {item["name"]: item for item in _requests(result)}
        assert by_name["Get User"]["request"]["description"]["content"] == "One user"
        assert json.loads(by_name["Create User"]["request"]["body"]["raw"]) == {"name": "Jane"}
        assert by_name["Get User"]["request"]["url"]["variable"][0]["value"] == "{{id}}"
        assert by_name["List Users"]["request"]["url"]["query"][0] == {
            "key": "limit",
            "value": "5",
            "disabled": False,
        }
        assert all(item["event"][-1]["listen"] == "test" for item in by_name.values())

    def test_round_trip_id_preservation(self, tmp_path):
        config = {
            "organize": {"enabled": True, "strategy": "resources"},
            "examples": {},
            "tests": {"auto": True},
        }
        first = enrich_collection(convert_openapi(OPENAPI_SOURCE), config)
        existing_path = tmp_path / "collection.json"
        save_collection(first, existing_path)

        second = enrich_collection(convert_openapi(OPENAPI_SOURCE), config, existing_path)

        assert second["info"]["_postman_id"] == first["info"]["_postman_id"]
        first_ids = {item["name"]: item["id"] for item in _requests(first)}
        second_ids = {item["name"]: item["id"] for item in _requests(second)}
        assert second_ids == first_ids

    def test_unreadable_existing_is_ignored(self, single_request_collection, tmp_path):
        existing_path = tmp_path / "collection.json"
        existing_path.write_text("[broken", encoding="utf-8")
        result = enrich_collection(single_request_collection, {}, existing_path)
        assert result == single_request_collection


class TestConfigAndPersistence:
    """Test config loading and collection persistence."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("tests:\n  auto: true\n", encoding="utf-8")
        assert load_config(path) == {"tests": {"auto": True}}

    def test_empty_config_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_missing_config_raises(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="Failed to load config"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("filter: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            load_config(path)

    def test_save_collection_format(self, tmp_path, single_request_collection):
        single_request_collection["info"]["name"] = "Usuários"
        path = tmp_path / "out" / "collection.json"
        save_collection(single_request_collection, path)

        text = path.read_text(encoding="utf-8")
        assert text.startswith('{\n  "info": {\n    "name": "Usuários"')
        assert text.endswith("}\n")
        assert load_collection(path) == single_request_collection


class TestMain:
    """Test the command-line entry point."""

    def test_enriches_openapi_file(self, tmp_path):
        source = tmp_path / "api.yaml"
        source.write_text(OPENAPI_SOURCE, encoding="utf-8")
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"tests": {"auto": True}}), encoding="utf-8")
        output = tmp_path / "collection.json"

        assert main([str(source), str(config), "-o", str(output)]) == 0

        collection = json.loads(output.read_text(encoding="utf-8"))
        assert len(_requests(collection)) == 4

    def test_rerun_preserves_ids_from_output(self, tmp_path):
        source = tmp_path / "api.yaml"
        source.write_text(OPENAPI_SOURCE, encoding="utf-8")
        config = tmp_path / "config.yaml"
        config.write_text("{}\n", encoding="utf-8")
        output = tmp_path / "collection.json"

        assert main([str(source), str(config), "-o", str(output)]) == 0
        first = json.loads(output.read_text(encoding="utf-8"))
        assert main([str(source), str(config), "-o", str(output)]) == 0
        second = json.loads(output.read_text(encoding="utf-8"))

        assert second["info"]["_postman_id"] == first["info"]["_postman_id"]

    def test_enriches_collection_file(self, tmp_path, single_request_collection):
        source = tmp_path / "input.json"
        save_collection(single_request_collection, source)
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"examples": {}}), encoding="utf-8")
        output = tmp_path / "enriched.json"

        assert main([str(source), str(config), "-o", str(output)]) == 0
        collection = load_collection(output)
        assert collection["item"][0]["response"][0]["code"] == 200

    def test_missing_config_exits_with_error(self, tmp_path, single_request_collection):
        source = tmp_path / "input.json"
        save_collection(single_request_collection, source)

        assert main([str(source), str(tmp_path / "missing.yaml"), "-o", str(tmp_path / "o.json")]) == 1

    def test_invalid_openapi_exits_with_error(self, tmp_path):
        source = tmp_path / "api.yaml"
        source.write_text("just: text\n", encoding="utf-8")
        config = tmp_path / "config.yaml"
        config.write_text("{}\n", encoding="utf-8")

        assert main([str(source), str(config), "-o", str(tmp_path / "o.json")]) == 1

    def test_malformed_operation_exits_with_error(self, tmp_path):
        source = tmp_path / "api.yaml"
        source.write_text(
            "openapi: 3.0.3\ninfo: {title: x}\npaths:\n  /users:\n    get:\n      responses: [ok]\n",
            encoding="utf-8",
        )
        config = tmp_path / "config.yaml"
        config.write_text("{}\n", encoding="utf-8")
        output = tmp_path / "o.json"

        assert main([str(source), str(config), "-o", str(output)]) == 1
        assert not output.exists()

"""Convert OpenAPI 3.x / Swagger 2.0 definitions to Postman collections.

Produces a Postman Collection v2.1 dictionary that the enrichment stages can
work on:
- one folder per first operation tag (untagged operations stay top level)
- structured URLs on ``{{baseUrl}}`` with ``:param`` path segments
- path variables and query parameters (optional ones disabled)
- JSON example bodies built from schemas or declared examples
- one response example per declared response

Every collection and item gets a fresh id; use ``IdPreserver`` to keep ids
stable across regenerations.

Usage:
    collection = convert_openapi_file(Path("api.yaml"))
"""

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "options", "head")

HTTP_STATUS_TEXT = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}

TYPE_PLACEHOLDERS = {
    "string": "<string>",
    "integer": "<integer>",
    "number": "<number>",
    "boolean": "<boolean>",
}

MAX_SCHEMA_DEPTH = 5

PATH_PARAM = re.compile(r"^\{([^}]+)\}$")


class ConversionError(ValueError):
    """Raised when an API definition cannot be converted."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def convert_openapi_file(path: Path) -> dict[str, Any]:
    """Read and convert an API definition file (YAML or JSON)."""
    return convert_openapi(path.read_text(encoding="utf-8"))


def convert_openapi(source: str) -> dict[str, Any]:
    """Convert API definition text to a Postman collection.

    Args:
        source: OpenAPI 3.x or Swagger 2.0 document as YAML or JSON text.

    Returns:
        Postman collection dictionary.

    Raises:
        ConversionError: If the text is not a parseable OpenAPI/Swagger document.
    """
    try:
        spec = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ConversionError(f"Invalid API definition: {e}") from e

    if not isinstance(spec, dict):
        raise ConversionError("Invalid API definition: expected a mapping at the top level")
    if "openapi" not in spec and "swagger" not in spec:
        raise ConversionError("Unsupported API definition: missing 'openapi' or 'swagger' version")
    if not isinstance(spec.get("paths"), dict):
        raise ConversionError("Invalid API definition: 'paths' must be a mapping")

    info = spec.get("info") or {}
    try:
        collection: dict[str, Any] = {
            "info": {
                "_postman_id": str(uuid.uuid4()),
                "name": info.get("title") or "API",
                "schema": POSTMAN_SCHEMA,
            },
            "item": _build_items(spec),
            "variable": [{"key": "baseUrl", "value": _base_url(spec)}],
        }
    except (AttributeError, TypeError, KeyError, IndexError) as e:
        raise ConversionError(f"Invalid API definition: {e}") from e

    if info.get("description"):
        collection["info"]["description"] = info["description"]

    logger.info("Converted '%s' to a collection", collection["info"]["name"])
    return collection


def _base_url(spec: dict[str, Any]) -> str:
    servers = spec.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        return str(servers[0].get("url", "")).rstrip("/")

    host = spec.get("host")
    if host:
        scheme = (spec.get("schemes") or ["https"])[0]
        return f"{scheme}://{host}{spec.get('basePath', '')}".rstrip("/")
    return ""


def _build_items(spec: dict[str, Any]) -> list[dict[str, Any]]:
    """Build request items grouped into folders by first tag."""
    items: list[dict[str, Any]] = []
    folders: dict[str, dict[str, Any]] = {}
    tag_descriptions = {
        tag.get("name"): tag.get("description")
        for tag in spec.get("tags") or []
        if isinstance(tag, dict)
    }

    for path, path_item in spec["paths"].items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters") or []

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            item = _build_request_item(spec, method.upper(), path, operation, shared_params)
            tags = operation.get("tags") or []
            if not tags:
                items.append(item)
                continue

            tag = tags[0]
            if tag not in folders:
                folder: dict[str, Any] = {"id": str(uuid.uuid4()), "name": tag, "item": []}
                if tag_descriptions.get(tag):
                    folder["description"] = tag_descriptions[tag]
                folders[tag] = folder
                items.append(folder)
            folders[tag]["item"].append(item)

    return items


def _build_request_item(
    spec: dict[str, Any],
    method: str,
    path: str,
    operation: dict[str, Any],
    shared_params: list[dict[str, Any]],
) -> dict[str, Any]:
    params = [_resolve(spec, p) for p in [*shared_params, *(operation.get("parameters") or [])]]

    request: dict[str, Any] = {
        "method": method,
        "header": [],
        "url": _build_url(path, params),
    }

    body = _build_body(spec, operation, params)
    if body is not None:
        request["header"].append({"key": "Content-Type", "value": "application/json"})
        request["body"] = body

    if operation.get("description"):
        request["description"] = operation["description"]

    return {
        "id": str(uuid.uuid4()),
        "name": operation.get("summary") or operation.get("operationId") or f"{method} {path}",
        "request": request,
        "response": _build_responses(spec, operation),
    }


def _build_url(path: str, params: list[dict[str, Any]]) -> dict[str, Any]:
    segments = []
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        match = PATH_PARAM.match(segment)
        segments.append(f":{match.group(1)}" if match else segment)

    url: dict[str, Any] = {
        "raw": "{{baseUrl}}/" + "/".join(segments),
        "host": ["{{baseUrl}}"],
        "path": segments,
    }

    variables = [
        {
            "key": p.get("name", ""),
            "value": _placeholder(p),
            "description": p.get("description", ""),
        }
        for p in params
        if p.get("in") == "path"
    ]
    if variables:
        url["variable"] = variables

    query = []
    for p in params:
        if p.get("in") != "query":
            continue
        entry: dict[str, Any] = {
            "key": p.get("name", ""),
            "value": _placeholder(p),
            "description": p.get("description", ""),
        }
        if not p.get("required", False):
            entry["disabled"] = True
        query.append(entry)
    if query:
        url["query"] = query

    return url


def _build_body(
    spec: dict[str, Any],
    operation: dict[str, Any],
    params: list[dict[str, Any]],
) -> dict[str, Any] | None:
    example: Any = None
    request_body = _resolve(spec, operation.get("requestBody") or {})
    content = (request_body.get("content") or {}).get("application/json")

    if isinstance(content, dict):
        example = _media_example(spec, content)
    else:
        body_params = [p for p in params if p.get("in") == "body"]
        if not body_params:
            return None
        example = schema_to_example(spec, body_params[0].get("schema") or {})

    return {
        "mode": "raw",
        "raw": json.dumps(example, indent=2, ensure_ascii=False),
        "options": {"raw": {"language": "json"}},
    }


def _build_responses(spec: dict[str, Any], operation: dict[str, Any]) -> list[dict[str, Any]]:
    responses = []
    for status, response in (operation.get("responses") or {}).items():
        response = _resolve(spec, response or {})
        try:
            code = int(status)
        except ValueError:
            code = 200
        status_text = HTTP_STATUS_TEXT.get(code, "Unknown")

        example: Any = None
        content = (response.get("content") or {}).get("application/json")
        if isinstance(content, dict):
            example = _media_example(spec, content)
        elif response.get("schema"):
            example = schema_to_example(spec, response["schema"])

        entry: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "name": response.get("description") or status_text,
            "status": status_text,
            "code": code,
            "header": [],
            "body": "",
        }
        if example is not None:
            entry["_postman_previewlanguage"] = "json"
            entry["header"] = [{"key": "Content-Type", "value": "application/json"}]
            entry["body"] = json.dumps(example, indent=2, ensure_ascii=False)
        responses.append(entry)

    return responses


def _media_example(spec: dict[str, Any], content: dict[str, Any]) -> Any:
    if "example" in content:
        return content["example"]
    examples = content.get("examples")
    if isinstance(examples, dict) and examples:
        first = _resolve(spec, next(iter(examples.values())) or {})
        if "value" in first:
            return first["value"]
    return schema_to_example(spec, content.get("schema") or {})


def _placeholder(param: dict[str, Any]) -> str:
    schema = param.get("schema") or param
    if "example" in param:
        return str(param["example"])
    return TYPE_PLACEHOLDERS.get(schema.get("type", "string"), "<string>")


def _resolve(spec: dict[str, Any], obj: Any) -> dict[str, Any]:
    """Follow a local ``$ref`` (``#/components/...`` or ``#/definitions/...``)."""
    if not isinstance(obj, dict):
        return {}
    ref = obj.get("$ref")
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return obj

    target: Any = spec
    for part in ref[2:].split("/"):
        if not isinstance(target, dict):
            return {}
        target = target.get(part.replace("~1", "/").replace("~0", "~"))
    return target if isinstance(target, dict) else {}


def schema_to_example(
    spec: dict[str, Any],
    schema: dict[str, Any],
    depth: int = 0,
    seen: frozenset[str] = frozenset(),
) -> Any:
    """Convert a schema to an example value with type placeholders."""
    if depth > MAX_SCHEMA_DEPTH or not isinstance(schema, dict):
        return {}

    ref = schema.get("$ref")
    if isinstance(ref, str):
        if ref in seen:
            return {}
        return schema_to_example(spec, _resolve(spec, schema), depth + 1, seen | {ref})

    if "example" in schema:
        return schema["example"]

    if "allOf" in schema:
        merged: dict[str, Any] = {}
        for sub in schema["allOf"]:
            result = schema_to_example(spec, sub, depth + 1, seen)
            if isinstance(result, dict):
                merged.update(result)
        return merged

    for key in ("oneOf", "anyOf"):
        if schema.get(key):
            return schema_to_example(spec, schema[key][0], depth + 1, seen)

    schema_type = schema.get("type", "object")

    if schema_type == "array":
        return [schema_to_example(spec, schema.get("items") or {}, depth + 1, seen)]

    if schema_type == "object" or "properties" in schema:
        return {
            name: schema_to_example(spec, prop, depth + 1, seen)
            for name, prop in (schema.get("properties") or {}).items()
        }

    if schema.get("enum"):
        return schema["enum"][0]

    return TYPE_PLACEHOLDERS.get(schema_type, "<string>")

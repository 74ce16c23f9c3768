"""Collection traversal utilities.

Provides a single, reusable way to walk Postman collection items and to
classify them. Every enrichment stage goes through these helpers instead of
re-implementing recursion over ``item`` lists.
"""

from collections.abc import Callable
from typing import Any

Item = dict[str, Any]


def walk_collection(items: list[Item] | None, handler: Callable[[Item], None]) -> None:
    """Call ``handler`` for every item in the tree, depth-first pre-order.

    Folders are visited before their children. The walker recurses into any
    item carrying an ``item`` list and never copies nodes, so handlers mutate
    the collection in place.

    Args:
        items: Top-level collection items (requests and folders).
        handler: Function called once per item.
    """
    if not items or not isinstance(items, list):
        return

    for item in items:
        handler(item)

        children = item.get("item")
        if isinstance(children, list):
            walk_collection(children, handler)


def is_request(item: Item) -> bool:
    """Check if an item is a request (carries an operation)."""
    return bool(item.get("request"))


def is_folder(item: Item) -> bool:
    """Check if an item is a folder (has children and no operation)."""
    return isinstance(item.get("item"), list) and not item.get("request")


def get_request_method(item: Item) -> str:
    """Get the HTTP method of a request item, defaulting to GET."""
    request = item.get("request")
    if isinstance(request, dict):
        return request.get("method") or "GET"
    return "GET"


def get_url_path(url: dict[str, Any] | str | None) -> str:
    """Extract the path portion of a Postman URL.

    Args:
        url: Postman URL object or raw URL string.

    Returns:
        ``/``-joined path segments for structured URLs, the string itself for
        raw URLs, the ``raw`` field as a fallback, else an empty string.
    """
    if isinstance(url, str):
        return url

    if not isinstance(url, dict):
        return ""

    path = url.get("path")
    if isinstance(path, list):
        return "/" + "/".join(str(segment) for segment in path)
    if isinstance(path, str) and path:
        return path

    return url.get("raw") or ""


def get_item_key(item: Item) -> str:
    """Build the identity key used to match items across two collections.

    Requests are keyed by method and name, folders by name. The key is not
    unique when siblings share a name and method; callers building maps from
    it keep the last item walked.
    """
    if is_request(item):
        return f"{get_request_method(item)}_{item.get('name')}"
    return f"folder_{item.get('name')}"


def count_requests(items: list[Item] | None) -> int:
    """Count request items anywhere in the tree."""
    count = 0

    def _count(item: Item) -> None:
        nonlocal count
        if is_request(item):
            count += 1

    walk_collection(items, _count)
    return count


def as_mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` if it is a dict, else an empty dict.

    Config entries come from hand-written YAML; a list or scalar where a
    mapping belongs is treated as not configured.
    """
    return value if isinstance(value, dict) else {}

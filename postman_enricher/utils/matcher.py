"""Endpoint matching utilities for filtering.

Endpoints are matched on a ``"<METHOD> <path>"`` key where the path has been
normalized so that ``{param}`` and ``:param`` placeholders compare equal.
"""

import re

PATH_PARAM_PATTERN = re.compile(r"\{[^}]+\}")


def normalize_path(path: str, rules: dict[str, str] | None = None) -> str:
    """Normalize a URL path for comparison.

    Each ``{param}`` placeholder is replaced by the replacement of the first
    rule whose pattern occurs inside it, or by ``:param`` when no rule
    matches. Rules are tried in mapping order, so callers with overlapping
    patterns must order them. ``:param`` segments are left as they are.

    Args:
        path: URL path to normalize.
        rules: Mapping of substring pattern to replacement segment.

    Returns:
        Normalized path.

    Examples:
        >>> normalize_path("/users/{id}")
        '/users/:id'
        >>> normalize_path("/users/{id}", {"id": ":userId"})
        '/users/:userId'
    """
    rules = rules or {}

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        for pattern, replacement in rules.items():
            if str(pattern) in token:
                return str(replacement)
        return ":" + token[1:-1]

    return PATH_PARAM_PATTERN.sub(_replace, path)


def should_include_endpoint(
    method: str,
    path: str,
    endpoints: dict[str, bool],
    rules: dict[str, str] | None = None,
) -> bool:
    """Check if an endpoint is enabled in an allow-list.

    Args:
        method: HTTP method.
        path: URL path.
        endpoints: Allow-list mapping ``"<METHOD> <normalized path>"`` to bool.
        rules: Optional normalization rules passed to ``normalize_path``.

    Returns:
        True if the exact key is present and truthy.
    """
    endpoint_key = f"{method} {normalize_path(path, rules)}"
    return bool(endpoints.get(endpoint_key, False))

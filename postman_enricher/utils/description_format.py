"""Description values in Postman collections.

A description is either a plain string or a rich-text object
``{"content": "...", "type": "text/markdown"}``. These helpers are the only
place that tells the two apart.
"""

from typing import Any

MARKDOWN_TYPE = "text/markdown"


def markdown(content: str) -> dict[str, str]:
    """Build a rich-text markdown description."""
    return {"content": content, "type": MARKDOWN_TYPE}


def is_rich_text(description: Any) -> bool:
    """Check if a description is in rich-text form."""
    return isinstance(description, dict) and "content" in description


def description_text(description: Any) -> str:
    """Return the text of a description in either form."""
    if isinstance(description, str):
        return description
    if is_rich_text(description):
        return str(description.get("content") or "")
    return ""


def is_blank(description: Any) -> bool:
    """Check if a description is missing or only whitespace."""
    return not description_text(description).strip()


def to_rich_text(description: Any) -> Any:
    """Normalize a plain-string description to rich text.

    Rich-text values and unrecognized values are returned unchanged.
    """
    if isinstance(description, str):
        return markdown(description)
    return description


def append_text(description: Any, text: str, separator: str = "\n\n") -> Any:
    """Append text to a description, keeping its form.

    Args:
        description: Existing description (plain, rich text or missing).
        text: Text to append.
        separator: Inserted between the existing text and ``text``.

    Returns:
        New description value.
    """
    if is_rich_text(description):
        updated = dict(description)
        updated["content"] = description_text(description) + separator + text
        return updated
    return description_text(description) + separator + text

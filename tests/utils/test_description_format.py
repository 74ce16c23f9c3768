"""Tests for description value helpers."""

from postman_enricher.utils.description_format import (
    append_text,
    description_text,
    is_blank,
    markdown,
    to_rich_text,
)


def test_markdown_builds_rich_text():
    assert markdown("Hello") == {"content": "Hello", "type": "text/markdown"}


def test_description_text_reads_both_forms():
    assert description_text("plain") == "plain"
    assert description_text(markdown("rich")) == "rich"
    assert description_text(None) == ""


def test_is_blank():
    assert is_blank(None)
    assert is_blank("   ")
    assert is_blank({"content": "", "type": "text/markdown"})
    assert not is_blank("text")


def test_to_rich_text_converts_strings_only():
    assert to_rich_text("text") == markdown("text")
    rich = markdown("already")
    assert to_rich_text(rich) is rich


def test_append_text_plain():
    assert append_text("Base", "Note") == "Base\n\nNote"
    assert append_text(None, "Note") == "\n\nNote"


def test_append_text_keeps_rich_text():
    result = append_text(markdown("Base"), "Note")
    assert result == {"content": "Base\n\nNote", "type": "text/markdown"}

"""Tests for HTML building helpers."""

from __future__ import annotations

from gridview.markup import add_or_append_class, class_tokens, content_tag, escape, merge_attributes, tag_options


class TestClassHandling:
    """Tests for class attribute manipulation."""

    def test_tokens(self) -> None:
        """Strings and sequences split into tokens."""
        assert class_tokens("a  b") == ["a", "b"]
        assert class_tokens(["a b", "c"]) == ["a", "b", "c"]
        assert class_tokens(None) == []

    def test_append(self) -> None:
        """Classes are appended without duplicates."""
        assert add_or_append_class({"class": "a"}, "b a") == {"class": "a b"}

    def test_prepend(self) -> None:
        """Prepending puts the new token first."""
        assert add_or_append_class({"class": "x"}, "grid", prepend=True) == {"class": "grid x"}

    def test_input_not_mutated(self) -> None:
        """A new dict is returned."""
        attrs = {"id": "t"}
        result = add_or_append_class(attrs, "a")
        assert attrs == {"id": "t"}
        assert result == {"id": "t", "class": "a"}

    def test_merge(self) -> None:
        """Classes accumulate, other keys are overridden."""
        merged = merge_attributes({"class": "num", "title": "a"}, {"class": "neg", "title": "b"})
        assert merged == {"class": "num neg", "title": "b"}


class TestTags:
    """Tests for attribute and tag rendering."""

    def test_tag_options(self) -> None:
        """None and False are skipped, True renders bare, values are escaped."""
        rendered = tag_options({"a": None, "b": False, "c": True, "d": 'x"y', "e": 3})
        assert rendered == ' c d="x&quot;y" e="3"'

    def test_structured_values_are_json(self) -> None:
        """Lists and dicts are serialized as JSON."""
        assert tag_options({"data-x": [1, "a"]}) == ' data-x="[1, &quot;a&quot;]"'

    def test_content_tag(self) -> None:
        """Content is inserted verbatim."""
        assert content_tag("td", "<b>x</b>", {"class": "c"}) == '<td class="c"><b>x</b></td>'
        assert content_tag("td", None) == "<td></td>"

    def test_escape(self) -> None:
        """None escapes to the empty string."""
        assert escape(None) == ""
        assert escape("<a & b>") == "&lt;a &amp; b&gt;"

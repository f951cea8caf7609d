"""Tests for filter widgets."""

from __future__ import annotations

import pytest

from gridview.columns import ColumnDescriptor
from gridview.filters import (
    BooleanFilter,
    FilterWidget,
    Option,
    RangeFilter,
    SelectFilter,
    TextFilter,
    collect_declarations,
    filter_dom_id,
    filter_param_name,
)


class TestNaming:
    """Tests for filter parameter names and DOM ids."""

    def test_param_name(self) -> None:
        """Filters submit under the grid's f namespace."""
        assert filter_param_name("accounts", "username") == "accounts[f][username]"

    def test_dom_id(self) -> None:
        """Dots in attributes become underscores."""
        assert filter_dom_id("accounts", "owner.name") == "accounts_f_owner_name"
        assert filter_dom_id("accounts", "created", "fr") == "accounts_f_created_fr"


class TestTextFilter:
    """Tests for the text filter."""

    def test_html(self) -> None:
        """The input is named, identified and prefilled."""
        markup = TextFilter(placeholder="Name").build_html("accounts", "username", 'a"b')
        assert 'id="accounts_f_username"' in markup
        assert 'name="accounts[f][username]"' in markup
        assert 'value="a&quot;b"' in markup
        assert 'placeholder="Name"' in markup

    def test_css_class(self) -> None:
        """Extra classes are appended."""
        markup = TextFilter(css_class="wide").build_html("accounts", "username")
        assert 'class="gridview-filter gridview-filter-text wide"' in markup

    def test_unknown_field_rejected(self) -> None:
        """Widgets reject unknown options."""
        with pytest.raises(ValueError):
            TextFilter(size=10)


class TestSelectFilter:
    """Tests for the select filter."""

    def test_option_value_defaults_to_label(self) -> None:
        """Options without a value submit their label."""
        assert Option(label="Open").value == "Open"

    def test_selected_value(self) -> None:
        """The active value is marked selected."""
        widget = SelectFilter(options=[Option(label="Open", value="1"), Option(label="Closed", value="0")])
        markup = widget.build_html("accounts", "status", 0)
        assert '<option value=""></option>' in markup
        assert '<option value="0" selected>Closed</option>' in markup
        assert '<option value="1">Open</option>' in markup

    def test_multiple(self) -> None:
        """Multi-selects submit a list and have no blank option."""
        widget = SelectFilter(options=[Option(label="a"), Option(label="b")], multiple=True)
        markup = widget.build_html("accounts", "tags", ["a", "b"])
        assert 'name="accounts[f][tags][]"' in markup
        assert " multiple>" in markup
        assert '<option value=""></option>' not in markup
        assert markup.count(" selected") == 2


class TestRangeFilter:
    """Tests for the range filter."""

    def test_bounds(self) -> None:
        """Both bounds render with their current values."""
        markup = RangeFilter(input_type="date").build_html("accounts", "created", {"fr": "2024-01-01"})
        assert 'type="date"' in markup
        assert 'id="accounts_f_created_fr" name="accounts[f][created][fr]" value="2024-01-01"' in markup
        assert 'id="accounts_f_created_to" name="accounts[f][created][to]" value=""' in markup

    def test_declaration_ids(self) -> None:
        """The declaration lists both inputs."""
        declaration = RangeFilter().declaration("accounts", "created")
        assert declaration["ids"] == ["accounts_f_created_fr", "accounts_f_created_to"]
        assert declaration["type"] == "range"


class TestBooleanFilter:
    """Tests for the boolean filter."""

    def test_true_selected(self) -> None:
        """Python booleans map to t/f option values."""
        markup = BooleanFilter().build_html("accounts", "active", True)
        assert '<option value="t" selected>yes</option>' in markup
        assert "gridview-filter-boolean" in markup


class TestDeclarations:
    """Tests for client declarations."""

    def test_base_widget_is_abstract(self) -> None:
        """The base widget has no markup of its own."""
        with pytest.raises(NotImplementedError):
            FilterWidget().build_html("accounts", "username")

    def test_collect(self) -> None:
        """Only bound filter-bearing columns are declared."""
        columns = [
            ColumnDescriptor(attribute="username", filter=TextFilter()),
            ColumnDescriptor(attribute="status", filter=SelectFilter(), detach_with_id="status"),
            ColumnDescriptor(attribute="balance"),
        ]
        declarations = collect_declarations("accounts", columns)
        assert [d["filterName"] for d in declarations] == ["accounts[f][username]", "accounts[f][status]"]
        assert [d["detached"] for d in declarations] == [False, True]

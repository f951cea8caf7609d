"""Range summary, show-all affordances and page links for the grid footer."""

from __future__ import annotations

import json

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .links import namespaced, state_as_parameter_pairs
from .markup import content_tag, escape


if TYPE_CHECKING:
    from .links import LinkBuilder
    from .messages import Messages
    from .state import GridState


INNER_WINDOW = 4
OUTER_WINDOW = 1


@dataclass(frozen=True)
class PaginationSummary:
    """What the status area of the footer shows."""

    status: str
    show_all: bool = False
    back_to_paginated: bool = False
    confirm_show_all: bool = False


def summarize(
    total_count: int,
    offset: int,
    page_length: int,
    *,
    total_pages: int,
    all_records_mode: bool = False,
    allow_show_all: bool = True,
    warning_threshold: int = 100,
) -> PaginationSummary:
    """Compute the range summary and which affordances apply.

    Examples
    --------
    >>> summarize(57, 20, 20, total_pages=3).status
    '21-40 / 57'
    >>> summarize(0, 0, 0, total_pages=0).status
    '0'
    """
    if total_pages < 2 and page_length == 0:
        return PaginationSummary(status="0", back_to_paginated=all_records_mode)

    status = f"{offset + 1}-{offset + page_length} / {total_count}"
    show_all = allow_show_all and not all_records_mode and total_count > page_length
    return PaginationSummary(
        status=status,
        show_all=show_all,
        back_to_paginated=all_records_mode,
        confirm_show_all=show_all and total_count > warning_threshold,
    )


def summarize_state(
    state: GridState,
    allow_show_all: bool = True,
    warning_threshold: int = 100,
) -> PaginationSummary:
    """``summarize`` applied to a grid state."""
    return summarize(
        state.total_count,
        state.offset,
        state.page_length,
        total_pages=state.total_pages,
        all_records_mode=state.all_records_mode,
        allow_show_all=allow_show_all,
        warning_threshold=warning_threshold,
    )


def show_all_link(
    state: GridState,
    messages: Messages,
    confirm: bool,
) -> str:
    """Link switching the grid to all-records mode."""
    parameters = [*state_as_parameter_pairs(state), (namespaced(state.name, "pp"), str(state.total_count))]
    return content_tag(
        "a",
        escape(messages["show_all_records_label"]),
        {
            "href": "#",
            "title": messages["show_all_records_tooltip"],
            "class": "gridview-show-all-link",
            "data-grid-state": json.dumps(parameters, default=str),
            "data-confirm-message": messages["all_queries_warning"] if confirm else None,
        },
    )


def back_to_pagination_link(state: GridState, messages: Messages) -> str:
    """Link leaving all-records mode."""
    override = namespaced(state.name, "pp")
    parameters = [pair for pair in state_as_parameter_pairs(state) if pair[0] != override]
    return content_tag(
        "a",
        escape(messages["switch_back_to_paginated_mode_label"]),
        {
            "href": "#",
            "title": messages["switch_back_to_paginated_mode_tooltip"],
            "class": "gridview-back-to-pagination-link",
            "data-grid-state": json.dumps(parameters, default=str),
        },
    )


def pagination_info(
    state: GridState,
    messages: Messages,
    allow_show_all: bool = True,
    warning_threshold: int = 100,
) -> str:
    """Status text followed by the applicable affordance link."""
    summary = summarize_state(state, allow_show_all, warning_threshold)
    parts = [summary.status]
    if summary.show_all:
        parts.append(show_all_link(state, messages, summary.confirm_show_all))
    if summary.back_to_paginated:
        parts.append(back_to_pagination_link(state, messages))
    return " ".join(parts)


def visible_pages(
    current: int,
    total: int,
    inner_window: int = INNER_WINDOW,
    outer_window: int = OUTER_WINDOW,
) -> list[int | None]:
    """Page numbers to link, with None marking a gap.

    Pages near the current one, plus ``outer_window`` pages at either end,
    are always listed. A gap of a single page lists that page instead.
    """
    if total < 1:
        return []
    window_from = current - inner_window
    window_to = current + inner_window
    if window_to > total:
        window_from -= window_to - total
        window_to = total
    if window_from < 1:
        window_to += 1 - window_from
        window_from = 1
    window_to = min(window_to, total)

    pages = set(range(window_from, window_to + 1))
    pages.update(range(1, min(total, 1 + outer_window) + 1))
    pages.update(range(max(1, total - outer_window), total + 1))

    result: list[int | None] = []
    previous = 0
    for page in sorted(pages):
        if page - previous == 2:
            result.append(page - 1)
        elif page - previous > 2:
            result.append(None)
        result.append(page)
        previous = page
    return result


def page_links(
    state: GridState,
    links: LinkBuilder,
    messages: Messages,
    extra: Mapping[str, Any],
) -> str:
    """Previous/numbered/next links; empty for a single page."""
    total = state.total_pages
    if total < 2 or state.all_records_mode:
        return ""
    current = state.current_page

    parts = []
    if current > 1:
        parts.append(
            content_tag(
                "a",
                escape(messages["previous_label"]),
                {"href": links.page_link(state, current - 1, extra), "class": "previous_page", "rel": "prev"},
            )
        )
    else:
        parts.append(content_tag("span", escape(messages["previous_label"]), {"class": "previous_page disabled"}))

    for page in visible_pages(current, total):
        if page is None:
            parts.append('<span class="gap">&hellip;</span>')
        elif page == current:
            parts.append(content_tag("em", str(page), {"class": "current"}))
        else:
            parts.append(content_tag("a", str(page), {"href": links.page_link(state, page, extra)}))

    if current < total:
        parts.append(
            content_tag(
                "a",
                escape(messages["next_label"]),
                {"href": links.page_link(state, current + 1, extra), "class": "next_page", "rel": "next"},
            )
        )
    else:
        parts.append(content_tag("span", escape(messages["next_label"]), {"class": "next_page disabled"}))

    return content_tag("div", " ".join(parts), {"class": "pagination"})


def pagination_panel_content(
    state: GridState,
    links: LinkBuilder,
    messages: Messages,
    extra: Mapping[str, Any],
    allow_show_all: bool = True,
    warning_threshold: int = 100,
) -> str:
    """Page links plus the status block."""
    status = pagination_info(state, messages, allow_show_all, warning_threshold)
    return page_links(state, links, messages, extra) + f' <div class="pagination_status">{status}</div>'

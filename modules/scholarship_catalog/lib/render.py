from __future__ import annotations

from . import utils
from .filters import degree_label
from .view import CatalogView, ListingCard


def results_header(view: CatalogView) -> str:
    """
    'Showing 1-15 of 37 loaded Scholarships (120 total in database)'
    """
    start, end = view.showing
    label = f" {view.result_label}" if view.result_label else ""
    text = f"Showing {start}-{end} of {view.filtered_count}{label} Scholarships"
    if view.loaded_count < view.total_count:
        text += f" ({view.total_count} total in database)"
    return text


def _card_html(card: ListingCard) -> str:
    x = card.listing
    funder = x.funder
    bits: list[str] = []
    if funder is not None:
        where = ", ".join(p for p in (funder.city, funder.country) if p)
        bits.append(f"<span class='funder'>{utils.esc(funder.initials)} &middot; {utils.esc(funder.name)}</span>")
        if where:
            bits.append(f"<span class='where'>{utils.esc(where)}</span>")
    if x.degree_levels:
        bits.append(f"<span class='levels'>{utils.esc(', '.join(degree_label(d) for d in x.degree_levels))}</span>")
    if x.covers_tuition:
        bits.append("<span class='badge'>Covers tuition</span>")
    if x.deadline is not None:
        deadline = f"Deadline: {utils.format_deadline(x.deadline)}"
        if card.days_left is not None and card.days_left >= 0:
            deadline += f" ({card.days_left} days left)"
        bits.append(f"<span class='deadline'>{utils.esc(deadline)}</span>")

    saved = "saved" if card.saved else "not-saved"
    featured = " featured" if x.is_featured else ""
    return (
        f"<li class='card{featured}' data-id='{utils.esc(x.id)}' data-saved='{saved}'>"
        f"<h3>{utils.esc(x.title or '(no title)')}</h3>"
        + "".join(bits)
        + "</li>"
    )


def _pager_html(view: CatalogView) -> str:
    if not view.show_pagination:
        return ""
    parts: list[str] = []
    for p in view.page_numbers:
        if p is None:
            parts.append("<span class='gap'>&hellip;</span>")
        elif p == view.current_page:
            parts.append(f"<b>{p}</b>")
        else:
            parts.append(f"<a data-page='{p}'>{p}</a>")
    return "<nav class='pager'>" + " ".join(parts) + "</nav>"


def build_page(view: CatalogView) -> str:
    """One catalog page as an HTML fragment; every text value is escaped."""
    parts: list[str] = [f"<p class='results'>{utils.esc(results_header(view))}</p>"]
    if view.is_empty:
        parts.append("<p class='empty'>No scholarships found.</p>")
    else:
        parts.append("<ul class='cards'>" + "".join(_card_html(c) for c in view.cards) + "</ul>")
    parts.append(_pager_html(view))
    if view.can_load_more:
        parts.append("<button class='load-more'>Load More Scholarships</button>")
    if view.filtered_notice:
        parts.append(f"<p class='notice'>{utils.esc(view.filtered_notice)}</p>")
    return "\n".join(p for p in parts if p)


def wrap_document(content_html: str, *, heading: str | None = None, intro: str | None = None) -> str:
    """
    Wrap a fragment in a minimal document structure with an optional heading and intro line.
    """
    parts: list[str] = ["<div>"]
    if heading:
        parts.append(f"<h2>{utils.esc(heading)}</h2>")
    if intro:
        parts.append(f"<p>{utils.esc(intro)}</p>")
    parts.append(content_html)
    parts.append("</div>")
    return "\n".join(parts)

# tests/test_filters.py
import pytest

from modules.scholarship_catalog.lib.filters import (
    DEGREE_LEVELS,
    FilterCache,
    FilterState,
    degree_label,
    facet_options,
    filter_listings,
)
from modules.scholarship_catalog.lib.models import FundingSource


# ----------------------------------------------------------------------
# Search predicate
# ----------------------------------------------------------------------
def test_empty_search_matches_everything(listings):
    assert filter_listings(listings, FilterState()) == listings
    assert filter_listings(listings, FilterState(search="")) == listings


def test_search_text_is_matched_verbatim(make_listing):
    items = [make_listing(1, title="FAIR Data Fellowship"), make_listing(2, title="Applied AI Track")]
    assert [x.id for x in filter_listings(items, FilterState(search="ai"))] == ["g001", "g002"]
    assert [x.id for x in filter_listings(items, FilterState(search=" AI"))] == ["g002"]
    assert FilterState(search=" ").is_active


def test_search_is_case_insensitive_over_title_description_and_funder(make_listing):
    items = [
        make_listing(1, title="Applied AI Fellowship"),
        make_listing(2, description="Research in marine ecology"),
        make_listing(3, funder=FundingSource(id="x", name="Sorbonne University", country="France")),
        make_listing(4, funder=FundingSource(id="y", name="Kyoto University", country="Japan")),
        make_listing(5, title="Nothing relevant", description="", funder=None),
    ]

    assert [x.id for x in filter_listings(items, FilterState(search="applied ai"))] == ["g001"]
    assert [x.id for x in filter_listings(items, FilterState(search="MARINE"))] == ["g002"]
    assert [x.id for x in filter_listings(items, FilterState(search="sorbonne"))] == ["g003"]
    assert [x.id for x in filter_listings(items, FilterState(search="japan"))] == ["g004"]
    assert filter_listings(items, FilterState(search="zzz")) == []


# ----------------------------------------------------------------------
# Facets
# ----------------------------------------------------------------------
def test_degree_facet_intersects_tags(make_listing):
    items = [
        make_listing(1, degree_levels=("masters",)),
        make_listing(2, degree_levels=("phd", "postdoc")),
        make_listing(3, degree_levels=()),
    ]
    state = FilterState(degree_levels=frozenset({"postdoc", "masters"}))
    assert [x.id for x in filter_listings(items, state)] == ["g001", "g002"]


def test_country_facet_uses_funder_country(listings):
    state = FilterState(countries=frozenset({"Canada"}))
    out = filter_listings(listings, state)
    assert out
    assert all(x.funder_country == "Canada" for x in out)


def test_country_facet_excludes_listings_without_funder(make_listing):
    items = [make_listing(1, funder=None)]
    assert filter_listings(items, FilterState(countries=frozenset({"Canada"}))) == []


def test_predicates_are_anded(listings):
    state = FilterState(
        search="scholarship 1",
        degree_levels=frozenset({"masters"}),
        countries=frozenset({"Canada"}),
        fields=frozenset({"Engineering"}),
    )
    out = filter_listings(listings, state)
    assert out
    for x in out:
        assert "scholarship 1" in x.title.lower()
        assert "masters" in x.degree_levels
        assert x.funder_country == "Canada"
        assert "Engineering" in x.fields_of_study


def test_filter_preserves_input_order(listings):
    out = filter_listings(listings, FilterState(fields=frozenset({"Biology"})))
    assert out == [x for x in listings if "Biology" in x.fields_of_study]


def test_filter_is_idempotent(listings):
    states = [
        FilterState(),
        FilterState(search="Scholarship 2"),
        FilterState(degree_levels=frozenset({"phd"}), countries=frozenset({"Germany", "Canada"})),
        FilterState(fields=frozenset({"Biology"}), search="munich"),
    ]
    for st in states:
        once = filter_listings(listings, st)
        assert filter_listings(once, st) == once


# ----------------------------------------------------------------------
# FilterState helpers
# ----------------------------------------------------------------------
def test_toggle_adds_then_removes():
    st = FilterState().toggle("countries", "Canada")
    assert st.countries == frozenset({"Canada"})
    assert st.is_active
    st = st.toggle("countries", "Canada")
    assert st == FilterState()
    assert not st.is_active


def test_toggle_unknown_facet_raises():
    with pytest.raises(ValueError):
        FilterState().toggle("colour", "blue")


def test_cleared_drops_search_and_facets():
    st = FilterState(search="ai", fields=frozenset({"Engineering"}))
    assert st.cleared() == FilterState()


# ----------------------------------------------------------------------
# Memoization
# ----------------------------------------------------------------------
def test_cache_reuses_result_for_same_snapshot_and_state(listings):
    snapshot = tuple(listings)
    cache = FilterCache()
    st = FilterState(search="Scholarship 1")

    first = cache.get(snapshot, st)
    second = cache.get(snapshot, FilterState(search="Scholarship 1"))
    assert first is second
    assert (cache.hits, cache.misses) == (1, 1)

    # A new snapshot object (e.g. after an append) recomputes.
    cache.get(tuple(listings), st)
    assert cache.misses == 2


# ----------------------------------------------------------------------
# Facet options
# ----------------------------------------------------------------------
def test_facet_options_first_seen_order_and_limit(make_listing):
    items = [
        make_listing(i, fields_of_study=(f"Field {i}",), funder=FundingSource(id=str(i), name="U", country=f"C{i % 12}"))
        for i in range(30)
    ]
    opts = facet_options(items, limit=10)
    assert opts.degree_levels == DEGREE_LEVELS
    assert opts.countries == tuple(f"C{i}" for i in range(10))
    assert opts.fields == tuple(f"Field {i}" for i in range(10))


def test_degree_labels():
    assert [degree_label(d) for d in DEGREE_LEVELS] == ["Master's", "PhD", "Postdoc"]
    assert degree_label("bachelors") == "bachelors"

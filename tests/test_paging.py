# tests/test_paging.py
import pytest

from modules.scholarship_catalog.lib.paging import (
    PageWindow,
    page_numbers,
    slice_page,
    total_pages,
    visible_range,
)


@pytest.mark.parametrize(
    "n,size,expected",
    [(0, 15, 1), (1, 15, 1), (15, 15, 1), (16, 15, 2), (37, 15, 3), (100, 30, 4)],
)
def test_total_pages_is_at_least_one(n, size, expected):
    assert total_pages(n, size) == expected


def test_slice_never_exceeds_page_size():
    items = list(range(37))
    for size in (1, 7, 15, 40):
        for page in range(1, total_pages(len(items), size) + 1):
            chunk = slice_page(items, page, size)
            assert 0 < len(chunk) <= size
            assert chunk == items[(page - 1) * size : page * size]


def test_slice_out_of_range_is_empty():
    assert slice_page(list(range(10)), 5, 15) == []
    assert slice_page(list(range(10)), 0, 15) == []


def test_non_positive_page_size_rejected():
    with pytest.raises(ValueError):
        total_pages(10, 0)
    with pytest.raises(ValueError):
        slice_page([1], 1, -1)
    with pytest.raises(ValueError):
        PageWindow(0)


def test_visible_range():
    assert visible_range(1, 15, 37) == (1, 15)
    assert visible_range(3, 15, 37) == (31, 37)
    assert visible_range(1, 15, 0) == (0, 0)


def test_page_numbers_with_gaps():
    assert page_numbers(1, 1) == [1]
    assert page_numbers(1, 3) == [1, 2, 3]
    assert page_numbers(5, 10) == [1, None, 4, 5, 6, None, 10]
    assert page_numbers(1, 10) == [1, 2, None, 10]
    assert page_numbers(10, 10) == [1, None, 9, 10]


def test_window_navigation_clamps():
    w = PageWindow(15)
    assert w.next(total=3) == 2
    assert w.next(total=3) == 3
    assert w.next(total=3) == 3
    assert w.go_to(99, total=3) == 3
    assert w.go_to(-4, total=3) == 1
    assert w.previous() == 1
    w.go_to(3, total=3)
    assert w.clamp(total=2) == 2
    w.reset()
    assert w.current_page == 1

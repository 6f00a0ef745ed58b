import pytest

from pagination import DOTS, clamp_page, compute_pagination_range, total_page_count


def test_empty_collection_has_no_pages():
    assert compute_pagination_range(0, 10, 1) == []


def test_first_page_truncates_right():
    assert compute_pagination_range(100, 10, 1, sibling_count=1) == [1, 2, 3, 4, 5, DOTS, 10]


def test_last_page_truncates_left():
    assert compute_pagination_range(100, 10, 10, sibling_count=1) == [1, DOTS, 6, 7, 8, 9, 10]


def test_middle_page_truncates_both_sides():
    assert compute_pagination_range(100, 10, 5, sibling_count=1) == [1, DOTS, 4, 5, 6, DOTS, 10]


def test_small_page_count_shows_every_page():
    # 7 pages fit in the 2*1 + 5 window
    assert compute_pagination_range(70, 10, 4) == [1, 2, 3, 4, 5, 6, 7]
    assert compute_pagination_range(5, 10, 1) == [1]


def test_wider_sibling_window():
    assert compute_pagination_range(200, 10, 10, sibling_count=2) == [1, DOTS, 8, 9, 10, 11, 12, DOTS, 20]


def test_zero_siblings():
    assert compute_pagination_range(100, 10, 5, sibling_count=0) == [1, DOTS, 5, DOTS, 10]


def test_dots_is_not_a_page_number():
    assert DOTS != 0
    assert not isinstance(DOTS, int)
    assert str(DOTS) == "…"


@pytest.mark.parametrize("total_count", [0, 1, 9, 10, 11, 55, 71, 99, 100, 101, 250, 1000])
@pytest.mark.parametrize("sibling_count", [0, 1, 2, 3])
def test_range_properties(total_count, sibling_count):
    page_size = 10
    total_pages = total_page_count(total_count, page_size)
    window_size = sibling_count * 2 + 5

    for current_page in range(1, total_pages + 1):
        labels = compute_pagination_range(total_count, page_size, current_page, sibling_count)

        if total_pages <= window_size:
            assert labels == list(range(1, total_pages + 1))
            continue

        assert current_page in labels
        assert labels[0] == 1
        assert labels[-1] == total_pages
        for left, right in zip(labels, labels[1:]):
            assert not (left is DOTS and right is DOTS)
        numbers = [label for label in labels if label is not DOTS]
        assert numbers == sorted(set(numbers))
        # Control width never changes while paging
        assert len(labels) == window_size
    # End of the loop over every page


def test_out_of_range_current_page_is_clamped():
    assert compute_pagination_range(100, 10, 0) == compute_pagination_range(100, 10, 1)
    assert compute_pagination_range(100, 10, 42) == compute_pagination_range(100, 10, 10)


def test_results_are_independent_lists():
    first = compute_pagination_range(100, 10, 5)
    first.append("mutated")
    assert compute_pagination_range(100, 10, 5) == [1, DOTS, 4, 5, 6, DOTS, 10]


@pytest.mark.parametrize(
    "args",
    [(10, 0, 1, 1), (-1, 10, 1, 1), (10, 10, 1, -1)],
)
def test_invalid_arguments_raise(args):
    with pytest.raises(ValueError):
        compute_pagination_range(*args)


def test_clamp_page():
    assert clamp_page(0, 5) == 1
    assert clamp_page(3, 5) == 3
    assert clamp_page(9, 5) == 5
    assert clamp_page(4, 0) == 1

import pytest

from tfcsync.sequences import remove_at


@pytest.mark.parametrize(
    ("items", "expected"),
    [
        ([1, 2, 3], [1, 3]),
        (["a", "b", "c"], ["a", "c"]),
    ],
)
def test_remove_middle_element(items, expected):
    assert remove_at(items, 1) == expected


def test_original_is_unchanged():
    items = [1, 2, 3]
    remove_at(items, 0)
    assert items == [1, 2, 3]


def test_negative_index_counts_from_end():
    assert remove_at((1, 2, 3), -1) == [1, 2]


def test_out_of_range_raises():
    with pytest.raises(IndexError):
        remove_at([1, 2, 3], 3)
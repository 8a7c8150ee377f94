"""Tests for even_split."""

import pytest

from warfront.utils import even_split


def test_split_exact():
    """An even total splits into equal parts."""
    assert even_split(12, 3) == [4, 4, 4]


def test_split_remainder_goes_first():
    """The remainder goes to the first parts."""
    assert even_split(7, 3) == [3, 2, 2]
    assert even_split(5, 2) == [3, 2]


def test_split_fewer_than_parts():
    """Fewer items than parts leaves trailing zeros."""
    assert even_split(2, 4) == [1, 1, 0, 0]


def test_split_zero():
    """Zero splits into zeros."""
    assert even_split(0, 3) == [0, 0, 0]


@pytest.mark.parametrize("total", range(0, 40, 3))
@pytest.mark.parametrize("parts", [1, 2, 3, 5, 8])
def test_split_is_fair(total, parts):
    """Parts sum to the total and differ by at most one."""
    sizes = even_split(total, parts)
    assert len(sizes) == parts
    assert sum(sizes) == total
    assert max(sizes) - min(sizes) <= 1
    assert sizes == sorted(sizes, reverse=True)


def test_split_invalid_parts():
    """Zero parts raises."""
    with pytest.raises(ValueError, match="Invalid parts"):
        even_split(5, 0)


def test_split_negative_total():
    """A negative total raises."""
    with pytest.raises(ValueError, match="Invalid total"):
        even_split(-1, 2)

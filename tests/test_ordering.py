import pytest

from stream_normalizer.ordering import is_canonically_ordered, reorder

A = 0x0061
ACUTE = 0x0301  # ccc 230
GRAVE = 0x0300  # ccc 230
DOT_BELOW = 0x0323  # ccc 220
OGONEK = 0x0328  # ccc 202
CEDILLA = 0x0327  # ccc 202


def test_marks_sorted_by_combining_class() -> None:
    assert reorder([A, ACUTE, DOT_BELOW]) == [A, DOT_BELOW, ACUTE]


def test_equal_classes_keep_relative_order() -> None:
    assert reorder([A, ACUTE, GRAVE]) == [A, ACUTE, GRAVE]
    assert reorder([A, GRAVE, ACUTE]) == [A, GRAVE, ACUTE]
    assert reorder([A, ACUTE, OGONEK, GRAVE, CEDILLA]) == [
        A,
        OGONEK,
        CEDILLA,
        ACUTE,
        GRAVE,
    ]


def test_starters_are_barriers() -> None:
    buffer = [A, ACUTE, A, DOT_BELOW, ACUTE]
    assert reorder(buffer) == [A, ACUTE, A, DOT_BELOW, ACUTE]
    assert reorder([ACUTE, DOT_BELOW, A]) == [DOT_BELOW, ACUTE, A]


def test_reorder_is_in_place() -> None:
    buffer = [A, ACUTE, DOT_BELOW]
    result = reorder(buffer)
    assert result is buffer


def test_is_canonically_ordered() -> None:
    assert is_canonically_ordered([A, DOT_BELOW, ACUTE, A, ACUTE])
    assert not is_canonically_ordered([A, ACUTE, DOT_BELOW])
    assert is_canonically_ordered([])


def test_reorder_stops_at_logical_length() -> None:
    scalars = [A, ACUTE, DOT_BELOW, ACUTE, DOT_BELOW]
    reorder(scalars, stop=3)
    assert scalars == [A, DOT_BELOW, ACUTE, ACUTE, DOT_BELOW]


@pytest.mark.parametrize("scalar", [-1, 0x110000])
def test_out_of_range_scalars_are_rejected(scalar: int) -> None:
    with pytest.raises(ValueError):
        reorder([A, scalar])
    with pytest.raises(ValueError):
        is_canonically_ordered([scalar])

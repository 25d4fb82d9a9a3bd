import pytest

from memsim.pagetable import PageTable, PageTableError, build_page_table, lookup_frame


def _leaf_frames(table):
    if table.is_last_level:
        return list(table.frames)
    return [f for child in table.children for f in _leaf_frames(child)]


def _depth(table):
    if table.is_last_level:
        return 1
    return 1 + max(_depth(child) for child in table.children)


def test_single_level_table():
    table = build_page_table([5, 6], 4, 1)
    assert table.is_last_level
    assert table.frames[:2] == [5, 6]
    assert len(table.frames) == 4
    assert lookup_frame(table, [1], 1) == 6


def test_two_level_lookup():
    table = build_page_table([10, 11, 12], 2, 2)
    assert len(table.children) == 2
    assert lookup_frame(table, [0, 0], 2) == 10
    assert lookup_frame(table, [0, 1], 2) == 11
    assert lookup_frame(table, [1, 0], 2) == 12


def test_every_frame_reachable_in_order():
    frames = list(range(20, 47))
    table = build_page_table(frames, 3, 3)
    assert _depth(table) == 3
    found = [
        lookup_frame(table, [a, b, c], 3)
        for a in range(3)
        for b in range(3)
        for c in range(3)
    ]
    assert found == frames


def test_leaves_preserve_order():
    frames = [7, 3, 9, 1, 4]
    table = build_page_table(frames, 2, 3)
    leaves = _leaf_frames(table)
    assert leaves[: len(frames)] == frames


def test_input_is_not_consumed():
    frames = [1, 2, 3]
    build_page_table(frames, 2, 2)
    assert frames == [1, 2, 3]


def test_empty_frames_give_empty_table():
    table = build_page_table([], 4, 2)
    assert table == PageTable()
    with pytest.raises(PageTableError):
        lookup_frame(table, [0, 0], 2)


def test_unfilled_subtree_lookup_fails():
    table = build_page_table([10], 2, 2)
    assert lookup_frame(table, [0, 0], 2) == 10
    with pytest.raises(PageTableError):
        lookup_frame(table, [1, 0], 2)


def test_wrong_number_of_indices():
    table = build_page_table([1, 2], 2, 2)
    with pytest.raises(PageTableError):
        lookup_frame(table, [0], 2)


@pytest.mark.parametrize("indices", [[2, 0], [0, 5], [-1, 0], [0, -1]])
def test_out_of_range_indices(indices):
    table = build_page_table([1, 2, 3, 4], 2, 2)
    with pytest.raises(PageTableError):
        lookup_frame(table, indices, 2)


@pytest.mark.parametrize("entries, levels", [(0, 1), (2, 0)])
def test_invalid_shape(entries, levels):
    with pytest.raises(PageTableError):
        build_page_table([1], entries, levels)
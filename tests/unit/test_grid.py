"""Tests for immutable grids."""

import pytest
from gamebox.core import grid


def test_make_grid_uses_factory() -> None:
    """Test cells are built from their coordinates."""
    g = grid.make_grid(2, 3, lambda r, c: r * 10 + c)
    assert g == ((0, 1, 2), (10, 11, 12))
    assert grid.dimensions(g) == (2, 3)


def test_make_grid_rejects_bad_dimensions() -> None:
    """Test zero-sized grids are rejected."""
    with pytest.raises(ValueError):
        grid.make_grid(0, 3, lambda r, c: 0)


def test_set_cell_returns_new_grid() -> None:
    """Test updates leave the original intact and share other rows."""
    g = grid.filled_grid(3, 3, 0)
    updated = grid.set_cell(g, 1, 2, 5)
    assert g[1][2] == 0
    assert updated[1][2] == 5
    assert updated[0] is g[0]
    assert updated[2] is g[2]


def test_update_cells_many() -> None:
    """Test several cells can change at once."""
    g = grid.filled_grid(2, 2, ".")
    updated = grid.update_cells(g, {(0, 0): "a", (1, 1): "b"})
    assert updated == (("a", "."), (".", "b"))
    assert grid.update_cells(g, {}) is g


def test_neighbors_clip_at_edges() -> None:
    """Test neighbours stay inside the grid."""
    g = grid.filled_grid(3, 3, 0)
    assert len(list(grid.neighbors(g, 0, 0))) == 3
    assert len(list(grid.neighbors(g, 1, 1))) == 8
    assert sorted(grid.neighbors(g, 0, 1, grid.ORTHOGONAL)) == [(0, 0), (0, 2), (1, 1)]


def test_in_bounds_count_and_find() -> None:
    """Test bounds checks and predicates over cells."""
    g = grid.make_grid(2, 2, lambda r, c: r == c)
    assert grid.in_bounds(g, 1, 1)
    assert not grid.in_bounds(g, 2, 0)
    assert not grid.in_bounds(g, 0, -1)
    assert grid.count_cells(g, bool) == 2
    assert grid.find_cells(g, bool) == [(0, 0), (1, 1)]


def test_lists_round_trip() -> None:
    """Test conversion to and from mutable lists."""
    g = grid.filled_grid(2, 2, 1)
    rows = grid.to_lists(g)
    rows[0][0] = 9
    assert grid.from_lists(rows) == ((9, 1), (1, 1))
    assert g[0][0] == 1

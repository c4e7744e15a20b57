import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tilegen.errors import InvalidDimension, OutOfBounds, UnknownLabel
from tilegen.grid import Cell, Grid


def test_create_fills_every_cell_with_initial_labels():
    grid = Grid.create(4, 3, ["grass", "tree"])
    assert (grid.width, grid.height) == (4, 3)
    assert grid.wave.shape == (3, 4, 2)
    for cell in grid.cells():
        assert cell.possibilities == frozenset({"grass", "tree"})
        assert not cell.collapsed
        assert cell.label is None


def test_create_with_subset_of_universe():
    grid = Grid.create(2, 2, ["grass"], labels=["grass", "tree", "water"])
    assert grid.labels == ("grass", "tree", "water")
    assert grid.get(1, 1).possibilities == frozenset({"grass"})
    assert grid.is_fully_collapsed()


@pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2), (2, -5)])
def test_create_rejects_non_positive_dimensions(width, height):
    with pytest.raises(InvalidDimension):
        Grid.create(width, height, ["a"])
    with pytest.raises(ValueError):
        Grid.create(width, height, ["a"])


def test_create_rejects_empty_and_unknown_labels():
    with pytest.raises(ValueError):
        Grid.create(2, 2, [])
    with pytest.raises(UnknownLabel):
        Grid.create(2, 2, ["lava"], labels=["grass", "tree"])


def test_neighbors_are_orthogonal_and_in_bounds():
    grid = Grid.create(3, 3, ["a", "b"])
    assert grid.neighbors_of(0, 0) == [(0, 1), (1, 0)]
    assert grid.neighbors_of(1, 1) == [(1, 0), (1, 2), (0, 1), (2, 1)]
    assert grid.neighbors_of(2, 2) == [(2, 1), (1, 2)]
    assert Grid.create(1, 1, ["a"]).neighbors_of(0, 0) == []


def test_neighbors_on_a_single_row():
    grid = Grid.create(3, 1, ["a"])
    assert grid.neighbors_of(0, 0) == [(1, 0)]
    assert grid.neighbors_of(1, 0) == [(0, 0), (2, 0)]


@pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (3, 0), (0, 2)])
def test_out_of_bounds_access(x, y):
    grid = Grid.create(3, 2, ["a", "b"])
    with pytest.raises(OutOfBounds):
        grid.get(x, y)
    with pytest.raises(OutOfBounds):
        grid.set(x, y, {"a"})
    with pytest.raises(IndexError):
        grid.neighbors_of(x, y)


def test_set_and_get():
    grid = Grid.create(2, 2, ["a", "b", "c"])
    grid.set(1, 0, {"a", "c"})
    assert grid.get(1, 0) == Cell(1, 0, frozenset({"a", "c"}))
    grid.set(0, 1, "b")
    assert grid.is_collapsed(0, 1)
    assert grid.label_at(0, 1) == "b"
    assert grid.get(0, 0).possibilities == frozenset({"a", "b", "c"})


def test_set_rejects_empty_and_unknown():
    grid = Grid.create(2, 2, ["a", "b"])
    with pytest.raises(ValueError):
        grid.set(0, 0, set())
    with pytest.raises(UnknownLabel):
        grid.set(0, 0, {"a", "z"})
    assert grid.get(0, 0).possibilities == frozenset({"a", "b"})


def test_cells_iterate_row_major():
    grid = Grid.create(3, 2, ["a"])
    assert [(cell.x, cell.y) for cell in grid.cells()] == [
        (0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)
    ]


def test_counts_and_to_labels():
    grid = Grid.create(2, 2, ["a", "b"])
    grid.set(0, 0, "b")
    np.testing.assert_array_equal(grid.counts(), [[1, 2], [2, 2]])
    assert grid.to_labels() == [["b", None], [None, None]]
    assert not grid.is_fully_collapsed()


def test_copy_is_independent():
    grid = Grid.create(2, 1, ["a", "b"])
    grid.forced.add((0, 0))
    clone = grid.copy()
    clone.set(1, 0, "a")
    clone.forced.add((1, 0))
    assert grid.get(1, 0).possibilities == frozenset({"a", "b"})
    assert grid.forced == {(0, 0)}

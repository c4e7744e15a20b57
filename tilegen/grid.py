from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .errors import InvalidDimension, OutOfBounds, UnknownLabel

DIRS = [(0, -1), (0, 1), (-1, 0), (1, 0)]  # U, D, L, R


@dataclass(frozen=True)
class Cell:
    """Snapshot of one grid position and the labels it may still take."""

    x: int
    y: int
    possibilities: frozenset[str]

    @property
    def collapsed(self) -> bool:
        return len(self.possibilities) == 1

    @property
    def label(self) -> str | None:
        if len(self.possibilities) != 1:
            return None
        return next(iter(self.possibilities))


class Grid:
    """
    Fixed W x H grid of possibility sets.

    Storage is a boolean wave of shape (height, width, num_labels) where
    ``wave[y, x, i]`` is True while ``labels[i]`` is still possible at (x, y).
    Cells are never added or removed after creation.
    """

    def __init__(self, wave: np.ndarray, labels: Iterable[str]):
        self.labels: tuple[str, ...] = tuple(labels)
        self.label_to_index = {label: idx for idx, label in enumerate(self.labels)}
        self.wave = wave
        self.height, self.width = wave.shape[:2]

        # Bookkeeping filled in by the collapse engine
        self.forced: set[tuple[int, int]] = set()
        self.conflicts: set[tuple[int, int]] = set()
        self.fallback_count = 0
        self.primed = False

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        initial_labels: Iterable[str],
        labels: Iterable[str] | None = None,
    ) -> "Grid":
        if width <= 0 or height <= 0:
            raise InvalidDimension(width, height)
        initial_labels = list(dict.fromkeys(initial_labels))
        if not initial_labels:
            raise ValueError("A grid needs at least one initial label")
        universe = tuple(dict.fromkeys(labels)) if labels is not None else tuple(initial_labels)

        label_to_index = {label: idx for idx, label in enumerate(universe)}
        mask = np.zeros(len(universe), dtype=bool)
        for label in initial_labels:
            if label not in label_to_index:
                raise UnknownLabel(label, "grid label set")
            mask[label_to_index[label]] = True

        wave = np.broadcast_to(mask, (height, width, len(universe))).copy()
        return cls(wave, universe)

    @property
    def num_labels(self) -> int:
        return len(self.labels)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int):
        if not self.in_bounds(x, y):
            raise OutOfBounds(x, y, self.width, self.height)

    def neighbors_of(self, x: int, y: int) -> list[tuple[int, int]]:
        """Orthogonal in-bounds neighbors in up, down, left, right order."""
        self._check(x, y)
        neighbors = []
        for dx, dy in DIRS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height:
                neighbors.append((nx, ny))
        return neighbors

    def mask_to_labels(self, mask: np.ndarray) -> frozenset[str]:
        return frozenset(self.labels[idx] for idx in np.flatnonzero(mask))

    def labels_to_mask(self, possibilities: Iterable[str]) -> np.ndarray:
        mask = np.zeros(self.num_labels, dtype=bool)
        for label in possibilities:
            idx = self.label_to_index.get(label)
            if idx is None:
                raise UnknownLabel(label, "grid label set")
            mask[idx] = True
        return mask

    def get(self, x: int, y: int) -> Cell:
        self._check(x, y)
        return Cell(x, y, self.mask_to_labels(self.wave[y, x]))

    def set(self, x: int, y: int, possibilities: Iterable[str]):
        self._check(x, y)
        if isinstance(possibilities, str):
            possibilities = [possibilities]
        mask = self.labels_to_mask(possibilities)
        if not mask.any():
            raise ValueError(f"Cell ({x}, {y}) cannot be given an empty possibility set")
        self.wave[y, x] = mask
        # the next step re-propagates from every collapsed cell
        self.primed = False

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield Cell(x, y, self.mask_to_labels(self.wave[y, x]))

    def counts(self) -> np.ndarray:
        return np.sum(self.wave, axis=2)

    def count_at(self, x: int, y: int) -> int:
        return int(np.count_nonzero(self.wave[y, x]))

    def is_collapsed(self, x: int, y: int) -> bool:
        self._check(x, y)
        return self.count_at(x, y) == 1

    def is_fully_collapsed(self) -> bool:
        return bool(np.all(self.counts() == 1))

    def index_at(self, x: int, y: int) -> int | None:
        """Label index of a collapsed cell, None while undetermined."""
        if self.count_at(x, y) != 1:
            return None
        return int(np.argmax(self.wave[y, x]))

    def label_at(self, x: int, y: int) -> str | None:
        self._check(x, y)
        idx = self.index_at(x, y)
        return None if idx is None else self.labels[idx]

    def to_labels(self) -> list[list[str | None]]:
        return [[self.label_at(x, y) for x in range(self.width)] for y in range(self.height)]

    def copy(self) -> "Grid":
        grid = Grid(self.wave.copy(), self.labels)
        grid.forced = set(self.forced)
        grid.conflicts = set(self.conflicts)
        grid.fallback_count = self.fallback_count
        grid.primed = self.primed
        return grid

    def __repr__(self):
        return f"Grid({self.width}x{self.height}, labels={list(self.labels)})"

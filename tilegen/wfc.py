"""
Simplified Wavefunction Collapse over a label grid.

Each step picks the undetermined cell with the fewest remaining labels
(first in row-major order on ties), collapses it with a weighted draw and
pushes the resulting constraint outward with a worklist. There is no
backtracking: a neighbor whose possibilities would become empty is forced to
a fallback label and propagation continues from it.

Selection scans the whole grid each step, so a full run costs O((W*H)^2).
That is fine up to grids of a few hundred cells per side.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

import numpy as np

from .adjacency import AdjacencyModel
from .errors import OutOfBounds, UnknownLabel, WFCError
from .grid import Grid
from .weights import WeightTable, weighted_choice

logger = logging.getLogger(__name__)


class FallbackPolicy(Enum):
    COLLAPSING = "collapsing"  # the label of the cell being propagated from
    DEFAULT = "default"  # a fixed label, the model's first label unless given

    @classmethod
    def parse(cls, value: "FallbackPolicy | str") -> "FallbackPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise WFCError(f"Unknown fallback policy {value!r} (expected one of: {choices})") from None


@dataclass
class CollapseResult:
    grid: Grid
    steps: int = 0
    completed: bool = False
    fallback_count: int = 0
    forced: set[tuple[int, int]] = field(default_factory=set)
    conflicts: set[tuple[int, int]] = field(default_factory=set)

    def labels(self) -> list[list[str | None]]:
        return self.grid.to_labels()


class CollapseEngine:
    def __init__(
        self,
        model: AdjacencyModel,
        weights: WeightTable | Mapping[str, float] | None = None,
        neighbor_bonus: float = 0.0,
        fallback: FallbackPolicy | str = FallbackPolicy.COLLAPSING,
        default_label: str | None = None,
        rng: np.random.Generator | int | None = None,
    ):
        self.model = model
        self.weights = WeightTable.from_mapping(weights)
        self.model.validate_labels(self.weights.labels)
        neighbor_bonus = float(neighbor_bonus)
        if neighbor_bonus < 0 or not np.isfinite(neighbor_bonus):
            raise WFCError(f"Neighbor bonus must be finite and non-negative, got {neighbor_bonus}")
        self.neighbor_bonus = neighbor_bonus

        self.fallback = FallbackPolicy.parse(fallback)
        if default_label is None and len(model):
            default_label = model.labels[0]
        if default_label is not None and default_label not in model:
            raise UnknownLabel(default_label)
        self.default_label = default_label

        self.rng = np.random.default_rng(rng)

        # Per-grid-universe lookup tables, keyed by the grid's label tuple
        self._tables: dict[tuple[str, ...], tuple[np.ndarray, np.ndarray]] = {}

    def _tables_for(self, grid: Grid) -> tuple[np.ndarray, np.ndarray]:
        tables = self._tables.get(grid.labels)
        if tables is None:
            tables = (self.model.allowed_mask(grid.labels), self.weights.as_array(grid.labels))
            self._tables[grid.labels] = tables
        return tables

    def validate(self, grid: Grid):
        """Raise before any cell is touched if the grid uses labels the model lacks."""
        self.model.validate_labels(grid.labels)
        if self.fallback is FallbackPolicy.DEFAULT and self.default_label not in grid.label_to_index:
            raise UnknownLabel(self.default_label, "grid label set")

    # Find the cell with the lowest entropy (fewest possibilities)
    def find_lowest_entropy_cell(self, grid: Grid) -> tuple[int, int] | None:
        n_possibilities = grid.counts().astype(float)
        n_possibilities[n_possibilities < 2] = np.inf
        flat_idx = int(np.argmin(n_possibilities))  # first minimum in row-major order
        y, x = np.unravel_index(flat_idx, n_possibilities.shape)
        if np.isinf(n_possibilities[y, x]):
            return None
        return int(x), int(y)

    def collapse_weights(self, grid: Grid, x: int, y: int) -> tuple[list[int], list[float]]:
        """Label indices still possible at (x, y) and the weight of each."""
        _, base_weights = self._tables_for(grid)
        options = [int(idx) for idx in np.flatnonzero(grid.wave[y, x])]
        weights = [base_weights[idx] for idx in options]
        if self.neighbor_bonus:
            for nx, ny in grid.neighbors_of(x, y):
                neighbor_idx = grid.index_at(nx, ny)
                if neighbor_idx is None:
                    continue
                for i, idx in enumerate(options):
                    if idx == neighbor_idx:
                        weights[i] += self.neighbor_bonus
        return options, weights

    def collapse_cell(self, grid: Grid, x: int, y: int, label: str | None = None) -> str:
        """
        Collapse (x, y) and propagate from it.

        With ``label`` given the cell is forced to it instead of drawing.
        """
        if not grid.in_bounds(x, y):
            raise OutOfBounds(x, y, grid.width, grid.height)
        if not grid.primed:
            self.validate(grid)
            self._prime(grid)
        if label is None:
            options, weights = self.collapse_weights(grid, x, y)
            chosen_idx = weighted_choice(options, weights, self.rng)
        else:
            chosen_idx = int(grid.labels_to_mask([label]).argmax())
            current_idx = grid.index_at(x, y)
            if current_idx is not None and current_idx != chosen_idx:
                raise WFCError(
                    f"Cell ({x}, {y}) is already collapsed to {grid.labels[current_idx]!r}"
                )

        grid.wave[y, x] = False
        grid.wave[y, x, chosen_idx] = True
        self.propagate_constraints(grid, x, y)
        return grid.labels[chosen_idx]

    def _fallback_index(self, grid: Grid, current_idx: int) -> int:
        if self.fallback is FallbackPolicy.COLLAPSING:
            return current_idx
        return grid.label_to_index[self.default_label]

    # Propagate constraints to neighbors
    def propagate_constraints(self, grid: Grid, start_x: int, start_y: int):
        self._propagate(grid, [(start_x, start_y)])

    def _propagate(self, grid: Grid, stack: list[tuple[int, int]]):
        allowed_mask, _ = self._tables_for(grid)
        wave = grid.wave

        while stack:
            curr_x, curr_y = stack.pop()
            current_idx = grid.index_at(curr_x, curr_y)
            if current_idx is None:
                continue
            allowed = allowed_mask[current_idx]

            for nx, ny in grid.neighbors_of(curr_x, curr_y):
                original = wave[ny, nx]
                original_count = int(np.count_nonzero(original))

                if original_count == 1:
                    # Collapsed cells are frozen; an incompatible one is only recorded
                    if not np.any(original & allowed):
                        grid.conflicts.add((nx, ny))
                    continue

                new_possibilities = original & allowed
                if not new_possibilities.any():
                    fallback_idx = self._fallback_index(grid, current_idx)
                    new_possibilities = np.zeros_like(original)
                    new_possibilities[fallback_idx] = True
                    grid.forced.add((nx, ny))
                    grid.fallback_count += 1
                    logger.debug(
                        "Contradiction at (%d, %d) next to %s at (%d, %d); forced to %s",
                        nx, ny, grid.labels[current_idx], curr_x, curr_y, grid.labels[fallback_idx],
                    )

                if np.count_nonzero(new_possibilities) < original_count:
                    wave[ny, nx] = new_possibilities
                    stack.append((nx, ny))

    def _prime(self, grid: Grid):
        """Propagate from every cell that is already collapsed before the first step."""
        grid.primed = True
        ys, xs = np.nonzero(grid.counts() == 1)
        # reversed so the stack pops them in row-major order
        stack = [(int(x), int(y)) for y, x in zip(ys, xs)][::-1]
        if stack:
            logger.debug("Priming propagation from %d preset cells", len(stack))
            self._propagate(grid, stack)

    def step(self, grid: Grid) -> bool:
        """
        Collapse one cell and propagate.

        Returns:
            bool: True when no undetermined cell remains (before or after the step).
        """
        if not grid.primed:
            self.validate(grid)
            self._prime(grid)
        next_cell = self.find_lowest_entropy_cell(grid)
        if next_cell is None:
            return True
        x, y = next_cell
        self.collapse_cell(grid, x, y)
        return self.find_lowest_entropy_cell(grid) is None

    def run(self, grid: Grid, max_steps: int | None = None) -> CollapseResult:
        """
        Collapse cells until the grid is fully determined.

        ``max_steps`` bounds the number of collapses made by this call so a
        caller can interleave other work; call ``run`` again to resume.
        """
        self.validate(grid)
        logger.info(
            "Collapsing %dx%d grid with %d labels (fallback=%s)",
            grid.width, grid.height, grid.num_labels, self.fallback.value,
        )
        steps = 0
        completed = False
        while True:
            if not grid.primed:
                self._prime(grid)
            if self.find_lowest_entropy_cell(grid) is None:
                completed = True
                break
            if max_steps is not None and steps >= max_steps:
                break
            self.step(grid)
            steps += 1

        if completed:
            logger.info(
                "Grid collapsed in %d steps, %d fallback resolutions, %d conflicts",
                steps, grid.fallback_count, len(grid.conflicts),
            )
        return CollapseResult(
            grid=grid,
            steps=steps,
            completed=completed,
            fallback_count=grid.fallback_count,
            forced=set(grid.forced),
            conflicts=set(grid.conflicts),
        )


def run_wfc(
    grid: Grid,
    model: AdjacencyModel,
    weights: WeightTable | Mapping[str, float] | None = None,
    rng: np.random.Generator | int | None = None,
    **kwargs,
) -> CollapseResult:
    return CollapseEngine(model, weights=weights, rng=rng, **kwargs).run(grid)


def generate(
    width: int,
    height: int,
    model: AdjacencyModel,
    initial_labels: Iterable[str] | None = None,
    weights: WeightTable | Mapping[str, float] | None = None,
    neighbor_bonus: float = 0.0,
    fallback: FallbackPolicy | str = FallbackPolicy.COLLAPSING,
    default_label: str | None = None,
    seed: np.random.Generator | int | None = None,
) -> CollapseResult:
    """Create a grid over the model's labels and collapse it."""
    engine = CollapseEngine(
        model,
        weights=weights,
        neighbor_bonus=neighbor_bonus,
        fallback=fallback,
        default_label=default_label,
        rng=seed,
    )
    if initial_labels is None:
        initial_labels = model.labels
    grid = Grid.create(width, height, initial_labels, labels=model.labels)
    return engine.run(grid)

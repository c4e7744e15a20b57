from __future__ import annotations

from typing import Mapping, Sequence, TypeVar

import numpy as np

from .errors import WFCError

T = TypeVar("T")

EPSILON = 1e-9  # weights at or below this count as zero


class WeightTable:
    """Base weight per label; labels without an entry get ``default``."""

    def __init__(self, weights: Mapping[str, float] | None = None, default: float = 1.0):
        default = float(default)
        if default < 0 or not np.isfinite(default):
            raise WFCError(f"Default weight must be finite and non-negative, got {default}")
        self.default = default
        self._weights: dict[str, float] = {}
        for label, weight in (weights or {}).items():
            weight = float(weight)
            if weight < 0 or not np.isfinite(weight):
                raise WFCError(f"Weight for {label!r} must be finite and non-negative, got {weight}")
            self._weights[label] = weight

    @classmethod
    def from_mapping(cls, weights: "WeightTable | Mapping[str, float] | None") -> "WeightTable":
        if isinstance(weights, WeightTable):
            return weights
        return cls(weights)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self._weights)

    def weight(self, label: str) -> float:
        return self._weights.get(label, self.default)

    def as_array(self, labels: Sequence[str]) -> np.ndarray:
        return np.array([self.weight(label) for label in labels], dtype=float)

    def to_dict(self) -> dict[str, float]:
        return dict(self._weights)

    def __repr__(self):
        return f"WeightTable({self._weights}, default={self.default})"


def weighted_choice(options: Sequence[T], weights: Sequence[float], rng: np.random.Generator) -> T:
    """
    Pick one of ``options`` with probability proportional to its weight.

    Options whose weight is (near) zero are never picked unless every weight
    is zero, in which case the pick is uniform over all options.
    """
    if not options:
        raise ValueError("weighted_choice needs at least one option")

    valid_options = []
    valid_weights = []
    total_weight = 0.0
    for option, weight in zip(options, weights):
        weight = max(0.0, float(weight))
        if weight > EPSILON:
            valid_options.append(option)
            valid_weights.append(weight)
            total_weight += weight

    if total_weight <= EPSILON:
        return options[int(rng.integers(len(options)))]

    rand_val = rng.uniform(0, total_weight)
    current_sum = 0.0
    for option, weight in zip(valid_options, valid_weights):
        current_sum += weight
        if rand_val <= current_sum:
            return option
    # floating point rounding can leave rand_val just above the final sum
    return valid_options[-1]

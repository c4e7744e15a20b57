from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np

from .errors import UnknownLabel


class AdjacencyModel:
    """
    Rule table mapping each label to the labels allowed as an orthogonal neighbor.

    Rules are directionless and need not be symmetric: ``{"tree": ["grass"],
    "grass": ["grass", "tree"]}`` is valid. Every label referenced anywhere in
    the table must have its own entry; this is checked here, not on lookup.
    """

    def __init__(self, rules: Mapping[str, Iterable[str]], labels: Iterable[str] | None = None):
        self._rules: dict[str, frozenset[str]] = {
            label: frozenset(neighbors) for label, neighbors in rules.items()
        }
        self.labels: tuple[str, ...] = tuple(self._rules)

        for label, neighbors in self._rules.items():
            for neighbor in neighbors:
                if neighbor not in self._rules:
                    raise UnknownLabel(neighbor)
        if labels is not None:
            self.validate_labels(labels)

    @classmethod
    def from_tiles(cls, tiles: Mapping[str, Mapping]) -> "AdjacencyModel":
        """Build a model from a preset ``TILES`` dict (``{"name": {"neighbors": [...]}}``)."""
        return cls({name: data.get("neighbors", []) for name, data in tiles.items()})

    def validate_labels(self, labels: Iterable[str]):
        for label in labels:
            if label not in self._rules:
                raise UnknownLabel(label)

    def allowed_neighbors(self, label: str) -> frozenset[str]:
        try:
            return self._rules[label]
        except KeyError:
            raise UnknownLabel(label) from None

    def allows(self, label: str, neighbor: str) -> bool:
        return neighbor in self.allowed_neighbors(label)

    def is_symmetric(self) -> bool:
        return all(
            label in self._rules[neighbor]
            for label, neighbors in self._rules.items()
            for neighbor in neighbors
        )

    def allowed_mask(self, labels: Iterable[str] | None = None) -> np.ndarray:
        """
        Boolean matrix ``m[i, j]`` = labels[j] may neighbor labels[i].

        ``labels`` fixes the row/column order (a grid's label universe); it
        defaults to the model's own order.
        """
        labels = self.labels if labels is None else tuple(labels)
        self.validate_labels(labels)
        mask = np.zeros((len(labels), len(labels)), dtype=bool)
        for i, label in enumerate(labels):
            allowed = self._rules[label]
            for j, neighbor in enumerate(labels):
                mask[i, j] = neighbor in allowed
        return mask

    def __contains__(self, label) -> bool:
        return label in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self):
        return f"AdjacencyModel({ {k: sorted(v) for k, v in self._rules.items()} })"

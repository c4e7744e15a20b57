from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from .adjacency import AdjacencyModel
from .biome_adjacency_rules import get_preset
from .errors import ConfigError, WFCError
from .grid import Grid
from .wfc import CollapseEngine, FallbackPolicy
from .weights import WeightTable


@dataclass
class GenerationConfig:
    """
    Everything needed to generate a map.

    ``tiles`` overrides the preset's tile table when given. ``weights`` and
    ``neighbor_bonus`` fall back to the preset's values when left as None.
    """

    width: int = 20
    height: int = 15
    preset: str = "biomes"
    tiles: dict[str, dict[str, Any]] | None = None
    initial_labels: list[str] | None = None
    weights: dict[str, float] | None = None
    neighbor_bonus: float | None = None
    fallback: str = FallbackPolicy.COLLAPSING.value
    default_label: str | None = None
    seed: int | None = None
    tile_size: int = 32
    regions: int = 1

    def __post_init__(self):
        for name in ("width", "height", "tile_size", "regions"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        if self.neighbor_bonus is not None and not _is_number(self.neighbor_bonus):
            raise ConfigError(f"neighbor_bonus must be a number, got {self.neighbor_bonus!r}")
        try:
            FallbackPolicy.parse(self.fallback)
        except WFCError as e:
            raise ConfigError(str(e)) from None

        if self.tiles is None:
            get_preset(self.preset)
        elif not isinstance(self.tiles, dict) or not self.tiles:
            raise ConfigError("'tiles' must be a non-empty mapping of label -> tile data")
        else:
            for tile, data in self.tiles.items():
                if not isinstance(data, dict) or not isinstance(data.get("neighbors"), list):
                    raise ConfigError(f"Tile {tile!r} must be a mapping with a 'neighbors' list")
                if "weight" in data and not _is_number(data["weight"]):
                    raise ConfigError(f"Tile {tile!r} weight must be a number, got {data['weight']!r}")
        if self.initial_labels is not None and not isinstance(self.initial_labels, list):
            raise ConfigError(f"initial_labels must be a list, got {self.initial_labels!r}")
        if self.weights is not None:
            if not isinstance(self.weights, dict) or not all(
                _is_number(w) for w in self.weights.values()
            ):
                raise ConfigError(f"weights must map labels to numbers, got {self.weights!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        return _plain(asdict(self))

    @property
    def tile_table(self) -> dict[str, dict[str, Any]]:
        return self.tiles if self.tiles is not None else get_preset(self.preset)["tiles"]

    def build_model(self) -> AdjacencyModel:
        return AdjacencyModel.from_tiles(self.tile_table)

    def build_weights(self) -> WeightTable:
        if self.weights is not None:
            return WeightTable(self.weights)
        return WeightTable(
            {tile: data["weight"] for tile, data in self.tile_table.items() if "weight" in data}
        )

    def resolved_neighbor_bonus(self) -> float:
        if self.neighbor_bonus is not None:
            return float(self.neighbor_bonus)
        if self.tiles is not None:
            return 0.0
        return float(get_preset(self.preset).get("neighbor_bonus", 0.0))

    def build_engine(self, rng: np.random.Generator | int | None = None) -> CollapseEngine:
        return CollapseEngine(
            self.build_model(),
            weights=self.build_weights(),
            neighbor_bonus=self.resolved_neighbor_bonus(),
            fallback=self.fallback,
            default_label=self.default_label,
            rng=self.seed if rng is None else rng,
        )

    def build_grid(self, model: AdjacencyModel | None = None) -> Grid:
        if model is None:
            model = self.build_model()
        initial = self.initial_labels if self.initial_labels is not None else model.labels
        return Grid.create(self.width, self.height, initial, labels=model.labels)


def load_config(path: str | Path) -> GenerationConfig:
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    return GenerationConfig.from_dict(data or {})


def save_config(config: GenerationConfig, path: str | Path):
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return _is_int(value) or isinstance(value, (float, np.floating))


def _plain(value):
    # tuples (preset colors) become lists so the dump stays safe_load-able
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value

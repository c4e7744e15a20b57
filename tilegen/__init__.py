from .adjacency import AdjacencyModel
from .errors import ConfigError, InvalidDimension, OutOfBounds, UnknownLabel, WFCError
from .grid import Cell, Grid
from .weights import WeightTable, weighted_choice
from .wfc import CollapseEngine, CollapseResult, FallbackPolicy, generate, run_wfc

__all__ = [
    "AdjacencyModel",
    "Cell",
    "CollapseEngine",
    "CollapseResult",
    "ConfigError",
    "FallbackPolicy",
    "Grid",
    "InvalidDimension",
    "OutOfBounds",
    "UnknownLabel",
    "WFCError",
    "WeightTable",
    "generate",
    "run_wfc",
    "weighted_choice",
]

import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tilegen.errors import WFCError
from tilegen.weights import WeightTable, weighted_choice


def test_weight_table_defaults():
    table = WeightTable({"grass": 0.3, "tree": 0.7})
    assert table.weight("tree") == 0.7
    assert table.weight("water") == 1.0
    assert table.labels == ("grass", "tree")
    np.testing.assert_allclose(table.as_array(["tree", "rock"]), [0.7, 1.0])


def test_weight_table_rejects_negative():
    with pytest.raises(WFCError):
        WeightTable({"grass": -0.1})
    with pytest.raises(WFCError):
        WeightTable(default=-1)


def test_weight_table_rejects_non_finite():
    with pytest.raises(WFCError):
        WeightTable({"grass": float("inf")})
    with pytest.raises(WFCError):
        WeightTable({"grass": float("nan")})
    with pytest.raises(WFCError):
        WeightTable(default=float("inf"))


def test_from_mapping_passes_tables_through():
    table = WeightTable({"a": 2.0})
    assert WeightTable.from_mapping(table) is table
    assert WeightTable.from_mapping(None).weight("a") == 1.0


def test_zero_weight_options_are_never_chosen():
    rng = np.random.default_rng(0)
    picks = {weighted_choice(["a", "b", "c"], [0.0, 1.0, 0.0], rng) for _ in range(200)}
    assert picks == {"b"}


def test_negative_weights_count_as_zero():
    rng = np.random.default_rng(1)
    picks = {weighted_choice(["a", "b"], [-5.0, 2.0], rng) for _ in range(200)}
    assert picks == {"b"}


def test_all_zero_weights_fall_back_to_uniform():
    rng = np.random.default_rng(2)
    picks = {weighted_choice(["a", "b"], [0.0, 0.0], rng) for _ in range(200)}
    assert picks == {"a", "b"}


def test_empty_options():
    with pytest.raises(ValueError):
        weighted_choice([], [], np.random.default_rng(0))


def test_weighted_frequencies():
    rng = np.random.default_rng(3)
    n = 20000
    picks = [weighted_choice(["a", "b", "c"], [1.0, 2.0, 1.0], rng) for _ in range(n)]
    assert abs(picks.count("b") / n - 0.5) < 0.02

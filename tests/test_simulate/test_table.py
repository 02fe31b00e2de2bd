"""Tests for abundance tables."""

import json

import numpy as np
import pandas as pd
import pytest

from phyloabund.config import SimulationConfig
from phyloabund.errors import InvalidInput
from phyloabund.simulate.table import AbundanceTable, simulate_table


@pytest.fixture
def trait_series():
    return pd.Series({"a": 1.0, "b": 2.0, "c": 5.0, "d": 3.0})


@pytest.fixture
def table(trait_series):
    return simulate_table(trait_series, [-1.5, -0.2, 0.3, 1.1, 2.0], rng=4)


class TestSimulateTable:

    def test_layout(self, table, trait_series):
        assert table.n_species == 4
        assert table.n_samples == 5
        assert list(table.counts.index) == ["a", "b", "c", "d"]
        assert list(table.counts.columns) == [f"sample_{i}" for i in range(1, 6)]
        assert list(table.disturbance.index) == list(table.counts.columns)
        assert table.counts.index.name == "tip"
        assert not table.pseudocount_applied

    def test_counts_are_non_negative_integers(self, table):
        assert all(np.issubdtype(t, np.integer) for t in table.counts.dtypes)
        assert (table.counts >= 0).all().all()

    def test_reproducibility(self, trait_series):
        first = simulate_table(trait_series, [0.0, 1.0], rng=np.random.default_rng(9))
        second = simulate_table(trait_series, [0.0, 1.0], rng=np.random.default_rng(9))
        pd.testing.assert_frame_equal(first.counts, second.counts)

    def test_accepts_mapping(self):
        result = simulate_table({"x": 1.0, "y": 4.0}, [0.5], rng=1)
        assert list(result.counts.index) == ["x", "y"]

    def test_does_not_rename_caller_series(self, trait_series):
        simulate_table(trait_series, [0.5], rng=1)
        assert trait_series.name is None
        assert trait_series.index.name is None

    @pytest.mark.parametrize("disturbance", [[], [0.1, np.nan], [[0.1], [0.2]]])
    def test_bad_disturbance(self, trait_series, disturbance):
        with pytest.raises(InvalidInput, match="Disturbance"):
            simulate_table(trait_series, disturbance, rng=1)

    def test_bad_trait(self):
        with pytest.raises(InvalidInput, match="must be > 0"):
            simulate_table({"x": 1.0, "y": 0.0}, [0.5], rng=1)

    def test_high_disturbance_favours_high_trait(self):
        traits = pd.Series({"low": 1.0, "high": 8.0})
        config = SimulationConfig(dispersion=50.0)
        result = simulate_table(traits, [-1.0, 1.0], config=config, rng=2)
        assert result.counts.loc["high", "sample_2"] > result.counts.loc["low", "sample_2"]
        assert result.counts.loc["low", "sample_1"] > result.counts.loc["high", "sample_1"]


class TestFromTree:

    def test_rows_follow_tree(self, six_tip_tree, copy_numbers):
        result = AbundanceTable.from_tree(six_tip_tree, copy_numbers, n_samples=12, rng=5)
        assert list(result.counts.index) == six_tip_tree.leaf_names
        assert list(result.trait) == [copy_numbers[t] for t in six_tip_tree.leaf_names]
        assert result.n_samples == 12
        assert np.all(np.diff(result.disturbance.to_numpy()) >= 0)

    def test_explicit_disturbance(self, six_tip_tree, copy_numbers):
        result = AbundanceTable.from_tree(
            six_tip_tree, copy_numbers, disturbance=[0.0, 0.5], rng=5
        )
        assert list(result.disturbance) == [0.0, 0.5]

    def test_same_seed_same_table(self, six_tip_tree, copy_numbers):
        first = AbundanceTable.from_tree(six_tip_tree, copy_numbers, n_samples=8, rng=77)
        second = AbundanceTable.from_tree(six_tip_tree, copy_numbers, n_samples=8, rng=77)
        pd.testing.assert_frame_equal(first.counts, second.counts)
        pd.testing.assert_series_equal(first.disturbance, second.disturbance)

    def test_requires_samples(self, six_tip_tree, copy_numbers):
        with pytest.raises(InvalidInput, match="n_samples"):
            AbundanceTable.from_tree(six_tip_tree, copy_numbers)

    def test_missing_trait(self, six_tip_tree, copy_numbers):
        del copy_numbers["t4"]
        with pytest.raises(InvalidInput, match="t4"):
            AbundanceTable.from_tree(six_tip_tree, copy_numbers, n_samples=3, rng=1)


class TestPseudocount:

    def test_replaces_only_zeros(self, table):
        raw = table.counts.to_numpy()
        adjusted = table.with_pseudocount()
        values = adjusted.counts.to_numpy()

        assert adjusted.pseudocount_applied
        assert np.all(values > 0)
        assert np.all(values[raw == 0] == 0.65)
        assert np.array_equal(values[raw != 0], raw[raw != 0])

    def test_original_is_unchanged(self, table):
        before = table.counts.copy()
        table.with_pseudocount()
        pd.testing.assert_frame_equal(table.counts, before)

    def test_custom_value(self):
        table = AbundanceTable(
            counts=pd.DataFrame({"sample_1": [0, 12], "sample_2": [3, 0]}, index=["x", "y"]),
            disturbance=pd.Series({"sample_1": -0.4, "sample_2": 0.9}),
            trait=pd.Series({"x": 1.0, "y": 9.0}),
        )
        adjusted = table.with_pseudocount(0.5)
        assert adjusted.counts.to_numpy().tolist() == [[0.5, 3.0], [12.0, 0.5]]
        assert adjusted.config.pseudocount == 0.5
        assert "Pseudocount applied: 0.5" in adjusted.summary()
        assert adjusted.to_dict()["config"]["pseudocount"] == 0.5
        assert table.config.pseudocount == 0.65

    def test_config_value(self, trait_series):
        config = SimulationConfig(pseudocount=0.1, mu_total=0.0)
        result = simulate_table(trait_series, [0.0], config=config, rng=1)
        with pytest.warns(UserWarning, match="zero"):
            adjusted = result.with_pseudocount()
        assert (adjusted.counts == 0.1).all().all()

    @pytest.mark.parametrize("value", [0.0, -1.0, float("nan")])
    def test_bad_value(self, table, value):
        with pytest.raises(InvalidInput, match="pseudocount"):
            table.with_pseudocount(value)


class TestTableExports:

    def test_relative_sums_to_one(self, table):
        rel = table.with_pseudocount().relative()
        assert np.allclose(rel.sum(axis=0), 1.0)

    def test_relative_rejects_empty_sample(self, trait_series):
        config = SimulationConfig(mu_total=0.0)
        result = simulate_table(trait_series, [0.0], config=config, rng=1)
        with pytest.raises(InvalidInput, match="zero total"):
            result.relative()

    def test_zero_fraction(self, trait_series):
        config = SimulationConfig(mu_total=0.0)
        result = simulate_table(trait_series, [0.0, 1.0], config=config, rng=1)
        assert result.zero_fraction == 1.0

    def test_summary(self, table):
        text = table.summary()
        assert "SIMULATED ABUNDANCE TABLE" in text
        assert "Species: 4" in text
        assert "Samples: 5" in text
        assert "mu_total = 10000" in text
        assert str(table) == text

    def test_to_json(self, table, tmp_path):
        path = tmp_path / "table.json"
        text = table.to_json(str(path))
        data = json.loads(path.read_text())

        assert json.loads(text) == data
        assert data["config"]["pseudocount"] == 0.65
        assert set(data["counts"]) == set(table.counts.columns)
        assert data["counts"]["sample_1"]["a"] == int(table.counts.loc["a", "sample_1"])
        assert data["disturbance"]["sample_5"] == 2.0

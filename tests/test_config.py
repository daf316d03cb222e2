"""Tests for vc_markov.config — ChainConfig construction and derivation."""
from __future__ import annotations

import json

import pytest

from vc_markov.config import DEFAULT_CONCENTRATIONS, DEFAULT_MEANS, ChainConfig
from vc_markov.errors import InvalidDistribution, InvalidParameter
from vc_markov.sampling import update_priors
from vc_markov.stages import FINAL, STAGE_KEYS, Outcome, Stage


class TestDefaults:
    def test_default_rows_are_distributions(self, default_config: ChainConfig):
        for key in STAGE_KEYS:
            assert sum(default_config.means[key].values()) == pytest.approx(1.0)

    def test_seed_row_matches_documented_means(self, default_config: ChainConfig):
        assert default_config.means[Stage.SEED] == {
            Outcome.NEXT_STAGE: 0.27,
            Outcome.BANKRUPT: 0.50,
            Outcome.OPERATING: 0.22,
            Outcome.UNICORN: 0.01,
        }

    def test_final_row_labels(self, default_config: ChainConfig):
        assert set(default_config.means[FINAL]) == {
            Outcome.BANKRUPT, Outcome.ZOMBIE, Outcome.UNICORN,
        }

    def test_default_horizon(self, default_config: ChainConfig):
        assert default_config.horizon == 10

    def test_tables_in_draw_order(self, default_config: ChainConfig):
        assert tuple(default_config.means) == STAGE_KEYS
        assert tuple(default_config.concentrations) == STAGE_KEYS


class TestValidation:
    def test_string_keys_are_coerced(self):
        config = ChainConfig.from_dict(
            {"concentrations": {"Seed": 5, "SeriesA": 5, "SeriesB": 5, "SeriesC": 5, "Final": 5}}
        )
        assert config.concentrations[Stage.SEED] == 5.0
        assert config.concentrations[FINAL] == 5.0

    def test_row_not_summing_to_one(self):
        means = dict(DEFAULT_MEANS)
        means[Stage.SERIES_B] = {
            Outcome.NEXT_STAGE: 0.5,
            Outcome.BANKRUPT: 0.5,
            Outcome.OPERATING: 0.5,
            Outcome.UNICORN: 0.0,
        }
        with pytest.raises(InvalidDistribution, match="SeriesB"):
            ChainConfig(means=means)

    def test_missing_label(self):
        means = dict(DEFAULT_MEANS)
        means[Stage.SEED] = {Outcome.NEXT_STAGE: 0.5, Outcome.BANKRUPT: 0.5}
        with pytest.raises(InvalidDistribution):
            ChainConfig(means=means)

    def test_unknown_label(self):
        means = dict(DEFAULT_MEANS)
        means[Stage.SEED] = {"NextStage": 0.5, "Exploded": 0.5}
        with pytest.raises(InvalidDistribution):
            ChainConfig(means=means)

    def test_missing_stage(self):
        means = {k: v for k, v in DEFAULT_MEANS.items() if k != FINAL}
        with pytest.raises(InvalidDistribution):
            ChainConfig(means=means)

    def test_absorbing_stage_row_rejected(self):
        means = dict(DEFAULT_MEANS)
        means[Stage.ZOMBIE] = DEFAULT_MEANS[FINAL]
        with pytest.raises(InvalidParameter):
            ChainConfig(means=means)

    def test_non_positive_concentration_names_stage(self):
        concentrations = dict(DEFAULT_CONCENTRATIONS)
        concentrations[Stage.SERIES_C] = -2.0
        with pytest.raises(InvalidParameter) as excinfo:
            ChainConfig(concentrations=concentrations)
        assert excinfo.value.stage == "SeriesC"

    def test_missing_concentration(self):
        concentrations = {k: v for k, v in DEFAULT_CONCENTRATIONS.items() if k != Stage.SEED}
        with pytest.raises(InvalidParameter):
            ChainConfig(concentrations=concentrations)

    @pytest.mark.parametrize("horizon", [0, -1, 3.0, True])
    def test_bad_horizon(self, horizon):
        with pytest.raises(InvalidParameter):
            ChainConfig(horizon=horizon)

    def test_unknown_config_key(self):
        with pytest.raises(InvalidParameter):
            ChainConfig.from_dict({"horizonn": 12})

    def test_non_numeric_concentration_names_stage(self):
        with pytest.raises(InvalidParameter) as excinfo:
            ChainConfig.from_dict({"concentrations": {"SeriesA": "high"}})
        assert excinfo.value.stage == "SeriesA"

    @pytest.mark.parametrize("row", [{"NextStage": "most", "Bankrupt": 0.5}, 0.3])
    def test_malformed_means_row(self, row):
        with pytest.raises(InvalidDistribution, match="Seed"):
            ChainConfig.from_dict({"means": {"Seed": row}})

    def test_section_must_be_mapping(self):
        with pytest.raises(InvalidParameter):
            ChainConfig.from_dict({"concentrations": [1, 2, 3]})


class TestSerialization:
    def test_from_dict_ignores_comment_keys(self):
        config = ChainConfig.from_dict({"_note": "calibrated 2024", "horizon": 12})
        assert config.horizon == 12
        assert config.means == ChainConfig.default().means

    def test_json_file_round_trip(self, tmp_path, default_config: ChainConfig):
        path = tmp_path / "chain.json"
        default_config.with_concentration(7.5).to_json(path)
        loaded = ChainConfig.from_json(path)
        assert loaded == default_config.with_concentration(7.5)

    def test_malformed_json_file(self, tmp_path):
        path = tmp_path / "chain.json"
        path.write_text("{\"horizon\": ")
        with pytest.raises(InvalidParameter) as excinfo:
            ChainConfig.from_json(path)
        assert excinfo.value.__cause__ is not None

    def test_json_must_hold_object(self, tmp_path):
        path = tmp_path / "chain.json"
        path.write_text("[1, 2]")
        with pytest.raises(InvalidParameter):
            ChainConfig.from_json(path)

    def test_to_dict_uses_labels(self, default_config: ChainConfig):
        data = default_config.to_dict()
        assert data["means"]["Seed"]["NextStage"] == 0.27
        assert json.dumps(data)


class TestDerivedConfigs:
    def test_with_concentration_sets_every_stage(self, default_config: ChainConfig):
        config = default_config.with_concentration(50.0)
        assert set(config.concentrations.values()) == {50.0}
        assert config.means == default_config.means
        # original untouched
        assert default_config.concentrations[Stage.SEED] == 20.0

    def test_with_concentration_validates(self, default_config: ChainConfig):
        with pytest.raises(InvalidParameter):
            default_config.with_concentration(0.0)

    def test_with_updated_stage_uses_posterior(self, default_config: ChainConfig):
        counts = {"NextStage": 2, "Bankrupt": 0, "Operating": 8, "Unicorn": 0}
        config = default_config.with_updated_stage("Seed", counts, pseudo_count_total=100)
        expected = update_priors(
            default_config.means[Stage.SEED],
            {Outcome(k): v for k, v in counts.items()},
            100,
        )
        assert config.means[Stage.SEED] == pytest.approx(expected)
        assert config.means[Stage.SERIES_A] == default_config.means[Stage.SERIES_A]

    def test_with_updated_stage_bad_counts_names_stage(self, default_config: ChainConfig):
        with pytest.raises(InvalidParameter, match="SeriesA"):
            default_config.with_updated_stage(Stage.SERIES_A, {"Bankrupt": -4})

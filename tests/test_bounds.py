"""
Tests for generator/bounds.py configuration loading.
"""

import pytest

from derivation.rules import InferenceRule
from generator.bounds import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, GeneratorBounds, load_bounds


class TestGeneratorBounds:
    def test_defaults(self):
        bounds = GeneratorBounds()
        assert bounds.max_attempts == 50
        assert bounds.variables == ("p", "q", "r", "s", "t", "u", "v", "w")
        assert all(bounds.weight_for(rule) == 1.0 for rule in InferenceRule.proper_rules())

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_attempts": 0},
            {"node_retries": -1},
            {"branching_chance": 1.5},
            {"variables": ("p",)},
            {"variables": ("p", "p")},
            {"variables": ("p", "1")},
            {"rule_weights": {"XX": 1.0}},
            {"rule_weights": {"MP": -1.0}},
            {"rule_weights": {"MP": 0.0}},
        ],
    )
    def test_invalid_settings(self, overrides):
        with pytest.raises(ValueError):
            GeneratorBounds(**overrides)

    def test_missing_weight_reads_as_zero(self):
        bounds = GeneratorBounds(rule_weights={"MP": 2.0})
        assert bounds.weight_for(InferenceRule.MODUS_PONENS) == 2.0
        assert bounds.weight_for(InferenceRule.ADDITION) == 0.0

    def test_dict_round_trip(self):
        bounds = GeneratorBounds(max_attempts=7, variables=("a", "b", "c"))
        assert GeneratorBounds.from_dict(bounds.to_dict()) == bounds

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="max_depth"):
            GeneratorBounds.from_dict({"max_depth": 3})


class TestLoadBounds:
    def test_bundled_config(self):
        bounds = load_bounds()
        assert all(bounds.weight_for(rule) == 1.0 for rule in InferenceRule.proper_rules())
        assert load_bounds(DEFAULT_CONFIG_PATH) == bounds

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "gen.yaml"
        path.write_text("max_attempts: 3\nvariables: [a, b]\n", encoding="utf-8")
        bounds = load_bounds(str(path))
        assert bounds.max_attempts == 3
        assert bounds.variables == ("a", "b")
        assert bounds.node_retries == 10

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("branching_chance: 0.9\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_bounds().branching_chance == 0.9

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_bounds(str(path)) == GeneratorBounds()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_bounds(str(tmp_path / "nope.yaml"))

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_bounds(str(path))

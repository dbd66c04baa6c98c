"""
Search limits for the planned problem generator.

These bounds keep every generation call finite: the number of whole
attempts, the retries per plan node, and a per-attempt cap on solver work.
Defaults live here; ``config/generator.yaml`` (or the file named by
``WFF_GENERATOR_CONFIG``) may override any of them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from normalization.tiles import PROBLEM_VARIABLE_NAMES, VARIABLE_NAMES

from derivation.rules import InferenceRule

CONFIG_ENV_VAR = "WFF_GENERATOR_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    "config",
    "generator.yaml",
)


def _uniform_weights() -> Dict[str, float]:
    return {rule.abbreviation: 1.0 for rule in InferenceRule.proper_rules()}


@dataclass(frozen=True, slots=True)
class GeneratorBounds:
    """
    Deterministic limits for one ``generate`` call.

    Attributes:
        max_attempts: Plan-and-solve restarts before reporting no problem.
        node_retries: Fresh target/variable draws per plan node.
        branching_chance: Probability that all children of a node are expanded.
        max_difficulty: Upper clamp for the requested difficulty.
        candidate_limit: Backward premise candidates tried per draw.
        max_solver_steps: Node visits allowed within one attempt.
        variables: Letters problems are built from.
        rule_weights: Relative weight of each rule during planning, keyed by abbreviation.
    """

    max_attempts: int = 50
    node_retries: int = 10
    branching_chance: float = 0.3
    max_difficulty: int = 10
    candidate_limit: int = 6
    max_solver_steps: int = 4000
    variables: Tuple[str, ...] = PROBLEM_VARIABLE_NAMES
    rule_weights: Mapping[str, float] = field(default_factory=_uniform_weights)

    def __post_init__(self) -> None:
        for name in ("max_attempts", "node_retries", "max_difficulty", "candidate_limit", "max_solver_steps"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not 0.0 <= self.branching_chance <= 1.0:
            raise ValueError(f"branching_chance must be within [0, 1], got {self.branching_chance!r}")
        if len(self.variables) < 2 or len(set(self.variables)) != len(self.variables):
            raise ValueError("variables must hold at least two distinct letters")
        for letter in self.variables:
            if letter not in VARIABLE_NAMES:
                raise ValueError(f"Not a variable letter: {letter!r}")
        known = {rule.abbreviation for rule in InferenceRule.proper_rules()}
        for abbreviation, weight in self.rule_weights.items():
            if abbreviation not in known:
                raise ValueError(f"Unknown rule in rule_weights: {abbreviation!r}")
            if weight < 0:
                raise ValueError(f"Weight for {abbreviation} must be non-negative")
        if not any(weight > 0 for weight in self.rule_weights.values()):
            raise ValueError("At least one rule needs a positive weight")

    def weight_for(self, rule: InferenceRule) -> float:
        return float(self.rule_weights.get(rule.abbreviation, 0.0))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratorBounds":
        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValueError(f"Unknown generator settings: {', '.join(unknown)}")
        values: Dict[str, Any] = dict(data)
        if "variables" in values:
            values["variables"] = tuple(str(v) for v in values["variables"])
        if "rule_weights" in values:
            values["rule_weights"] = {str(k): float(v) for k, v in values["rule_weights"].items()}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_attempts": self.max_attempts,
            "node_retries": self.node_retries,
            "branching_chance": self.branching_chance,
            "max_difficulty": self.max_difficulty,
            "candidate_limit": self.candidate_limit,
            "max_solver_steps": self.max_solver_steps,
            "variables": list(self.variables),
            "rule_weights": dict(self.rule_weights),
        }


def load_bounds(config_path: Optional[str] = None) -> GeneratorBounds:
    """
    Load generator bounds from YAML.

    Args:
        config_path: Explicit file. When None, ``WFF_GENERATOR_CONFIG`` is
            consulted, then the bundled ``config/generator.yaml``; if neither
            exists the built-in defaults are returned.

    Raises:
        FileNotFoundError: If an explicitly named file does not exist
        ValueError: If the file holds invalid settings
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = explicit or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        if explicit:
            raise FileNotFoundError(f"Generator config not found: {path}")
        return GeneratorBounds()

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f.read()) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Generator config must be a mapping: {path}")
    return GeneratorBounds.from_dict(config)


__all__ = ["GeneratorBounds", "load_bounds", "CONFIG_ENV_VAR", "DEFAULT_CONFIG_PATH"]

"""Planned proof-problem generation."""

from .bounds import GeneratorBounds, load_bounds
from .planned import PlannedProblemGenerator, generate
from .replay import replay_derivation
from .varlists import VarLists

__all__ = [
    "GeneratorBounds",
    "load_bounds",
    "PlannedProblemGenerator",
    "generate",
    "replay_derivation",
    "VarLists",
]

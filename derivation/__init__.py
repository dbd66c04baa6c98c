"""Inference, replacement and proof validation for the propositional core."""

from .rules import Application, InferenceRule, find_application, is_valid_inference, possible_conclusions
from .backward import premise_shapes_for_conclusion
from .replacement import ReplacementRule, is_valid_replacement
from .proof import (
    Assumption,
    ImplicationIntroduction,
    Inference,
    Premise,
    Problem,
    Proof,
    ProofLine,
    ReductioAdAbsurdum,
    Reiteration,
    Replacement,
    ValidationResult,
)
from .verification import ProofValidator, check_solution, validate

__all__: list[str] = [
    # Rules
    "Application",
    "InferenceRule",
    "ReplacementRule",
    "possible_conclusions",
    "find_application",
    "is_valid_inference",
    "premise_shapes_for_conclusion",
    "is_valid_replacement",
    # Proofs
    "Assumption",
    "ImplicationIntroduction",
    "Inference",
    "Premise",
    "Problem",
    "Proof",
    "ProofLine",
    "ReductioAdAbsurdum",
    "Reiteration",
    "Replacement",
    "ValidationResult",
    # Validation
    "ProofValidator",
    "check_solution",
    "validate",
]

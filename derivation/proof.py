"""
Proof, problem and justification value types.

Provides:
- Justification variants (Premise, Assumption, Inference, Replacement,
  ImplicationIntroduction, ReductioAdAbsurdum, Reiteration)
- ProofLine and Proof
- Problem, the unit handed to a proof-construction session
- ValidationResult, the validator's structured verdict
- Dictionary round-tripping for JSON storage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from normalization.tiles import Formula, formula_from_string

from derivation.replacement import ReplacementRule
from derivation.rules import Application, InferenceRule


# ---------------------------------------------------------------------------
# Justifications
# ---------------------------------------------------------------------------

def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


class Justification:
    """Base class for the ways a proof line can be obtained."""
    __slots__ = ()
    kind = "justification"

    @property
    def display_text(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True, slots=True)
class Premise(Justification):
    kind = "premise"

    @property
    def display_text(self) -> str:
        return "Premise"


@dataclass(frozen=True, slots=True)
class Assumption(Justification):
    kind = "assumption"

    @property
    def display_text(self) -> str:
        return "Assumption"


@dataclass(frozen=True, slots=True)
class Inference(Justification):
    rule: InferenceRule
    lines: Tuple[int, ...]
    kind = "inference"

    @property
    def display_text(self) -> str:
        return f"{','.join(str(n) for n in self.lines)}: {self.rule.abbreviation}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "rule": self.rule.abbreviation, "lines": list(self.lines)}


@dataclass(frozen=True, slots=True)
class Replacement(Justification):
    rule: ReplacementRule
    line: int
    kind = "replacement"

    @property
    def display_text(self) -> str:
        return f"{self.line}: {self.rule.abbreviation}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "rule": self.rule.abbreviation, "line": self.line}


@dataclass(frozen=True, slots=True)
class ImplicationIntroduction(Justification):
    start: int
    end: int
    kind = "implication_introduction"

    @property
    def display_text(self) -> str:
        return f"{self.start}-{self.end} II"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class ReductioAdAbsurdum(Justification):
    start: int
    end: int
    contradiction_line: int
    kind = "reductio_ad_absurdum"

    @property
    def display_text(self) -> str:
        return f"{self.start}-{self.end} RAA"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "start": self.start,
            "end": self.end,
            "contradiction_line": self.contradiction_line,
        }


@dataclass(frozen=True, slots=True)
class Reiteration(Justification):
    line: int
    kind = "reiteration"

    @property
    def display_text(self) -> str:
        return f"{self.line}: Reit."

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "line": self.line}


def justification_from_dict(data: Dict[str, Any]) -> Justification:
    """Inverse of ``Justification.to_dict``; raises ValueError on unknown kinds."""
    data = _require_mapping(data, "Justification")
    kind = data.get("kind")
    if kind == Premise.kind:
        return Premise()
    if kind == Assumption.kind:
        return Assumption()
    if kind == Inference.kind:
        return Inference(InferenceRule.from_abbreviation(data["rule"]), tuple(int(n) for n in data["lines"]))
    if kind == Replacement.kind:
        return Replacement(ReplacementRule.from_abbreviation(data["rule"]), int(data["line"]))
    if kind == ImplicationIntroduction.kind:
        return ImplicationIntroduction(int(data["start"]), int(data["end"]))
    if kind == ReductioAdAbsurdum.kind:
        return ReductioAdAbsurdum(int(data["start"]), int(data["end"]), int(data["contradiction_line"]))
    if kind == Reiteration.kind:
        return Reiteration(int(data["line"]))
    raise ValueError(f"Unknown justification kind: {kind!r}")


# ---------------------------------------------------------------------------
# Proofs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProofLine:
    line_number: int
    formula: Formula
    justification: Justification
    depth: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line_number,
            "formula": self.formula.text,
            "justification": self.justification.to_dict(),
            "depth": self.depth,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofLine":
        data = _require_mapping(data, "Proof line")
        if not isinstance(data["formula"], str):
            raise ValueError("Proof line 'formula' must be a string")
        return cls(
            line_number=int(data["line"]),
            formula=formula_from_string(data["formula"]),
            justification=justification_from_dict(data["justification"]),
            depth=int(data.get("depth", 0)),
        )


@dataclass(frozen=True, slots=True)
class Proof:
    lines: Tuple[ProofLine, ...] = ()

    def __iter__(self):
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {"lines": [line.to_dict() for line in self.lines]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proof":
        data = _require_mapping(data, "Proof document")
        if "lines" not in data:
            raise ValueError("Proof document has no 'lines'")
        if not isinstance(data["lines"], list):
            raise ValueError("Proof document 'lines' must be a list")
        return cls(tuple(ProofLine.from_dict(item) for item in data["lines"]))


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Problem:
    """
    A proof exercise.

    Attributes:
        id: Stable identifier
        name: Display name
        premises: Given formulas, in presentation order
        conclusion: Formula the player must reach
        difficulty: Generator's complexity score
        derivation: Root application of the generator's derivation tree
    """
    id: str
    name: str
    premises: Tuple[Formula, ...]
    conclusion: Formula
    difficulty: int = 0
    derivation: Optional[Application] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "premises": [p.text for p in self.premises],
            "conclusion": self.conclusion.text,
            "difficulty": self.difficulty,
        }
        if self.derivation is not None:
            data["derivation"] = self.derivation.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Problem":
        data = _require_mapping(data, "Problem")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            premises=tuple(formula_from_string(p) for p in data["premises"]),
            conclusion=formula_from_string(data["conclusion"]),
            difficulty=int(data.get("difficulty", 0)),
        )


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    error_message: Optional[str] = None
    error_line: Optional[int] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(True, "Proof is valid.")

    @classmethod
    def fail(cls, line: Optional[int], message: str) -> "ValidationResult":
        if line is not None:
            message = f"Line {line}: {message}"
        return cls(False, message, line)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "error_message": self.error_message,
            "error_line": self.error_line,
        }


__all__ = [
    "Justification",
    "Premise",
    "Assumption",
    "Inference",
    "Replacement",
    "ImplicationIntroduction",
    "ReductioAdAbsurdum",
    "Reiteration",
    "justification_from_dict",
    "ProofLine",
    "Proof",
    "Problem",
    "ValidationResult",
]

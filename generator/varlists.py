"""
Variable bookkeeping for one generation attempt.

``VarLists`` partitions the generator's alphabet into letters still
available and the atomic assertions (a variable or its negation) already
committed somewhere in the proof under construction. Instances are
immutable: every claim returns a new snapshot, so a speculative branch
works on its own value and a failed branch simply drops it.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from normalization.ast_canon import Node, atomic_assertions, base_variable, contradicts


@dataclass(frozen=True, slots=True)
class VarLists:
    available: Tuple[str, ...]
    used: Tuple[Node, ...] = ()

    @classmethod
    def create(cls, variables: Sequence[str], rng: Optional[random.Random] = None) -> "VarLists":
        """Fresh snapshot over ``variables``, shuffled when ``rng`` is given."""
        letters = list(variables)
        if rng is not None:
            rng.shuffle(letters)
        return cls(available=tuple(letters))

    def copy(self) -> "VarLists":
        return VarLists(self.available, self.used)

    def use_atomic_assertion(self, literal: Node) -> Optional["VarLists"]:
        """
        Commit one literal.

        Returns the updated snapshot: unchanged when the literal is already
        used, with the letter moved out of ``available`` when it is new, or
        ``None`` when it contradicts a committed literal.
        """
        variable = base_variable(literal)
        if variable is None:
            raise ValueError(f"Not an atomic assertion: {literal}")
        if literal in self.used:
            return self
        if any(contradicts(literal, committed) for committed in self.used):
            return None
        available = tuple(letter for letter in self.available if letter != variable.symbol)
        return VarLists(available, self.used + (literal,))

    def claim(self, tree: Node) -> Optional["VarLists"]:
        """Commit every atomic assertion of ``tree``, or ``None`` on a conflict."""
        state: Optional[VarLists] = self
        for literal in atomic_assertions(tree):
            state = state.use_atomic_assertion(literal)
            if state is None:
                return None
        return state

    def used_letters(self) -> Tuple[str, ...]:
        letters = []
        for literal in self.used:
            letter = base_variable(literal).symbol
            if letter not in letters:
                letters.append(letter)
        return tuple(letters)


def consistent(literals: Iterable[Node]) -> bool:
    """True when no two literals assert a variable with opposite signs."""
    seen = list(literals)
    return not any(contradicts(a, b) for i, a in enumerate(seen) for b in seen[i + 1:])


__all__ = ["VarLists", "consistent"]

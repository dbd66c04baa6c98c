from .tiles import Formula, Symbol, SymbolKind, formula_from_string
from .ast_canon import (
    BinaryOp,
    Node,
    UnaryOp,
    Variable,
    atomic_assertions,
    formulas_equal,
    normalize,
    parse,
    parse_text,
    render,
)
from .wff import is_wff

"""sheetcalc.calc - dependency graph, formula parser and evaluator."""

from sheetcalc.calc._evaluator import evaluate_tokens
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._parser import Formula, Token, TokenKind, tokenize
from sheetcalc.calc._protocol import CellContents, CellValue, FormulaError, Lookup
from sheetcalc.calc._recalc import recalculation_order

__all__ = [
    "CellContents",
    "CellValue",
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "Lookup",
    "Token",
    "TokenKind",
    "evaluate_tokens",
    "recalculation_order",
    "tokenize",
]

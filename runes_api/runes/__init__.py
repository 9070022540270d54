"""Core rune query kernel: identifiers, amounts, mint terms and storage."""

from .decimals import parse, render
from .errors import NotFoundError, ParseError, RunesError, StoreError
from .identifiers import resolve_block, resolve_rune
from .mintability import is_mintable, mint_percentage
from .models import Balance, ChainTip, Etching, LedgerEntry, MintTerms, Page, RuneRef, SupplySnapshot

__all__ = [
    "Balance",
    "ChainTip",
    "Etching",
    "LedgerEntry",
    "MintTerms",
    "NotFoundError",
    "Page",
    "ParseError",
    "RuneRef",
    "RunesError",
    "StoreError",
    "SupplySnapshot",
    "is_mintable",
    "mint_percentage",
    "parse",
    "render",
    "resolve_block",
    "resolve_rune",
]

# walkout/utils/composite_key.py

from typing import Optional


def composite_key(tooth: Optional[str], surface: Optional[str]) -> str:
    """
    Order-insensitive identity for a tooth/surface pair.

    Extraction sometimes swaps the Tooth and Surface columns, so
    ("12", "MO") and ("MO", "12") must produce the same key. Values are
    compared as-is; no case or format normalization.
    """
    return "".join(sorted([tooth or "", surface or ""]))


def item_key(item) -> str:
    """Composite key for anything carrying .tooth and .surface (LineItem, MatchRecord)."""
    return composite_key(item.tooth, item.surface)

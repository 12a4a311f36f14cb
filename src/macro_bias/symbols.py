"""Instrument symbol normalization shared by config, correlation and bias code."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[/_\-\s]")


def normalize_symbol(symbol: str) -> str:
    """'btc/usdt' -> 'BTCUSDT'."""
    return _SEPARATORS.sub("", symbol or "").upper()


def symbol_variants(symbol: str) -> list[str]:
    """
    Lookup variants of a symbol, most specific first.

    Crypto pairs quoted in USDT are also stored under USD and vice versa,
    so 'BTCUSDT' -> ['BTCUSDT', 'BTCUSD'] and 'BTCUSD' -> ['BTCUSD', 'BTCUSDT'].
    """
    norm = normalize_symbol(symbol)
    if not norm:
        return []
    variants = [norm]
    if norm.endswith("USDT") and len(norm) > 4:
        variants.append(norm[:-1])
    elif norm.endswith("USD") and len(norm) > 3:
        variants.append(norm + "T")
    return variants

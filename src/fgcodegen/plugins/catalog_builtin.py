"""fgcodegen plugin to look up the pad arities of the standard FFmpeg filters"""

from __future__ import annotations

from pluggy import HookimplMarker

from ..filtergraph.catalog import BUILTIN_FILTERS, Arity

hookimpl = HookimplMarker("fgcodegen")

__all__ = ["filter_arity"]


@hookimpl
def filter_arity(name: str) -> Arity | None:
    """look up the builtin filter table"""
    return BUILTIN_FILTERS.get(name)

"""fgcodegen.filtergraph module - FFmpeg filtergraph description parsing and linking

    ====================  ============================================================
    Function              Description
    ====================  ============================================================
    ``parse_graph``       parse an expression into chains of ``FilterSpec`` records
    ``resolve_graph``     number the filters, link their pads and list the boundary pads
    ``link_graph``        ``resolve_graph(parse_graph(expr))``
    ====================  ============================================================

"""

from __future__ import annotations

from . import catalog
from .catalog import Fixed, VariadicIn, VariadicOut, Variadic
from .parser import FilterSpec, ParsedGraph, parse_graph, parse_filter_args
from .resolver import (
    FilterInstance,
    Link,
    BoundaryPad,
    LinkedGraph,
    resolve_graph,
    validate_pads,
)
from .exceptions import (
    FiltergraphError,
    FiltergraphSyntaxError,
    FiltergraphLabelError,
    FiltergraphDanglingPadError,
    FiltergraphArityError,
    FiltergraphUnknownFilterError,
)

__all__ = [
    "catalog",
    "Fixed",
    "VariadicIn",
    "VariadicOut",
    "Variadic",
    "FilterSpec",
    "ParsedGraph",
    "parse_graph",
    "parse_filter_args",
    "FilterInstance",
    "Link",
    "BoundaryPad",
    "LinkedGraph",
    "resolve_graph",
    "validate_pads",
    "link_graph",
    "FiltergraphError",
    "FiltergraphSyntaxError",
    "FiltergraphLabelError",
    "FiltergraphDanglingPadError",
    "FiltergraphArityError",
    "FiltergraphUnknownFilterError",
]


def link_graph(expr: str, **kwargs) -> LinkedGraph:
    """parse and link a filtergraph expression

    :param expr: filtergraph expression
    :param **kwargs: keyword arguments of :py:func:`resolve_graph`
    :return: linked filtergraph
    """
    return resolve_graph(parse_graph(expr), **kwargs)

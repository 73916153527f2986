from __future__ import annotations

import pluggy

from ..filtergraph.catalog import Arity

hookspec = pluggy.HookspecMarker("fgcodegen")


@hookspec(firstresult=True)
def filter_arity(name: str) -> Arity | None:
    """get the pad arity of a filter

    :param name: filter name (without the ``@`` instance tag)
    :return: arity descriptor (``Fixed``, ``VariadicIn``, ``VariadicOut``, or
             ``Variadic``) or None if the plugin does not know the filter

    The hook implementations are called in the reverse registration order, so a
    plugin registered later overrides the builtin catalog.
    """
    ...

from __future__ import annotations

import logging

from .cmdline import split_commandline, CommandLine
from .filtergraph import parse_graph, resolve_graph
from .codegen import render_graph, render_commandline, _indent

logger = logging.getLogger(__name__)

__all__ = ["compile_graph", "compile_commandline", "iter_filtergraphs"]


def compile_graph(expr: str, title: str | None = None, **kwargs) -> str:
    """compile a filtergraph expression into libavfilter C code

    :param expr: filtergraph expression
    :param title: heading comment of the code, defaults to None
    :param **kwargs: keyword arguments of :py:func:`resolve_graph`
                     (``catalog_lookup``, ``dangling``, ``unknown``,
                     ``auto_sws_flags``) and of :py:func:`render_graph`
                     (``graph_var``, ``log_ctx_var``, ``function_name``,
                     ``narrate``)
    :return: C code
    """

    render_keys = ("graph_var", "log_ctx_var", "function_name", "narrate")
    render_kws = {k: kwargs.pop(k) for k in render_keys if k in kwargs}

    parsed = parse_graph(expr)
    linked = resolve_graph(parsed, **kwargs)
    return render_graph(linked, title, **render_kws)


def iter_filtergraphs(cmd: CommandLine):
    """iterate over the filtergraph expressions of a split command line

    :param cmd: command line returned by :py:func:`split_commandline`
    :yield: tuple of a description of where the expression was found and the
            expression. The global options are visited first, then the output
            files in the command-line order.
    """

    from .rcparams import rcParams

    def as_list(val):
        return val if isinstance(val, list) else [val]

    for key in rcParams["commandline.complex_options"]:
        for expr in as_list(cmd.global_options.get(key, [])):
            yield f"-{key}", expr

    filter_keys = rcParams["commandline.filter_options"]
    for i, (url, opts) in enumerate(cmd.outputs):
        for key, val in opts.items():
            if key in filter_keys:
                for expr in as_list(val):
                    yield f'-{key} of output #{i} "{url}"', expr


def compile_commandline(cmdline: str | list[str], **kwargs) -> str:
    """compile the filtergraphs of an ffmpeg command line into libavfilter C code

    :param cmdline: full or partial ffmpeg command line string or list of arguments
    :param **kwargs: keyword arguments of :py:func:`compile_graph`
    :return: C code of all the filtergraphs, in the order they are found
             (prefixed by the option group splitting calls if
             ``rcParams["codegen.emit_commandline"]`` is True)

    With several filtergraphs, the wrapper function of the n-th filtergraph
    (n > 0) is named ``<function_name>_<n>``. Without wrapper functions, the
    code of each filtergraph is enclosed in its own ``{ }`` block.
    """

    from .rcparams import rcParams

    cmd = split_commandline(cmdline)

    blocks = []
    if rcParams["codegen.emit_commandline"]:
        blocks.append(render_commandline(cmd.operations))

    graphs = list(iter_filtergraphs(cmd))
    function_name = kwargs.pop("function_name", None)
    if function_name is None:
        function_name = rcParams["codegen.function_name"]

    for n, (where, expr) in enumerate(graphs):
        logger.info("compiling filtergraph of %s: %s", where, expr)
        name = f"{function_name}_{n}" if function_name and n else function_name
        code = compile_graph(expr, where, function_name=name, **kwargs)
        if not function_name and len(graphs) > 1:
            code = f"\n{{\n{_indent(code)}}}\n"
        blocks.append(code)

    if not blocks:
        logger.warning("No filtergraph found in the command line.")

    return "\n".join(blocks)

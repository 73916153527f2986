"""C code generator

Renders a linked filtergraph as the libavfilter calls which build it:

1. ``scale_sws_opts`` of the graph (if the expression has a ``sws_flags`` header)
2. one ``avfilter_graph_alloc_filter()`` + ``avfilter_init_str()`` per filter
3. one ``avfilter_link()`` per link
4. one ``AVFilterInOut`` record per boundary pad, chained into ``*inputs`` and
   ``*outputs``

The text is assembled in memory and only returned once the whole graph has been
rendered.
"""

from __future__ import annotations

import logging

from .errors import CodegenError
from .filtergraph.resolver import LinkedGraph, BoundaryPad

logger = logging.getLogger(__name__)

__all__ = ["c_string", "render_graph", "render_commandline"]

_C_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def c_string(s: str) -> str:
    """escape a string for a C string literal (without the enclosing quotes)"""
    return "".join(_C_ESCAPES.get(c, c) for c in s)


def _c_comment(s: str) -> str:
    return "/* " + s.replace("*/", "* /") + " */"


def _render_sws_opts(sws_opts: str, graph_var: str) -> str:
    size = len(sws_opts.encode("utf-8")) + 1
    return f"""
av_freep(&{graph_var}->scale_sws_opts);
if (!({graph_var}->scale_sws_opts = av_mallocz({size})))
    return AVERROR(ENOMEM);
av_strlcpy({graph_var}->scale_sws_opts, "{c_string(sws_opts)}", {size});
"""


def _render_filter(filt, var: str, graph_var: str, log_ctx_var: str) -> str:
    return f"""
AVFilterContext *{var} = avfilter_graph_alloc_filter({graph_var}, avfilter_get_by_name("{filt.name}"), "{c_string(filt.inst_name)}");
if (!{var}) {{
    av_log({log_ctx_var}, AV_LOG_ERROR, "Error creating filter '{filt.name}'\\n");
    return AVERROR(ENOMEM);
}}
avfilter_init_str({var}, "{c_string(filt.args)}");
"""


def _render_link(link, filters, filter_vars: list[str], log_ctx_var: str) -> str:
    src = filters[link.producer].inst_name
    dst = filters[link.consumer].inst_name
    return f"""
if ((ret = avfilter_link({filter_vars[link.producer]}, {link.producer_pad}, {filter_vars[link.consumer]}, {link.consumer_pad}))) {{
    av_log({log_ctx_var}, AV_LOG_ERROR,
           "Cannot create the link {c_string(src)}:{link.producer_pad} -> {c_string(dst)}:{link.consumer_pad}\\n");
    return ret;
}}
"""


def _render_inout(pad: BoundaryPad, var: str, filter_var: str) -> str:
    code = f"""
AVFilterInOut *{var};
if (!({var} = av_mallocz(sizeof(AVFilterInOut))))
    return AVERROR(ENOMEM);
{var}->filter_ctx = {filter_var};
{var}->pad_idx = {pad.pad};
"""
    if pad.label is not None:
        code += f"""if (!({var}->name = av_strdup("{c_string(pad.label)}")))
    return AVERROR(ENOMEM);
"""
    return code


def _render_inout_list(vars: list[str], target: str) -> str:
    code = f"\n*{target} = {vars[0] if vars else 'NULL'};\n"
    for prev, var in zip(vars[:-1], vars[1:]):
        code += f"{prev}->next = {var};\n"
    return code


def _indent(code: str, prefix: str = "    ") -> str:
    return "".join(
        prefix + line if line.strip() else line for line in code.splitlines(True)
    )


def render_graph(
    linked: LinkedGraph,
    title: str | None = None,
    *,
    graph_var: str | None = None,
    log_ctx_var: str | None = None,
    function_name: str | None = None,
    narrate: bool | None = None,
) -> str:
    """render libavfilter C code which builds the linked filtergraph

    :param linked: linked filtergraph returned by :py:func:`resolve_graph`
    :param title: text of the comment heading the code (e.g., the output url and
                  the option name), defaults to None (no heading)
    :param graph_var: name of the ``AVFilterGraph *`` variable, defaults to
                      ``rcParams["codegen.graph_var"]``
    :param log_ctx_var: name of the ``av_log()`` context variable, defaults to
                        ``rcParams["codegen.log_ctx_var"]``
    :param function_name: if not empty, wraps the code in a function with this
                          name, defaults to ``rcParams["codegen.function_name"]``
    :param narrate: True to emit the heading and section comments, defaults to
                    ``rcParams["codegen.narrate"]``
    :return: C code
    :raises CodegenError: if a link or boundary pad refers to a missing filter

    Filters are held by ``filter_<name>_<id>`` variables and the boundary pads
    by ``input_<n>`` and ``output_<n>`` variables. Without a wrapper function,
    the code expects ``int ret`` and the ``AVFilterInOut **inputs`` and
    ``AVFilterInOut **outputs`` arguments in scope.
    """

    from .rcparams import rcParams

    if graph_var is None:
        graph_var = rcParams["codegen.graph_var"]
    if log_ctx_var is None:
        log_ctx_var = rcParams["codegen.log_ctx_var"]
    if function_name is None:
        function_name = rcParams["codegen.function_name"]
    if narrate is None:
        narrate = rcParams["codegen.narrate"]

    filters = linked.filters
    nb_filters = len(filters)
    for link in linked.links:
        if not (0 <= link.producer < nb_filters and 0 <= link.consumer < nb_filters):
            raise CodegenError(f"link {tuple(link)} refers to a missing filter")
    for pad in (*linked.inputs, *linked.outputs):
        if not 0 <= pad.filter < nb_filters:
            raise CodegenError(
                f"boundary {pad.side} pad {tuple(pad)} refers to a missing filter"
            )

    filter_vars = [f"filter_{f.name}_{f.id}" for f in filters]
    input_vars = [f"input_{i}" for i in range(len(linked.inputs))]
    output_vars = [f"output_{i}" for i in range(len(linked.outputs))]

    def section(comment):
        return f"\n{_c_comment(comment)}\n" if narrate else ""

    blocks = []
    if linked.sws_opts is not None:
        blocks.append(section("swscale options of the scale filters"))
        blocks.append(_render_sws_opts(linked.sws_opts, graph_var))

    blocks.append(section("filters"))
    blocks.extend(
        _render_filter(f, var, graph_var, log_ctx_var)
        for f, var in zip(filters, filter_vars)
    )

    if linked.links:
        blocks.append(section("links"))
        blocks.extend(
            _render_link(l, filters, filter_vars, log_ctx_var) for l in linked.links
        )

    blocks.append(section("boundary pads"))
    blocks.extend(
        _render_inout(pad, var, filter_vars[pad.filter])
        for side_pads, side_vars in (
            (linked.inputs, input_vars),
            (linked.outputs, output_vars),
        )
        for pad, var in zip(side_pads, side_vars)
    )
    blocks.append(_render_inout_list(input_vars, "inputs"))
    blocks.append(_render_inout_list(output_vars, "outputs"))

    body = "".join(blocks)

    if function_name:
        decl = "\nint ret;\n" if linked.links else ""
        body = (
            f"\nint {function_name}(AVFilterGraph *{graph_var}, AVFilterInOut **inputs,\n"
            f"{' ' * (len(function_name) + 5)}AVFilterInOut **outputs, void *{log_ctx_var})\n"
            "{"
            + _indent(decl + body + "\nreturn 0;\n")
            + "}\n"
        )

    if narrate and title:
        body = f"{_c_comment(title)}\n{body}"

    logger.debug(
        "rendered %d filters, %d links, %d inputs, and %d outputs",
        nb_filters,
        len(linked.links),
        len(linked.inputs),
        len(linked.outputs),
    )

    return body


def render_commandline(operations) -> str:
    """render the option group splitting calls of a command line

    :param operations: ``Operation(op, args)`` records of :py:func:`split_commandline`
    :return: C code, one ``add_opt()`` or ``finish_group()`` call per operation
    """

    lines = []
    for op, args in operations:
        if op == "add_opt":
            key, val = (c_string(a) for a in args)
            lines.append(f'add_opt(octx, find_option(options, "{key}"), "{key}", "{val}");')
        elif op == "finish_group":
            group, url = args
            lines.append(f'finish_group(octx, {group}, "{c_string(url)}");')
        else:
            raise CodegenError(f"unknown command-line operation: {op!r}")
    return "".join(f"\n{line}\n" for line in lines)

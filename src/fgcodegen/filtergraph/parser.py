"""FFmpeg filtergraph description parser

Turns a filtergraph expression such as::

    [in]scale=720:480, split [main][tmp]; [tmp] crop=iw:ih/2:0:0, vflip [flip];
    [main][flip] overlay=0:H/2[out]

into a ``ParsedGraph``: ordered chains of ``FilterSpec`` records. The parser is
purely syntactic. Filter names are not checked against the catalog, argument
strings are kept verbatim, and the labels are only collected. Linking happens in
:py:mod:`fgcodegen.filtergraph.resolver`.
"""

from __future__ import annotations

import re
from collections import namedtuple
from fractions import Fraction
import logging

from .exceptions import FiltergraphSyntaxError

logger = logging.getLogger(__name__)

__all__ = ["FilterSpec", "ParsedGraph", "parse_graph", "parse_filter_args"]

# fmt:off
FilterSpec = namedtuple("FilterSpec", ["name", "args", "input_labels", "output_labels", "pos"])
ParsedGraph = namedtuple("ParsedGraph", ["chains", "sws_opts"])
# fmt:on

# various regexp objects used in the module
_re_ws = re.compile(r"\s*")
_re_sws_flags = re.compile(r"\s*sws_flags=")
_re_name = re.compile(r"[^=,;\[\]]*")
_re_name_id = re.compile(r"([a-zA-Z0-9_]+)(?:@([a-zA-Z0-9_]+))?$")
_re_args_kw = re.compile(r"\s*([a-zA-Z0-9_]+)\s*=\s*(.*?)\s*$", re.DOTALL)


def _skip_ws(expr: str, i: int) -> int:
    return _re_ws.match(expr, i).end()


def _parse_sws_flags(expr: str) -> tuple[str | None, int]:
    # keeps the "flags=" part, which is how the options are passed to swscale
    m = _re_sws_flags.match(expr)
    if not m:
        return None, 0

    j = expr.find(";", m.end())
    if j < 0:
        raise FiltergraphSyntaxError(
            "sws_flags not terminated with ';'", expr, m.end() - 10
        )
    return "flags=" + expr[m.end() : j], j + 1


def _parse_labels(expr: str, i: int) -> tuple[tuple[str, ...], int]:
    labels = []
    i = _skip_ws(expr, i)
    while expr.startswith("[", i):
        j = expr.find("]", i + 1)
        k = expr.find("[", i + 1)
        if j < 0 or 0 <= k < j:
            raise FiltergraphSyntaxError("link label is not terminated by ']'", expr, i)
        label = expr[i + 1 : j].strip()
        if not label:
            raise FiltergraphSyntaxError("empty link label", expr, i)
        labels.append(label)
        i = _skip_ws(expr, j + 1)
    return tuple(labels), i


def _scan_args(expr: str, i: int) -> int:
    """return the end position of the filter argument string starting at i

    Single-quoted text and backslash-escaped characters are skipped over, so
    they may contain the separators.
    """
    n = len(expr)
    while i < n:
        c = expr[i]
        if c == "\\":
            i += 2
        elif c == "'":
            j = expr.find("'", i + 1)
            if j < 0:
                raise FiltergraphSyntaxError(
                    "a quote in the filter arguments is not terminated", expr, i
                )
            i = j + 1
        elif c in ",;[]":
            break
        else:
            i += 1
    return min(i, n)


def _parse_filter(expr: str, i: int, after: str | None) -> tuple[FilterSpec, int]:
    """parse one filter spec: [in_labels] name[@id][=args] [out_labels]"""

    input_labels, i = _parse_labels(expr, i)

    pos = i
    m = _re_name.match(expr, i)
    name = m[0].strip()
    if not name:
        if input_labels and (i >= len(expr) or expr[i] in ",;"):
            msg = "link labels are not followed by a filter"
        elif i >= len(expr):
            msg = (
                "empty filtergraph"
                if after is None
                else f"empty filter description after trailing '{after}'"
            )
        elif expr[i] in ",;":
            msg = (
                "empty filter chain"
                if after == ";" or expr[i] == ";"
                else "empty filter description"
            )
        else:
            msg = f"unexpected '{expr[i]}' where a filter name is expected"
        raise FiltergraphSyntaxError(msg, expr, i)

    if not _re_name_id.match(name):
        raise FiltergraphSyntaxError(f"'{name}' is not a valid filter name", expr, pos)

    i = m.end()
    args = ""
    if expr.startswith("=", i):
        j = _scan_args(expr, i + 1)
        args = expr[i + 1 : j].strip()
        i = j

    output_labels, i = _parse_labels(expr, i)

    return FilterSpec(name, args, input_labels, output_labels, pos), i


def parse_graph(expr: str) -> ParsedGraph:
    """parse filtergraph expression

    :param expr: filtergraph expression as given to ``-vf`` or ``-filter_complex``
    :return: chains of filter specs (in source order) and the ``sws_flags``
             header as swscale options (``"flags=..."``) or None
    :raises FiltergraphSyntaxError: if the expression is malformed

    Each chain is a tuple of ``FilterSpec(name, args, input_labels, output_labels, pos)``:

    ==============  ===============  ==========================================
    Field           type             description
    ==============  ===============  ==========================================
    name            str              filter name, possibly with ``@id`` suffix
    args            str              raw argument string ("" if not given)
    input_labels    tuple(str)       labels preceding the filter
    output_labels   tuple(str)       labels following the filter
    pos             int              position of the filter name in ``expr``
    ==============  ===============  ==========================================

    """

    sws_opts, i = _parse_sws_flags(expr)

    n = len(expr)
    chains = []
    chain = []
    after = None  # the separator preceding the current filter
    while True:
        fspec, i = _parse_filter(expr, i, after)
        chain.append(fspec)
        logger.debug("parsed filter '%s' with args '%s'", fspec.name, fspec.args)

        i = _skip_ws(expr, i)
        if i >= n:
            break

        after = expr[i]
        if after == ",":
            i += 1
        elif after == ";":
            chains.append(tuple(chain))
            chain = []
            i += 1
        else:
            raise FiltergraphSyntaxError(
                "Unable to parse graph description substring", expr, i
            )

    chains.append(tuple(chain))

    return ParsedGraph(tuple(chains), sws_opts)


###################################################################################################


def parse_filter_args(expr: str) -> tuple[list, dict]:
    """parse filter argument string

    :param expr: filter argument string (as stored in ``FilterSpec.args``)
    :return: list of positional argument values followed by a dict of named
             argument values. Numeric values are converted to ``int``,
             ``float``, or ``Fraction``.

    Arguments are separated by unescaped ``:`` outside of single quotes. Only the
    arguments preceding the first ``key=value`` pair are positional.
    """

    def conv_val(s):
        # convert a numeric option value
        try:
            return int(s)
        except ValueError:
            try:
                return float(s)
            except ValueError:
                try:
                    return Fraction(s)
                except (ValueError, ZeroDivisionError):
                    return s

    all_args = []
    n = len(expr)
    i0 = i = 0
    while i < n:
        c = expr[i]
        if c == "\\":
            i += 2
        elif c == "'":
            j = expr.find("'", i + 1)
            i = n if j < 0 else j + 1
        elif c == ":":
            all_args.append(expr[i0:i])
            i0 = i = i + 1
        else:
            i += 1
    if expr:
        all_args.append(expr[i0:])

    args = []
    kwargs = {}
    for arg in all_args:
        m = _re_args_kw.match(arg)
        if m:
            kwargs[m[1]] = conv_val(m[2])
        elif kwargs:
            continue
        else:
            args.append(conv_val(arg.strip()))

    return args, kwargs

"""filtergraph link resolver

Filtergraph Link Rules:
- One-to-one connection between an output pad of a filter and an input pad of another filter
- Consecutive filters in a chain are linked implicitly: the outputs of a filter, which are
  not claimed by its output labels, are fed to the next filter after its own input labels.
  If the output labels claim every output, the next filter gets nothing from the chain
- A label is produced (output label) at most once and consumed (input label) at most once
- A label without its counterpart, an input pad without a feed, and a chain-final output
  pad are unconnected and become the boundary pads of the graph

Filter instances are numbered in the order they appear in the expression and the links
are listed in the order they are discovered. Both orders are reproduced verbatim by the
code generator.
"""

from __future__ import annotations

from collections import namedtuple
import logging

from .typing import DANGLING_POLICY, UNKNOWN_FILTER_POLICY, PAD_SIDE, get_args
from .exceptions import (
    FiltergraphLabelError,
    FiltergraphDanglingPadError,
    FiltergraphArityError,
    FiltergraphUnknownFilterError,
)
from . import catalog
from .catalog import Fixed, VariadicIn, VariadicOut, Variadic, Arity, ArityLookup
from .parser import ParsedGraph, FilterSpec, parse_filter_args

logger = logging.getLogger(__name__)

__all__ = ["FilterInstance", "Link", "BoundaryPad", "LinkedGraph", "resolve_graph"]

# fmt:off
FilterInstance = namedtuple("FilterInstance", ["id", "name", "inst_name", "args", "nb_inputs", "nb_outputs"])
Link = namedtuple("Link", ["producer", "producer_pad", "consumer", "consumer_pad"])
BoundaryPad = namedtuple("BoundaryPad", ["filter", "pad", "side", "label"])
LinkedGraph = namedtuple("LinkedGraph", ["filters", "links", "inputs", "outputs", "sws_opts"])
# fmt:on


class _OpenPad:
    """pad waiting for its counterpart

    ``filter`` is None for an input label whose filter has not been created yet.
    ``edge`` is True for an entry or exit pad of the graph.
    """

    __slots__ = ("label", "filter", "pad", "edge")

    def __init__(
        self, label: str | None, filter: int | None, pad: int, edge: bool = False
    ):
        self.label = label
        self.filter = filter
        self.pad = pad
        self.edge = edge


def _pop_label(pads: list[_OpenPad], label: str) -> _OpenPad | None:
    for i, p in enumerate(pads):
        if p.label == label:
            return pads.pop(i)
    return None


def _declared_count(option: str | None, args: str) -> int | None:
    # pad count pinned by the filter option, e.g., split=3 or hstack=inputs=3
    if option is None or not args:
        return None
    pos_args, kw_args = parse_filter_args(args)
    n = kw_args.get(option, pos_args[0] if len(pos_args) else None)
    return n if isinstance(n, int) and n > 0 else None


def _count_pads(
    arity: Arity, args: str, n_pending: int, n_out_labels: int, chained: bool
) -> tuple[int, int]:
    """determine the numbers of input and output pads of a new filter instance

    :param arity: catalog arity descriptor
    :param args: filter argument string
    :param n_pending: number of inputs waiting to be connected to the filter
    :param n_out_labels: number of output labels of the filter
    :param chained: True if another filter follows in the chain
    :return: number of input pads and number of output pads
    """

    n_wanted_out = n_out_labels + int(chained)

    if isinstance(arity, Fixed):
        return arity.num_inputs, arity.num_outputs
    elif isinstance(arity, VariadicIn):
        n_in = _declared_count(arity.option, args)
        if n_in is None:
            n_in = max(arity.min_inputs, n_pending)
        return n_in, arity.num_outputs
    elif isinstance(arity, VariadicOut):
        n_out = _declared_count(arity.option, args)
        if n_out is None:
            n_out = max(arity.min_outputs, n_wanted_out)
        return arity.num_inputs, n_out
    elif isinstance(arity, Variadic):
        return max(arity.min_inputs, n_pending), max(arity.min_outputs, n_wanted_out)
    else:
        raise TypeError(f"{arity!r} is not a filter arity descriptor")


def _split_name(name: str, id: int) -> tuple[str, str]:
    # "name@tag" -> filter name and instance name
    filt_name, _, tag = name.partition("@")
    return filt_name, name if tag else f"Parsed_{filt_name}_{id}"


def resolve_graph(
    parsed: ParsedGraph,
    catalog_lookup: ArityLookup | None = None,
    dangling: DANGLING_POLICY | None = None,
    unknown: UNKNOWN_FILTER_POLICY | None = None,
    auto_sws_flags: bool | None = None,
) -> LinkedGraph:
    """link the filters of a parsed filtergraph

    :param parsed: parsed filtergraph returned by :py:func:`parse_graph`
    :param catalog_lookup: function returning the arity of a filter name or None if
                           unknown, defaults to :py:func:`catalog.lookup`
    :param dangling: ``"expose"`` to turn unconnected pads into the graph boundary
                     pads or ``"error"`` to reject the ones inside the graph (see
                     :py:data:`typing.DANGLING_POLICY`), defaults to
                     ``rcParams["filtergraph.dangling_pads"]``
    :param unknown: ``"error"`` to reject filters missing from the catalog or
                    ``"passthrough"`` to treat them as single-input single-output
                    filters, defaults to ``rcParams["filtergraph.unknown_filters"]``
    :param auto_sws_flags: True to append the ``sws_flags`` header to the arguments
                           of the ``scale`` filters, defaults to
                           ``rcParams["filtergraph.auto_sws_flags"]``
    :return: linked filtergraph
    :raises FiltergraphLabelError: if a label is produced or consumed twice
    :raises FiltergraphDanglingPadError: if ``dangling="error"`` and a pad inside the
                                         graph is left unconnected
    :raises FiltergraphArityError: if a filter receives too many inputs or output labels
    :raises FiltergraphUnknownFilterError: if ``unknown="error"`` and a filter is not
                                           in the catalog
    """

    from ..rcparams import rcParams

    if catalog_lookup is None:
        catalog_lookup = catalog.lookup
    if dangling is None:
        dangling = rcParams["filtergraph.dangling_pads"]
    if unknown is None:
        unknown = rcParams["filtergraph.unknown_filters"]
    if auto_sws_flags is None:
        auto_sws_flags = rcParams["filtergraph.auto_sws_flags"]

    if dangling not in get_args(DANGLING_POLICY):
        raise ValueError(f"{dangling=} is not a valid dangling pad policy.")
    if unknown not in get_args(UNKNOWN_FILTER_POLICY):
        raise ValueError(f"{unknown=} is not a valid unknown filter policy.")

    sws_opts = parsed.sws_opts

    filters = []
    links = []
    open_inputs = []  # unconnected input pads in discovery order
    open_outputs = []  # unconnected output pads in discovery order
    closed = set()  # labels already matched

    def check_reuse(label, output):
        side = "output" if output else "input"
        if label in closed:
            raise FiltergraphLabelError(
                f"Filter graph specifies the '{label}' {side} pad after it has been linked.",
                label,
            )
        if any(p.label == label for p in (open_outputs if output else open_inputs)):
            raise FiltergraphLabelError(
                f"Filter graph specifies multiple '{label}' {side} pads.", label
            )

    def link(producer, producer_pad, consumer, consumer_pad):
        links.append(Link(producer, producer_pad, consumer, consumer_pad))
        logger.debug(
            "link #%d: %d:%d -> %d:%d",
            len(links) - 1,
            producer,
            producer_pad,
            consumer,
            consumer_pad,
        )

    def take_input_labels(fspec: FilterSpec) -> list[_OpenPad]:
        pending = []
        for label in fspec.input_labels:
            check_reuse(label, False)
            if any(p.label == label for p in pending):
                raise FiltergraphLabelError(
                    f"Filter graph specifies multiple '{label}' input pads.", label
                )
            producer = _pop_label(open_outputs, label)
            if producer is None:
                pending.append(_OpenPad(label, None, len(pending)))
            else:
                closed.add(label)
                pending.append(producer)
        return pending

    def get_arity(filt_name, id) -> Arity:
        arity = catalog_lookup(filt_name)
        if arity is not None:
            return arity
        if unknown == "error":
            raise FiltergraphUnknownFilterError(filt_name, id)
        logger.warning(
            "Unknown filter '%s' (#%d) is assumed to have 1 input and 1 output.",
            filt_name,
            id,
        )
        return Fixed(1, 1)

    def create_filter(fspec: FilterSpec, id: int, chained: bool, pending: list):
        filt_name, inst_name = _split_name(fspec.name, id)
        args = fspec.args
        if (
            auto_sws_flags
            and sws_opts is not None
            and filt_name == "scale"
            and "flags" not in args
        ):
            args = f"{args}:{sws_opts}" if args else sws_opts

        arity = get_arity(filt_name, id)
        nb_inputs, nb_outputs = _count_pads(
            arity, args, len(pending), len(fspec.output_labels), chained
        )
        logger.debug(
            "created filter #%d '%s' (%d inputs, %d outputs)",
            id,
            inst_name,
            nb_inputs,
            nb_outputs,
        )
        return FilterInstance(id, filt_name, inst_name, args, nb_inputs, nb_outputs)

    def link_inputs(
        filt: FilterInstance, fspec: FilterSpec, pending: list[_OpenPad], head: bool
    ):
        if len(pending) > filt.nb_inputs:
            raise FiltergraphArityError(
                filt.name, filt.id, "input", filt.nb_inputs, len(pending)
            )

        for pad in range(filt.nb_inputs):
            p = pending[pad] if pad < len(pending) else _OpenPad(None, None, pad)
            if p.filter is None:
                # nothing feeds this pad (yet)
                p.filter = filt.id
                p.pad = pad
                if p.label is None:
                    p.edge = head and pad == 0 and not fspec.input_labels
                else:
                    p.edge = head
                open_inputs.append(p)
            else:
                link(p.filter, p.pad, filt.id, pad)

    def link_outputs(
        filt: FilterInstance, fspec: FilterSpec, chained: bool
    ) -> list[_OpenPad]:
        n_labels = len(fspec.output_labels)
        if n_labels > filt.nb_outputs:
            raise FiltergraphArityError(
                filt.name, filt.id, "output", filt.nb_outputs, n_labels
            )

        outputs = [_OpenPad(None, filt.id, pad) for pad in range(filt.nb_outputs)]
        for label, out in zip(fspec.output_labels, outputs):
            check_reuse(label, True)
            consumer = _pop_label(open_inputs, label)
            if consumer is None:
                out.label = label
                out.edge = not chained
                open_outputs.append(out)
            else:
                closed.add(label)
                link(filt.id, out.pad, consumer.filter, consumer.pad)

        # leftover outputs go to the next filter in the chain
        leftover = outputs[n_labels:]
        if not chained and leftover and not n_labels:
            leftover[0].edge = True
        return leftover

    for chain in parsed.chains:
        carried = []
        for j, fspec in enumerate(chain):
            chained = j + 1 < len(chain)
            pending = take_input_labels(fspec) + carried

            filt = create_filter(fspec, len(filters), chained, pending)
            filters.append(filt)

            link_inputs(filt, fspec, pending, j == 0)
            carried = link_outputs(filt, fspec, chained)

        open_outputs.extend(carried)

    if dangling == "error":
        for p, side in (
            *((p, "input") for p in open_inputs),
            *((p, "output") for p in open_outputs),
        ):
            if not p.edge:
                f = filters[p.filter]
                raise FiltergraphDanglingPadError(side, f.name, f.id, p.pad, p.label)

    inputs = [BoundaryPad(p.filter, p.pad, "input", p.label) for p in open_inputs]
    outputs = [BoundaryPad(p.filter, p.pad, "output", p.label) for p in open_outputs]

    linked = LinkedGraph(
        tuple(filters), tuple(links), tuple(inputs), tuple(outputs), sws_opts
    )
    validate_pads(linked)
    return linked


def validate_pads(linked: LinkedGraph):
    """check that every pad of every filter is used exactly once

    :param linked: linked filtergraph
    :raises FiltergraphArityError: if a filter's pads are not covered exactly by the
                                   links and boundary pads

    Each pad index of a filter must appear exactly once, either as a link end or as
    a boundary pad, and the pad indices on each side must be dense from 0.
    """

    used = {side: [[] for _ in linked.filters] for side in get_args(PAD_SIDE)}
    for l in linked.links:
        used["output"][l.producer].append(l.producer_pad)
        used["input"][l.consumer].append(l.consumer_pad)
    for b in (*linked.inputs, *linked.outputs):
        used[b.side][b.filter].append(b.pad)

    for f in linked.filters:
        for side, n in (("input", f.nb_inputs), ("output", f.nb_outputs)):
            pads = used[side][f.id]
            if sorted(pads) != list(range(n)):
                raise FiltergraphArityError(f.name, f.id, side, n, len(pads))

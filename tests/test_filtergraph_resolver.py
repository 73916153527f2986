import logging

import pytest

import fgcodegen as fg
from fgcodegen.filtergraph import (
    parse_graph,
    resolve_graph,
    link_graph,
    validate_pads,
    Fixed,
    Link,
    BoundaryPad,
    LinkedGraph,
    FilterInstance,
    FiltergraphLabelError,
    FiltergraphDanglingPadError,
    FiltergraphArityError,
    FiltergraphUnknownFilterError,
)

logging.basicConfig(level=logging.INFO)


def test_single_filter():
    g = link_graph("scale=320:240")
    assert g.filters == (FilterInstance(0, "scale", "Parsed_scale_0", "320:240", 1, 1),)
    assert g.links == ()
    assert g.inputs == (BoundaryPad(0, 0, "input", None),)
    assert g.outputs == (BoundaryPad(0, 0, "output", None),)
    assert g.sws_opts is None


def test_labeled_graph():
    g = link_graph(
        "[in]scale=720:480, split [main][tmp]; [tmp] crop=iw:ih/2:0:0, vflip [flip]; [main][flip] overlay=0:H/2[out]"
    )
    assert [f.name for f in g.filters] == ["scale", "split", "crop", "vflip", "overlay"]
    assert [f.id for f in g.filters] == [0, 1, 2, 3, 4]
    assert g.filters[1].nb_outputs == 2
    assert g.filters[4].nb_inputs == 2
    assert g.links == (
        Link(0, 0, 1, 0),
        Link(1, 1, 2, 0),
        Link(2, 0, 3, 0),
        Link(1, 0, 4, 0),
        Link(3, 0, 4, 1),
    )
    assert g.inputs == (BoundaryPad(0, 0, "input", "in"),)
    assert g.outputs == (BoundaryPad(4, 0, "output", "out"),)


def test_dangling_pads():
    g = link_graph("overlay=0:0")
    assert g.inputs == (
        BoundaryPad(0, 0, "input", None),
        BoundaryPad(0, 1, "input", None),
    )
    assert g.outputs == (BoundaryPad(0, 0, "output", None),)

    with pytest.raises(FiltergraphLabelError) as excinfo:
        link_graph("overlay=0:0", dangling="error")
    e = excinfo.value
    assert isinstance(e, FiltergraphDanglingPadError)
    assert (e.side, e.filter_name, e.filter_id, e.pad) == ("input", "overlay", 0, 1)
    assert e.stage == "resolve"

    # fully closed graph passes
    g = link_graph("testsrc,nullsink", dangling="error")
    assert g.links == (Link(0, 0, 1, 0),)
    assert g.inputs == g.outputs == ()


# fmt: off
@pytest.mark.parametrize(
    "expr, inputs, outputs",
    [
        ("scale=320:240", [(0, 0, None)], [(0, 0, None)]),
        ("[in]scale=320:240[out]", [(0, 0, "in")], [(0, 0, "out")]),
        ("[0:v][1:v]overlay", [(0, 0, "0:v"), (0, 1, "1:v")], [(0, 0, None)]),
        ("[in]scale=720:480, split [main][tmp]; [tmp] crop=iw:ih/2:0:0, vflip [flip]; [main][flip] overlay=0:H/2[out]",
         [(0, 0, "in")], [(4, 0, "out")]),
        ("[v]hflip[out];testsrc[v]", [], [(0, 0, "out")]),
        ("split[a][b]", [(0, 0, None)], [(0, 0, "a"), (0, 1, "b")]),
    ],
)
# fmt: on
def test_dangling_error_allows_graph_edges(expr, inputs, outputs):
    g = link_graph(expr, dangling="error")
    assert [(p.filter, p.pad, p.label) for p in g.inputs] == inputs
    assert [(p.filter, p.pad, p.label) for p in g.outputs] == outputs


# fmt: off
@pytest.mark.parametrize(
    "expr, side, name, id, pad, label",
    [
        ("overlay", "input", "overlay", 0, 1, None),
        ("[0:v]overlay", "input", "overlay", 0, 1, None),
        ("[in]scale=320:240[a],hflip[out]", "input", "hflip", 1, 0, None),
        ("scale,[b]overlay", "input", "overlay", 1, 0, "b"),
        ("[in]split[a],null[out]", "output", "split", 0, 0, "a"),
        ("split=3[a];[a]null", "output", "split", 0, 1, None),
    ],
)
# fmt: on
def test_dangling_error_rejects_interior_pads(expr, side, name, id, pad, label):
    with pytest.raises(FiltergraphDanglingPadError) as excinfo:
        link_graph(expr, dangling="error")
    e = excinfo.value
    assert (e.side, e.filter_name, e.filter_id, e.pad, e.label) == (side, name, id, pad, label)

    # the same graph is accepted when the pads are exposed
    link_graph(expr, dangling="expose")


def test_dangling_pads_rcparams():
    with fg.rc_context({"filtergraph.dangling_pads": "error"}):
        with pytest.raises(FiltergraphDanglingPadError):
            link_graph("overlay")
    assert link_graph("overlay").inputs


def test_forward_label():
    # the consumer appears before its producer
    g = link_graph("[v]hflip[out];testsrc[v]")
    assert g.links == (Link(1, 0, 0, 0),)
    assert g.inputs == ()
    assert g.outputs == (BoundaryPad(0, 0, "output", "out"),)


def test_chain_outputs_to_boundary():
    g = link_graph("[0:v]split[a];[a]null")
    # a labeled output alone does not grow split
    assert g.filters[0].nb_outputs == 1
    assert g.outputs == (BoundaryPad(1, 0, "output", None),)

    g = link_graph("split=3[a];[a]null")
    assert g.filters[0].nb_outputs == 3
    assert g.outputs == (
        BoundaryPad(0, 1, "output", None),
        BoundaryPad(0, 2, "output", None),
        BoundaryPad(1, 0, "output", None),
    )


# fmt: off
@pytest.mark.parametrize(
    "expr, nb_inputs, nb_outputs",
    [
        ("[a][b][c]hstack", 3, 1),
        ("[a]hstack", 1, 1),
        ("hstack", 1, 1),
        ("[a][b]hstack=inputs=3", 3, 1),
        ("[a]vstack=3", 3, 1),
        ("split[a][b][c]", 1, 3),
        ("split=4[a]", 1, 4),
        ("split", 1, 1),
        ("[a][b][c][d]concat=n=2:v=1:a=1[v][w]", 4, 2),
    ],
)
# fmt: on
def test_variadic_pad_counts(expr, nb_inputs, nb_outputs):
    g = link_graph(expr)
    f = g.filters[0]
    assert (f.nb_inputs, f.nb_outputs) == (nb_inputs, nb_outputs)


def test_variadic_chained():
    g = link_graph("split[a],null")
    assert g.filters[0].nb_outputs == 2
    assert g.links == (Link(0, 1, 1, 0),)
    assert g.outputs == (BoundaryPad(0, 0, "output", "a"), BoundaryPad(1, 0, "output", None))


def test_labeled_outputs_break_chain():
    # all outputs claimed by labels: the next filter gets no implicit link
    g = link_graph("[in]scale=320:240[a],hflip[out]")
    assert g.links == ()
    assert g.inputs == (BoundaryPad(0, 0, "input", "in"), BoundaryPad(1, 0, "input", None))
    assert g.outputs == (BoundaryPad(0, 0, "output", "a"), BoundaryPad(1, 0, "output", "out"))

    g = link_graph("scale[a],null")
    assert g.links == ()
    assert g.inputs == (BoundaryPad(0, 0, "input", None), BoundaryPad(1, 0, "input", None))
    assert g.outputs == (BoundaryPad(0, 0, "output", "a"), BoundaryPad(1, 0, "output", None))

    g = link_graph("nullsink,null")
    assert g.links == ()
    assert g.inputs == (BoundaryPad(0, 0, "input", None), BoundaryPad(1, 0, "input", None))
    assert g.outputs == (BoundaryPad(1, 0, "output", None),)

    # the label may still be picked up by a later chain
    g = link_graph("[in]scale[a],hflip[out];[a]vflip")
    assert g.links == (Link(0, 0, 2, 0),)
    assert g.inputs == (BoundaryPad(0, 0, "input", "in"), BoundaryPad(1, 0, "input", None))


# fmt: off
@pytest.mark.parametrize(
    "expr, side, expected, actual",
    [
        ("[0:v][1:v]setpts=PTS-STARTPTS,overlay", "input", 1, 2),
        ("scale[a][b]", "output", 1, 2),
        ("[a][b][c][d]hstack=inputs=3", "input", 3, 4),
        ("split=2[a][b][c]", "output", 2, 3),
    ],
)
# fmt: on
def test_arity_errors(expr, side, expected, actual):
    with pytest.raises(FiltergraphArityError) as excinfo:
        link_graph(expr)
    e = excinfo.value
    assert (e.side, e.expected, e.actual) == (side, expected, actual)
    assert str(e).startswith(f"Too many {side}s specified")


# fmt: off
@pytest.mark.parametrize(
    "expr, label, msg",
    [
        ("split[a][a]", "a", "multiple 'a' output pads"),
        ("[a]null;[a]null", "a", "multiple 'a' input pads"),
        ("[a][a]overlay", "a", "multiple 'a' input pads"),
        ("testsrc[a];[a]null;[a]null", "a", "after it has been linked"),
        ("[a]null;testsrc[a];testsrc[a]", "a", "after it has been linked"),
    ],
)
# fmt: on
def test_label_errors(expr, label, msg):
    with pytest.raises(FiltergraphLabelError, match=msg) as excinfo:
        link_graph(expr)
    assert excinfo.value.label == label


def test_unknown_filter(caplog):
    with pytest.raises(FiltergraphUnknownFilterError) as excinfo:
        link_graph("scale,nosuchfilter")
    assert (excinfo.value.name, excinfo.value.id) == ("nosuchfilter", 1)
    assert excinfo.value.stage == "resolve"

    with caplog.at_level(logging.WARNING):
        g = link_graph("scale,nosuchfilter", unknown="passthrough")
    assert g.filters[1] == FilterInstance(1, "nosuchfilter", "Parsed_nosuchfilter_1", "", 1, 1)
    assert "nosuchfilter" in caplog.text

    with fg.rc_context({"filtergraph.unknown_filters": "passthrough"}):
        assert len(link_graph("nosuchfilter").filters) == 1


def test_catalog_lookup():
    g = resolve_graph(parse_graph("myfilter"), catalog_lookup=lambda name: Fixed(2, 3))
    assert (g.filters[0].nb_inputs, g.filters[0].nb_outputs) == (2, 3)

    with pytest.raises(TypeError):
        resolve_graph(parse_graph("myfilter"), catalog_lookup=lambda name: (1, 1))


def test_invalid_policies():
    with pytest.raises(ValueError):
        link_graph("scale", dangling="ignore")
    with pytest.raises(ValueError):
        link_graph("scale", unknown="ignore")


def test_instance_tag():
    g = link_graph("scale@thumb=160:-1,hflip")
    assert g.filters[0].name == "scale"
    assert g.filters[0].inst_name == "scale@thumb"
    assert g.filters[1].inst_name == "Parsed_hflip_1"


def test_sws_flags():
    g = link_graph("sws_flags=bicubic;scale=320:240,scale,scale=w=1:flags=lanczos,hflip")
    assert g.sws_opts == "flags=bicubic"
    assert [f.args for f in g.filters] == [
        "320:240:flags=bicubic",
        "flags=bicubic",
        "w=1:flags=lanczos",
        "",
    ]

    g = link_graph("sws_flags=bicubic;scale=320:240", auto_sws_flags=False)
    assert g.filters[0].args == "320:240"
    assert g.sws_opts == "flags=bicubic"


# fmt: off
@pytest.mark.parametrize(
    "expr",
    [
        "scale=320:240",
        "[in]scale=720:480, split [main][tmp]; [tmp] crop=iw:ih/2:0:0, vflip [flip]; [main][flip] overlay=0:H/2[out]",
        "[0:v]split=3[a][b][c];[a][b][c]hstack=inputs=3,scale=1280:-1[v];[0:a]volume=2[aout]",
        "[v]hflip[out];testsrc[v]",
        "overlay",
        "[in]scale=320:240[a],hflip[out]",
        "nullsink,null",
    ],
)
# fmt: on
def test_graph_invariants(expr):
    g = link_graph(expr)

    # deterministic
    assert link_graph(expr) == g

    # dense ids in source order
    assert [f.id for f in g.filters] == list(range(len(g.filters)))
    assert [f.name for f in g.filters] == [
        fspec.name for chain in parse_graph(expr).chains for fspec in chain
    ]

    # each pad is either linked or on the boundary, exactly once
    nb_pads = sum(f.nb_inputs + f.nb_outputs for f in g.filters)
    assert nb_pads == 2 * len(g.links) + len(g.inputs) + len(g.outputs)
    validate_pads(g)


def test_validate_pads():
    filters = (
        FilterInstance(0, "testsrc", "Parsed_testsrc_0", "", 0, 1),
        FilterInstance(1, "null", "Parsed_null_1", "", 1, 1),
    )
    g = LinkedGraph(filters, (Link(0, 0, 1, 0),), (), (BoundaryPad(1, 0, "output", None),), None)
    validate_pads(g)

    with pytest.raises(FiltergraphArityError):
        validate_pads(g._replace(outputs=()))

    with pytest.raises(FiltergraphArityError):
        validate_pads(g._replace(links=(Link(0, 0, 1, 0), Link(0, 0, 1, 0))))

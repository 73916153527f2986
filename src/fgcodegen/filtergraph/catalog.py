"""filter pad arity catalog

Each known filter maps to one of four arity descriptors:

================  =======================================================
Descriptor        Pad contract
================  =======================================================
``Fixed``         exactly ``num_inputs`` inputs and ``num_outputs`` outputs
``VariadicIn``    at least ``min_inputs`` inputs, exactly ``num_outputs``
``VariadicOut``   exactly ``num_inputs`` inputs, at least ``min_outputs``
``Variadic``      at least ``min_inputs`` inputs and ``min_outputs`` outputs
================  =======================================================

The variable side of ``VariadicIn`` and ``VariadicOut`` may be pinned by a
filter option (``option``), given either by name (``hstack=inputs=3``) or as
the first positional argument (``split=3``).

The catalog is queried through the ``filter_arity`` plugin hook so plugins can
add or override filters. The builtin table below is registered as the
``fgcodegen.plugins.catalog_builtin`` plugin.
"""

from __future__ import annotations

from collections import namedtuple

from .typing import Union, Callable, Optional


__all__ = ["Fixed", "VariadicIn", "VariadicOut", "Variadic", "Arity", "lookup"]

# fmt:off
Fixed = namedtuple("Fixed", ["num_inputs", "num_outputs"])
VariadicIn = namedtuple("VariadicIn", ["min_inputs", "num_outputs", "option"], defaults=(None,))
VariadicOut = namedtuple("VariadicOut", ["num_inputs", "min_outputs", "option"], defaults=(None,))
Variadic = namedtuple("Variadic", ["min_inputs", "min_outputs"])
# fmt:on

Arity = Union[Fixed, VariadicIn, VariadicOut, Variadic]

ArityLookup = Callable[[str], Optional[Arity]]

_SISO = Fixed(1, 1)
_SOURCE = Fixed(0, 1)
_SINK = Fixed(1, 0)
_MIXER = Fixed(2, 1)

# fmt:off
BUILTIN_FILTERS: dict[str, Arity] = {
    # video: single input, single output
    **{name: _SISO for name in (
        "null", "copy", "fifo", "format", "noformat", "scale", "crop", "pad",
        "vflip", "hflip", "transpose", "rotate", "negate", "edgedetect", "setpts",
        "settb", "trim", "fps", "framerate", "setsar", "setdar", "yadif", "bwdif",
        "fade", "drawtext", "drawbox", "drawgrid", "subtitles", "ass", "boxblur",
        "gblur", "smartblur", "unsharp", "hue", "eq", "curves", "lut", "lutrgb",
        "lutyuv", "lut3d", "colorchannelmixer", "colorkey", "chromakey", "select",
        "showinfo", "palettegen", "tpad", "loop", "reverse", "deband", "deflicker",
        "deshake", "hqdn3d", "nlmeans", "zoompan", "zscale", "setrange", "tinterlace",
        "interlace", "fieldorder", "thumbnail", "tile", "untile", "il",
        "geq", "vignette", "vidstabdetect", "vidstabtransform", "perspective",
        "minterpolate", "mpdecimate", "decimate", "framestep", "setfield",
        "colorspace", "colormatrix", "tonemap", "hwupload", "hwdownload", "sendcmd",
        "realtime", "metadata", "blackdetect", "cropdetect", "scdet", "sidedata",
    )},
    # audio: single input, single output
    **{name: _SISO for name in (
        "anull", "acopy", "afifo", "aformat", "aresample", "asetpts", "asettb",
        "atrim", "afade", "volume", "loudnorm", "dynaudnorm", "atempo", "aecho",
        "highpass", "lowpass", "bandpass", "bandreject", "equalizer", "bass",
        "treble", "acompressor", "alimiter", "agate", "adelay", "apad", "areverse",
        "aloop", "asetrate", "pan", "silenceremove", "silencedetect",
        "volumedetect", "ashowinfo", "aselect", "astats", "ebur128", "asendcmd",
        "arealtime", "ametadata", "apulsator", "chorus", "flanger", "aphaser",
        "rubberband", "earwax", "stereotools", "extrastereo", "crystalizer",
        "asetnsamples", "aeval", "anlmdn", "afftdn", "arnndn", "showwaves",
        "showspectrum", "showfreqs", "showvolume", "showcqt", "avectorscope",
        "ahistogram",
    )},
    # two inputs, single output
    **{name: _MIXER for name in (
        "overlay", "blend", "alphamerge", "maskedmerge", "psnr", "ssim", "vmaf",
        "libvmaf", "xfade", "paletteuse", "acrossfade",
        "sidechaincompress", "sidechaingate", "afir", "amultiply", "lut2",
        "identity", "corr", "premultiply", "unpremultiply",
    )},
    "displace": Fixed(3, 1),
    "maskedclamp": Fixed(3, 1),
    "scale2ref": Fixed(2, 2),
    "alphaextract": _SISO,
    # sources
    **{name: _SOURCE for name in (
        "buffer", "abuffer", "color", "nullsrc", "testsrc", "testsrc2", "smptebars",
        "smptehdbars", "rgbtestsrc", "yuvtestsrc", "allrgb", "allyuv", "mandelbrot",
        "life", "cellauto", "gradients", "anullsrc", "sine", "aevalsrc",
        "anoisesrc", "flite",
    )},
    "movie": VariadicOut(0, 1),
    "amovie": VariadicOut(0, 1),
    # sinks
    **{name: _SINK for name in (
        "buffersink", "abuffersink", "nullsink", "anullsink",
    )},
    # variable number of outputs
    "split": VariadicOut(1, 1, "outputs"),
    "asplit": VariadicOut(1, 1, "outputs"),
    "channelsplit": VariadicOut(1, 1),
    "extractplanes": VariadicOut(1, 1),
    "asegment": VariadicOut(1, 1),
    "segment": VariadicOut(1, 1),
    # variable number of inputs
    "hstack": VariadicIn(1, 1, "inputs"),
    "vstack": VariadicIn(1, 1, "inputs"),
    "xstack": VariadicIn(1, 1, "inputs"),
    "amix": VariadicIn(1, 1, "inputs"),
    "amerge": VariadicIn(1, 1, "inputs"),
    "interleave": VariadicIn(1, 1, "nb_inputs"),
    "ainterleave": VariadicIn(1, 1, "nb_inputs"),
    "mergeplanes": VariadicIn(1, 1),
    "join": VariadicIn(1, 1, "inputs"),
    "mix": VariadicIn(1, 1, "inputs"),
    "headphone": VariadicIn(1, 1),
    # variable on both sides
    "concat": Variadic(1, 1),
    "streamselect": Variadic(1, 1),
    "astreamselect": Variadic(1, 1),
}
# fmt:on


def lookup(name: str) -> Arity | None:
    """look up the pad arity of a filter

    :param name: filter name (without the ``@`` instance tag)
    :return: arity descriptor or None if no registered catalog knows the filter
    """

    from .. import plugins

    return plugins.get_hook().filter_arity(name=name)

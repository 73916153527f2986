"""ffmpeg command-line option group collector

Splits an ffmpeg command line into the global options and the option groups of
the input and output files, the same way ffmpeg's ``split_commandline()`` does,
but without an option table: only a handful of flag options (which take no
value) and global options are recognized by name.
"""

from __future__ import annotations

import re, shlex
from collections import namedtuple
import logging

from .errors import CommandLineError

logger = logging.getLogger(__name__)

__all__ = ["CommandLine", "OptionGroup", "Operation", "split_commandline", "FLAG"]

FLAG = None

GROUP_OUTPUT = 0
GROUP_INPUT = 1

# fmt:off
CommandLine = namedtuple("CommandLine", ["global_options", "inputs", "outputs", "operations"])
OptionGroup = namedtuple("OptionGroup", ["url", "options"])
Operation = namedtuple("Operation", ["op", "args"])
# fmt:on

# options without an argument
_FLAG_OPTIONS = {
    # global
    "y", "n", "nostdin", "stdin", "hide_banner", "nostats", "stats",
    "benchmark", "benchmark_all", "debug_ts", "ignore_unknown", "copy_unknown",
    "dump", "hex", "report", "xerror", "abort_on", "shortest",
    # per-file
    "vn", "an", "sn", "dn", "re", "copyts", "start_at_zero", "copytb",
    "accurate_seek", "noaccurate_seek", "autorotate", "noautorotate",
    "autoscale", "noautoscale", "bitexact", "apad",
}  # fmt:skip

_GLOBAL_OPTIONS = {
    "y", "n", "nostdin", "stdin", "hide_banner", "nostats", "stats", "loglevel",
    "v", "report", "max_alloc", "filter_threads", "filter_complex", "lavfi",
    "filter_complex_script", "filter_complex_threads", "benchmark",
    "benchmark_all", "progress", "stats_period", "debug_ts", "ignore_unknown",
    "copy_unknown", "xerror", "abort_on", "vsync", "fps_mode_global",
    "init_hw_device", "filter_hw_device", "sdp_file", "max_error_rate",
    "dump", "hex", "cpuflags", "cpucount",
}  # fmt:skip

# options whose (optional) argument takes the rest of the command line
_EXIT_OPTIONS = {"h", "?", "help", "-help"}


def _add_opt(options: dict, key: str, val: str | None):
    # repeated options are collected in a list
    if key not in options:
        options[key] = val
    elif isinstance(options[key], list):
        options[key].append(val)
    else:
        options[key] = [options[key], val]


def split_commandline(cmdline: str | list[str]) -> CommandLine:
    """split ffmpeg command line arguments into option groups

    :param cmdline: full or partial ffmpeg command line string or list of arguments
    :return: global options (dict), list of input ``OptionGroup(url, options)``,
             list of output ``OptionGroup(url, options)``, and the list of
             ``Operation(op, args)`` records, in the order they were carried out
    :raises CommandLineError: if an option misses its argument

    Flag options get ``FLAG`` (None) as their values in the option dicts and
    ``"1"`` as their value in the ``add_opt`` operations.

    ==================  ==============  ==========================================
    Operation.op        Operation.args  description
    ==================  ==============  ==========================================
    ``"add_opt"``       (key, value)    option added to the current group
    ``"finish_group"``  (group, url)    group closed (0: output file, 1: input file)
    ==================  ==============  ==========================================

    """

    if isinstance(cmdline, str):
        # remove multi-line command
        cmdline = re.sub(r"\\\n", " ", cmdline)

        # split the command line into its options
        args = shlex.split(cmdline)
    else:  # list of strs
        args = list(cmdline)

    # exclude 'ffmpeg' command if present
    if len(args) and re.search(
        r'(?:^|[/\\])ffmpeg(?:\.exe)?"?$', args[0], re.IGNORECASE
    ):
        args = args[1:]

    logger.debug("Splitting the commandline.")

    gopts = {}
    inputs = []
    outputs = []
    operations = []
    opts = {}  # options of the group being collected

    n = len(args)
    i = 0
    dashdash = None
    while i < n:
        opt = args[i]
        i += 1

        logger.debug("Reading option '%s' ...", opt)

        if opt == "--":
            dashdash = i
            continue

        # unnamed group separator: output url
        if not opt.startswith("-") or len(opt) <= 1 or dashdash == i - 1:
            outputs.append(OptionGroup(opt, opts))
            opts = {}
            operations.append(Operation("finish_group", (GROUP_OUTPUT, opt)))
            logger.debug(" matched as output url.")
            continue

        key = opt[1:]

        # named group separator: input url
        if key == "i":
            if i >= n:
                raise CommandLineError(
                    "Missing argument for option 'i'.", option=key
                )
            url = args[i]
            i += 1
            inputs.append(OptionGroup(url, opts))
            opts = {}
            operations.append(Operation("finish_group", (GROUP_INPUT, url)))
            logger.debug(" matched as input url with argument '%s'.", url)
            continue

        if key in _EXIT_OPTIONS:
            # optional argument takes the rest
            val = " ".join(args[i:])
            i = n
        elif key.split(":", 1)[0] in _FLAG_OPTIONS:
            val = FLAG
        else:
            if i >= n:
                raise CommandLineError(
                    f"Missing argument for option '{key}'.", option=key
                )
            val = args[i]
            i += 1

        is_global = key in _GLOBAL_OPTIONS
        _add_opt(gopts if is_global else opts, key, val)
        operations.append(Operation("add_opt", (key, "1" if val is FLAG else val)))
        logger.debug(
            " matched as %s option '%s' with argument %r.",
            "global" if is_global else "per-file",
            key,
            val,
        )

    if opts:
        logger.warning(
            "Trailing option(s) found in the command: %s. They are ignored.",
            ", ".join(f"-{k}" for k in opts),
        )

    logger.debug("Finished splitting the commandline.")

    return CommandLine(gopts, inputs, outputs, operations)

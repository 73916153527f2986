"""fgcodegen command-line interface

Usage::

    fgcodegen [-o FILE] [options] ffmpeg -i in.mp4 -vf "scale=320:240" out.mp4
    fgcodegen [-o FILE] [options] -- -i in.mp4 -vf "scale=320:240" out.mp4
    fgcodegen [-o FILE] [options] -g "[in]scale=320:240[out]"
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .errors import FgcodegenError
from .rcparams import rc_context, rc_file, set_loglevel
from .compiler import compile_graph, compile_commandline

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fgcodegen",
        description="Compile the filtergraphs of an ffmpeg command line into libavfilter C code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fgcodegen ffmpeg -i in.mp4 -vf "scale=320:240" out.mp4
  fgcodegen -o graph.c --function build_graph -g "[0:v][1:v]overlay[out]"
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--output", "-o", default=None, help="Output C file (default: stdout)")
    parser.add_argument("--graph", "-g", default=None, help="Compile this filtergraph expression")
    parser.add_argument("--rc", default=None, help="rc file with fgcodegen settings")
    parser.add_argument("--function", default=None, metavar="NAME",
                        help="Wrap the code of each filtergraph in a C function")
    parser.add_argument("--dangling", choices=["expose", "error"], default=None,
                        help="Policy for unconnected pads (default: rc setting)")
    parser.add_argument("--unknown", choices=["error", "passthrough"], default=None,
                        help="Policy for filters missing from the catalog (default: rc setting)")
    parser.add_argument("--emit-commandline", action="store_true",
                        help="Also render the option group splitting calls")
    parser.add_argument("--no-narrate", action="store_true", help="Omit the comments")
    parser.add_argument("--verbose", "-v", action="store_true", help="Same as --loglevel info")
    parser.add_argument("--loglevel", default=None,
                        choices=["debug", "info", "warning", "error", "critical"],
                        help="Log level of the diagnostic messages")
    parser.add_argument("cmdline", nargs=argparse.REMAINDER,
                        help="ffmpeg command line (starting with 'ffmpeg' or after '--')")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cmdline = args.cmdline
    if cmdline and cmdline[0] == "--":
        cmdline = cmdline[1:]
    if args.graph is None and not cmdline:
        parser.error("either a command line or --graph is required")

    if args.loglevel:
        set_loglevel(args.loglevel)
    elif args.verbose:
        set_loglevel("info")

    rc = {}
    if args.function is not None:
        rc["codegen.function_name"] = args.function
    if args.dangling:
        rc["filtergraph.dangling_pads"] = args.dangling
    if args.unknown:
        rc["filtergraph.unknown_filters"] = args.unknown
    if args.emit_commandline:
        rc["codegen.emit_commandline"] = True
    if args.no_narrate:
        rc["codegen.narrate"] = False

    try:
        with rc_context():
            if args.rc:
                rc_file(args.rc, use_default_template=False)
            with rc_context(rc):
                if args.graph is not None:
                    code = compile_graph(args.graph)
                else:
                    code = compile_commandline(cmdline)
    except FgcodegenError as e:
        print(f"error ({e.stage}): {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        # rc file or setting problems
        print(f"error (config): {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(code)
        logger.info("wrote %s", args.output)
    else:
        sys.stdout.write(code)

    return 0


if __name__ == "__main__":
    sys.exit(main())

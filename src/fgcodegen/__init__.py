"""FFmpeg filtergraph to libavfilter C code compiler

Compile a filtergraph expression
--------------------------------
:py:func:`fgcodegen.compile_graph()`

Compile the filtergraphs of an ffmpeg command line
--------------------------------------------------
:py:func:`fgcodegen.compile_commandline()`

Pipeline stages
---------------

`fgcodegen.cmdline.split_commandline()`
`fgcodegen.filtergraph.parse_graph()`
`fgcodegen.filtergraph.resolve_graph()`
`fgcodegen.codegen.render_graph()`
"""

import logging

logger = logging.getLogger("fgcodegen")
logger.addHandler(logging.NullHandler())

from . import plugins

# register builtin plugins and external plugins found in site-packages
plugins.initialize()

from .errors import FgcodegenError, CommandLineError, CodegenError
from .rcparams import rcParams, rc_context, rcdefaults, set_loglevel
from . import filtergraph, cmdline, codegen
from .cmdline import split_commandline, FLAG
from .codegen import render_graph, render_commandline
from .compiler import compile_graph, compile_commandline

# fmt:off
__all__ = ["compile_graph", "compile_commandline", "split_commandline", "render_graph",
    "render_commandline", "filtergraph", "cmdline", "codegen", "plugins", "rcParams",
    "rc_context", "rcdefaults", "set_loglevel", "FgcodegenError", "CommandLineError",
    "CodegenError", "FLAG"]
# fmt:on

__version__ = "0.1.0"

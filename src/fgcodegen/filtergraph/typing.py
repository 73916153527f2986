from __future__ import annotations

from typing import *
from typing_extensions import *


PAD_SIDE = Literal["input", "output"]

DANGLING_POLICY = Literal["expose", "error"]
"""How unconnected pads are handled by the link resolver

- ``"expose"`` - unconnected pads become the boundary pads of the graph
- ``"error"`` - only the entry and exit pads of the graph may stay unconnected,
  any other unconnected pad raises FiltergraphDanglingPadError

Under ``"error"``, the entry pads are the labeled inputs of the first filter of a
chain, or its first input if it has no input label (``[in]scale``, ``scale``,
``[0:v][1:v]overlay``). The exit pads are the labeled outputs of the last filter
of a chain, or its first output if it has no output label. Rejected are:

- the missing feeds of a filter with several inputs (``overlay``, ``[0:v]overlay``)
- a filter in the middle of a chain left without input (``scale[a],hflip``)
- labels on pads inside a chain which are never matched (the ``[a]`` of
  ``scale[a],hflip``, the ``[b]`` of ``scale,[b]overlay``)
- the extra unlabeled outputs at the end of a chain (``split=3[a];[a]null``)
"""

UNKNOWN_FILTER_POLICY = Literal["error", "passthrough"]
"""How filter names missing from the catalog are handled by the link resolver

- ``"error"`` - raise FiltergraphUnknownFilterError
- ``"passthrough"`` - assume a single-input single-output filter and log a warning
"""

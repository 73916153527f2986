from __future__ import annotations as _annotations

from ..errors import FgcodegenError


class FiltergraphError(FgcodegenError): ...


class FiltergraphSyntaxError(FiltergraphError, ValueError):
    stage = "parse"

    def __init__(self, msg: str, expr: str, pos: int) -> None:
        excerpt = expr[pos : pos + 32]
        super().__init__(f'{msg} (at position {pos}: "{excerpt}")')
        self.expr = expr
        self.pos = pos
        self.excerpt = excerpt


class FiltergraphLabelError(FiltergraphError, ValueError):
    stage = "resolve"

    def __init__(self, msg: str, label: str | None = None) -> None:
        super().__init__(msg)
        self.label = label


class FiltergraphDanglingPadError(FiltergraphLabelError):
    def __init__(
        self, side: str, filter_name: str, filter_id: int, pad: int, label: str | None
    ) -> None:
        target = f"pad {pad} of filter {filter_name}#{filter_id}"
        super().__init__(
            (
                f"unconnected {side} {target} (label '{label}')"
                if label is not None
                else f"unconnected {side} {target}"
            ),
            label,
        )
        self.side = side
        self.filter_name = filter_name
        self.filter_id = filter_id
        self.pad = pad


class FiltergraphArityError(FiltergraphError, ValueError):
    stage = "resolve"

    def __init__(
        self, name: str, id: int, side: str, expected: int, actual: int
    ) -> None:
        super().__init__(
            f'Too many {side}s specified for the "{name}" filter (#{id}): '
            f"expected {expected} but got {actual}."
            if actual > expected
            else f'Too few {side}s specified for the "{name}" filter (#{id}): '
            f"expected {expected} but got {actual}."
        )
        self.name = name
        self.id = id
        self.side = side
        self.expected = expected
        self.actual = actual


class FiltergraphUnknownFilterError(FiltergraphError, LookupError):
    stage = "resolve"

    def __init__(self, name: str, id: int) -> None:
        super().__init__(f"No such filter: '{name}' (filter #{id})")
        self.name = name
        self.id = id

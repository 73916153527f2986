"""
The rcsetup module contains the validation code for customization using
fgcodegen's rc settings.

Each rc setting is assigned a function used to validate any attempted changes
to that setting.  The validation functions are defined in the rcsetup module,
and are used to construct the rcParams global object which stores the settings
and is referenced throughout fgcodegen.

The default values of the rc settings are listed in ``_defaults`` below. Any
additions or deletions to the parameter set listed here should also be
propagated to ``_validators``.
"""

from collections.abc import Iterable
from functools import lru_cache
import re


class _ignorecase(list):
    """A marker class indicating that a list-of-str is case-insensitive."""


def _convert_validator_spec(key, conv):
    if isinstance(conv, list):
        ignorecase = isinstance(conv, _ignorecase)
        return ValidateInStrings(key, conv, ignorecase=ignorecase)
    else:
        return conv


class ValidateInStrings:
    def __init__(self, key, valid, ignorecase=False):
        """*valid* is a list of legal strings."""
        self.key = key
        self.ignorecase = ignorecase

        def func(s):
            if ignorecase:
                return s.lower()
            else:
                return s

        self.valid = {func(k): k for k in valid}

    def __call__(self, s):
        if self.ignorecase and isinstance(s, str):
            s = s.lower()
        if s in self.valid:
            return self.valid[s]
        msg = (
            f"{s!r} is not a valid value for {self.key}; supported values "
            f"are {[*self.valid.values()]}"
        )
        if (
            isinstance(s, str)
            and (
                s.startswith('"')
                and s.endswith('"')
                or s.startswith("'")
                and s.endswith("'")
            )
            and s[1:-1] in self.valid
        ):
            msg += "; remove quotes surrounding your string"
        raise ValueError(msg)


@lru_cache
def _listify_validator(scalar_validator, *, n=None, doc=None):
    def f(s):
        if isinstance(s, str):
            val = [scalar_validator(v.strip()) for v in s.split(",") if v.strip()]
        # Allow any ordered sequence type but not sets, whose iteration order
        # is non-deterministic.
        elif isinstance(s, Iterable) and not isinstance(s, (set, frozenset)):
            val = [scalar_validator(v) for v in s if not isinstance(v, str) or v]
        else:
            raise ValueError(f"Expected str or other non-set iterable, but got {s}")
        if n is not None and len(val) != n:
            raise ValueError(
                f"Expected {n} values, but there are {len(val)} values in {s}"
            )
        return val

    try:
        f.__name__ = f"{scalar_validator.__name__}list"
    except AttributeError:  # class instance.
        f.__name__ = f"{type(scalar_validator).__name__}List"
    f.__qualname__ = f.__qualname__.rsplit(".", 1)[0] + "." + f.__name__
    f.__doc__ = doc if doc is not None else scalar_validator.__doc__
    return f


def validate_bool(b):
    """Convert b to ``bool`` or raise."""
    if isinstance(b, str):
        b = b.lower()
    if b in ("t", "y", "yes", "on", "true", "1", 1, True):
        return True
    elif b in ("f", "n", "no", "off", "false", "0", 0, False):
        return False
    else:
        raise ValueError(f"Cannot convert {b!r} to bool")


def _make_type_validator(cls, *, allow_none=False):
    """
    Return a validator that converts inputs to *cls* or raises (and possibly
    allows ``None`` as well).
    """

    def validator(s):
        if allow_none and (s is None or isinstance(s, str) and s.lower() == "none"):
            return None
        if cls is str and not isinstance(s, str):
            raise ValueError(f"Could not convert {s!r} to str")
        try:
            return cls(s)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Could not convert {s!r} to {cls.__name__}") from e

    validator.__name__ = f"validate_{cls.__name__}"
    if allow_none:
        validator.__name__ += "_or_None"
    validator.__qualname__ = (
        validator.__qualname__.rsplit(".", 1)[0] + "." + validator.__name__
    )
    return validator


validate_string = _make_type_validator(str)
validate_string_or_None = _make_type_validator(str, allow_none=True)
validate_stringlist = _listify_validator(
    validate_string, doc="return a list of strings"
)


def _validate_c_identifier(s):
    s = validate_string(s)
    if not re.match(r"[A-Za-z_][A-Za-z0-9_]*$", s):
        raise ValueError(f"{s!r} is not a valid C identifier")
    return s


def _validate_c_identifier_or_empty(s):
    s = validate_string_or_None(s)
    return "" if not s else _validate_c_identifier(s)


# Mapping of rcParams to validators.
# Converters given as lists or _ignorecase are converted to ValidateInStrings
# immediately below.
_validators = {
    "filtergraph.dangling_pads": _ignorecase(["expose", "error"]),
    "filtergraph.unknown_filters": _ignorecase(["error", "passthrough"]),
    "filtergraph.auto_sws_flags": validate_bool,
    "codegen.graph_var": _validate_c_identifier,
    "codegen.log_ctx_var": _validate_c_identifier,
    "codegen.function_name": _validate_c_identifier_or_empty,
    "codegen.narrate": validate_bool,
    "codegen.emit_commandline": validate_bool,
    "commandline.filter_options": validate_stringlist,
    "commandline.complex_options": validate_stringlist,
}
_validators = {k: _convert_validator_spec(k, conv) for k, conv in _validators.items()}

_defaults = {
    "filtergraph.dangling_pads": "expose",
    "filtergraph.unknown_filters": "error",
    "filtergraph.auto_sws_flags": True,
    "codegen.graph_var": "ctx",
    "codegen.log_ctx_var": "log_ctx",
    "codegen.function_name": "",
    "codegen.narrate": True,
    "codegen.emit_commandline": False,
    "commandline.filter_options": ["vf", "filter:v", "af", "filter:a"],
    "commandline.complex_options": ["filter_complex", "lavfi"],
}

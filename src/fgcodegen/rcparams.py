"""rc settings of fgcodegen (adapted from Matplotlib's rcParams)

The settings are read from the file named by the ``FGCODEGENRC`` environment
variable, if set, on top of the defaults in :py:mod:`fgcodegen.rcsetup`. Each
line of an rc file holds a ``key: value`` pair and ``#`` starts a comment::

    filtergraph.dangling_pads: error
    codegen.graph_var: graph   # name of the AVFilterGraph pointer
"""

__all__ = [
    "set_loglevel",
    "RcParams",
    "rc_params_from_file",
    "rcParamsDefault",
    "rcParams",
    "rcdefaults",
    "rc_file",
    "rc_context",
]


from collections.abc import MutableMapping
import contextlib
import functools
import logging
import os

from . import rcsetup


_log = logging.getLogger(__name__)


# The decorator ensures this always returns the same handler (and it is only
# attached once).
@functools.lru_cache(None)
def _ensure_handler():
    """
    The first time this function is called, attach a `StreamHandler` using the
    same format as `logging.basicConfig` to the fgcodegen root logger.

    Return this handler every time this function is called.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    logging.getLogger("fgcodegen").addHandler(handler)
    return handler


def set_loglevel(level):
    """
    Configure fgcodegen's logging levels.

    fgcodegen uses the standard library `logging` framework under the root
    logger 'fgcodegen'.  This is a helper function to:

    - set fgcodegen's root logger level
    - set the root logger handler's level, creating the handler
      if it does not exist yet

    Typically, one should call ``set_loglevel("info")`` or
    ``set_loglevel("debug")`` to get additional information on how the
    filtergraph is linked.

    Parameters
    ----------
    level : {"notset", "debug", "info", "warning", "error", "critical"}
        The log level of the handler.
    """
    logging.getLogger("fgcodegen").setLevel(level.upper())
    _ensure_handler().setLevel(level.upper())


class RcParams(MutableMapping, dict):
    """
    A dict-like key-value store for config parameters, including validation.

    Validating functions are defined and associated with rc parameters in
    :mod:`fgcodegen.rcsetup`.
    """

    validate = rcsetup._validators

    # validate values on the way in
    def __init__(self, *args, **kwargs):
        self.update(*args, **kwargs)

    def _set(self, key, val):
        # bypasses validation
        dict.__setitem__(self, key, val)

    def _get(self, key):
        return dict.__getitem__(self, key)

    def __setitem__(self, key, val):
        try:
            try:
                cval = self.validate[key](val)
            except ValueError as ve:
                raise ValueError(f"Key {key}: {ve}") from None
            self._set(key, cval)
        except KeyError as err:
            raise KeyError(
                f"{key} is not a valid rc parameter (see rcParams.keys() for "
                f"a list of valid parameters)"
            ) from err

    def __getitem__(self, key):
        return self._get(key)

    def __str__(self):
        return "\n".join(map("{0[0]}: {0[1]}".format, sorted(self.items())))

    def __iter__(self):
        """Yield sorted list of keys."""
        yield from sorted(dict.__iter__(self))

    def __len__(self):
        return dict.__len__(self)

    def copy(self):
        """Copy this RcParams instance."""
        rccopy = RcParams()
        for k in self:  # Skip revalidation.
            rccopy._set(k, self._get(k))
        return rccopy


def _strip_comment(s):
    """Strip everything from the first unquoted #."""
    pos = 0
    while True:
        quote_pos = s.find('"', pos)
        hash_pos = s.find("#", pos)
        if quote_pos < 0:
            without_comment = s if hash_pos < 0 else s[:hash_pos]
            return without_comment.strip()
        elif 0 <= hash_pos < quote_pos:
            return s[:hash_pos].strip()
        else:
            closing_quote_pos = s.find('"', quote_pos + 1)
            if closing_quote_pos < 0:
                raise ValueError(
                    f"Missing closing quote in: {s!r}. If you need a double-"
                    'quote inside a string, use escaping: e.g. "the " char"'
                )
            pos = closing_quote_pos + 1  # behind closing quote


def _rc_params_in_file(fname, fail_on_error=False):
    """
    Construct a `RcParams` instance from file *fname*.

    Unlike `rc_params_from_file`, the configuration class only contains the
    parameters specified in the file (i.e. default values are not filled in).

    Parameters
    ----------
    fname : path-like
        The loaded file.
    fail_on_error : bool, default: False
        Whether invalid entries should result in an exception or a warning.
    """

    rc_temp = {}
    with open(fname, encoding="utf-8") as fd:
        try:
            for line_no, line in enumerate(fd, 1):
                strippedline = _strip_comment(line)
                if not strippedline:
                    continue
                tup = strippedline.split(":", 1)
                if len(tup) != 2:
                    _log.warning(
                        "Missing colon in file %r, line %d (%r)",
                        fname,
                        line_no,
                        line.rstrip("\n"),
                    )
                    continue
                key, val = tup
                key = key.strip()
                val = val.strip()
                if val.startswith('"') and val.endswith('"'):
                    val = val[1:-1]  # strip double quotes
                if key in rc_temp:
                    _log.warning(
                        "Duplicate key in file %r, line %d (%r)",
                        fname,
                        line_no,
                        line.rstrip("\n"),
                    )
                rc_temp[key] = (val, line, line_no)
        except UnicodeDecodeError:
            _log.warning("Cannot decode configuration file %r as utf-8.", fname)
            raise

    config = RcParams()

    for key, (val, line, line_no) in rc_temp.items():
        if key in rcsetup._validators:
            if fail_on_error:
                config[key] = val  # try to convert to proper type or raise
            else:
                try:
                    config[key] = val  # try to convert to proper type or skip
                except ValueError as msg:
                    _log.warning(
                        "Bad value in file %r, line %d (%r): %s",
                        fname,
                        line_no,
                        line.rstrip("\n"),
                        msg,
                    )
        elif fail_on_error:
            raise KeyError(f"{key} is not a valid rc parameter ({fname}, line {line_no})")
        else:
            _log.warning(
                "Bad key %s in file %s, line %d (%r)",
                key,
                fname,
                line_no,
                line.rstrip("\n"),
            )
    return config


def rc_params_from_file(fname, fail_on_error=False, use_default_template=True):
    """
    Construct a `RcParams` from file *fname*.

    Parameters
    ----------
    fname : str or path-like
        A file with fgcodegen rc settings.
    fail_on_error : bool
        If True, raise an error when the parser fails to convert a parameter.
    use_default_template : bool
        If True, initialize with default parameters before updating with those
        in the given file. If False, the configuration class only contains the
        parameters specified in the file. (Useful for updating dicts.)
    """
    config_from_file = _rc_params_in_file(fname, fail_on_error=fail_on_error)

    if not use_default_template:
        return config_from_file

    config = RcParams({**rcParamsDefault, **config_from_file})

    _log.debug("loaded rc file %s", fname)

    return config


def _user_rc_file():
    fname = os.environ.get("FGCODEGENRC")
    if fname and os.path.isfile(fname):
        return fname
    if fname:
        _log.warning("FGCODEGENRC=%r is not a file; ignored.", fname)
    return None


rcParamsDefault = RcParams(rcsetup._defaults)
rcParams = RcParams()  # The global instance.
dict.update(rcParams, dict.items(rcParamsDefault))
if _user_rc_file():
    dict.update(rcParams, _rc_params_in_file(_user_rc_file()))


def rcdefaults():
    """Restore the `.rcParams` from fgcodegen's internal defaults."""
    rcParams.clear()
    rcParams.update(rcParamsDefault)


def rc_file(fname, *, use_default_template=True):
    """
    Update `.rcParams` from file.

    Parameters
    ----------
    fname : str or path-like
        A file with fgcodegen rc settings.

    use_default_template : bool
        If True, initialize with default parameters before updating with those
        in the given file. If False, the current configuration persists
        and only the parameters specified in the file are updated.
    """
    rc_from_file = rc_params_from_file(
        fname, use_default_template=use_default_template
    )
    rcParams.update({k: rc_from_file[k] for k in rc_from_file})


@contextlib.contextmanager
def rc_context(rc=None, fname=None):
    """
    Return a context manager for temporarily changing rcParams.

    rcParams changed both through the context manager invocation and
    in the body of the context will be reset on context exit.

    Parameters
    ----------
    rc : dict
        The rcParams to temporarily set.
    fname : str or path-like
        A file with fgcodegen rc settings. If both *fname* and *rc* are given,
        settings from *rc* take precedence.

    Examples
    --------
    Passing explicit values via a dict::

        with rc_context({'filtergraph.dangling_pads': 'error'}):
            code = compile_graph('[in]scale=320:240[out]')

    """
    orig = dict(rcParams.copy())
    try:
        if fname:
            rc_file(fname)
        if rc:
            rcParams.update(rc)
        yield
    finally:
        dict.update(rcParams, orig)  # Revert to the original rcs.

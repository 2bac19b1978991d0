"""
The "no value" sentinel returned by void-returning targets.

This module defines a process-wide singleton `void` and its type `voidtype`.
`Binding.invoke` returns `void` when the bound method declares `-> None`, and
when a fault was printed instead of raised (shell mode), so callers can tell
“the call produced nothing” apart from “the call returned None”.

Semantics
- Falsy: bool(void) is False.
- Stable string form: repr(void) == "void" (and rich renders it dimmed).
- Identity: voidtype() always returns the same instance per interpreter, and
  copy/deepcopy/pickle round-trips preserve it.

Example
    result = binding.invoke("Luke 100")
    if result is void:
        ...
"""
import functools

from rich.text import Text


class voidtype:
    """
    Singleton type representing the absence of a result.

    Notes
    - This type is final; subclassing is blocked to preserve semantics.
    - Calling voidtype() repeatedly yields the same object.
    """

    @functools.cache
    def __new__(cls):
        """
        Return the unique instance of voidtype (per process).

        functools.cache on __new__ memoizes the first instance; pickle and copy
        both rebuild through __new__, which keeps identity stable.
        """
        return super().__new__(cls)

    def __reduce__(self):
        return type(self), ()

    def __bool__(self):
        return False

    def __rich__(self):
        """
        Rich protocol hook: render a dim 'void' token.
        """
        return Text(repr(self), style="dim")

    def __repr__(self):
        return "void"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'voidtype' is not an acceptable base type")


void = voidtype()


__all__ = (
    "voidtype",
    "void",
)

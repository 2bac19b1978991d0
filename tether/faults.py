"""
Tether faults (errors raised while binding and invoking) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by the phase that raises them so logs and searches stay predictable.
- BindingException: base type that carries message + options and knows how to
  render itself (rich) in a friendly, lowercased, and actionable way.
- The concrete faults of the bind → invoke pipeline:
  • bind time: UnresolvedParserError, UnknownMethodError, AmbiguousMethodError
  • invoke time: ParseFailureError and its specializations
    (ArgumentExhaustedError, UnknownParameterError, DuplicateArgumentError,
    UnparsedTokensError), and InvocationTargetError for failures of the target.
- trigger(): central entry point to surface a fault (raise, or print in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Host configuration (read from __main__, all optional)
- __prog__: program name shown in rendered headers (default "tether").
- __styles__: mapping of style-name → rich style overriding the defaults.
- __codes__: mapping of FaultCode → label overriding the numeric code.
- __docs__: mapping of FaultCode → short documentation string (see getdoc()).

Integration
- Binder and Binding raise these faults with keyword options describing the
  context (token, parameter, candidates, ...). Hosts catch them by class, or
  ask a Binding to run in shell mode where they are rendered via rich instead.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - bind time (21xxx)
      • UNRESOLVED_PARSER, UNKNOWN_METHOD, AMBIGUOUS_METHOD
    - invoke time, argument parsing (22xxx)
      • PARSE_FAILURE, ARGUMENT_EXHAUSTED, UNKNOWN_PARAMETER,
        DUPLICATE_ARGUMENT, UNPARSED_TOKENS
    - invoke time, target (23xxx)
      • INVOCATION_TARGET

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- bind-time errors (21xxx) ---
    UNRESOLVED_PARSER   = 21101
    UNKNOWN_METHOD      = 21102
    AMBIGUOUS_METHOD    = 21111

    # --- argument parsing errors (22xxx) ---
    PARSE_FAILURE       = 22101
    ARGUMENT_EXHAUSTED  = 22102
    UNKNOWN_PARAMETER   = 22111
    DUPLICATE_ARGUMENT  = 22112
    UNPARSED_TOKENS     = 22121

    # --- target errors (23xxx) ---
    INVOCATION_TARGET   = 23101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class BindingException(Exception):
    """
    base class of every tether fault.

    a fault is built from a message and free-form keyword options; the class
    contributes default options (code, title) through __options__, and the
    raising site adds context such as 'token', 'parameter', or 'hint'.

    rendering options (all optional)
    - colorful: bool, styles on/off (default True)
    - fancy: bool, render inside a rich panel (default False)
    - shell: bool, print instead of raising when triggered (default False)
    """
    __options__ = {"code": FaultCode.PARSE_FAILURE, "title": "binding fault"}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, type(self).__options__["title"])
        self.options = MappingProxyType(type(self).__options__ | options)
        super().__init__(self.message)

    @property
    def code(self):
        return self.options["code"]

    @property
    def hint(self):
        return self.options.get("hint")

    def excerpt(self):
        """
        return the offending input with a caret line under the faulty token.

        the fault needs a 'token' option carrying source/start/end (a readers.Token);
        otherwise None is returned.
        """
        token = self.options.get("token")
        source = getattr(token, "source", None)
        if source is None:
            return None
        # Newlines would break the caret alignment.
        source = source.replace("\n", " ")
        width = max(1, token.end - token.start)
        return "%s\n%s%s" % (source, " " * token.start, "^" * width)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "excerpt": "#E6E6F0",
            "caret": "bold #FF4DA6",
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", "tether"), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        body = [text(self.message, "error-message")]

        if excerpt := self.excerpt():
            line, caret = excerpt.split("\n")
            body.append(text(line, "excerpt"))
            body.append(text(caret, "caret"))

        if self.hint:
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class UnresolvedParserError(BindingException, LookupError):
    """no candidate method has a parser for every declared parameter type."""
    __options__ = {"code": FaultCode.UNRESOLVED_PARSER, "title": "unresolved parser"}


class UnknownMethodError(UnresolvedParserError):
    """the target exposes nothing under the requested name."""
    __options__ = {"code": FaultCode.UNKNOWN_METHOD, "title": "unknown method"}


class AmbiguousMethodError(BindingException, LookupError):
    """more than one candidate survived resolution and the tie-break."""
    __options__ = {"code": FaultCode.AMBIGUOUS_METHOD, "title": "ambiguous method"}


class ParseFailureError(BindingException, ValueError):
    """a parser could not convert the available token(s) to its type."""
    __options__ = {"code": FaultCode.PARSE_FAILURE, "title": "parse failure"}


class ArgumentExhaustedError(ParseFailureError):
    """the reader ran out of tokens while a value was still required."""
    __options__ = {"code": FaultCode.ARGUMENT_EXHAUSTED, "title": "missing argument"}


class UnknownParameterError(ParseFailureError):
    __options__ = {"code": FaultCode.UNKNOWN_PARAMETER, "title": "unknown parameter"}


class DuplicateArgumentError(ParseFailureError):
    __options__ = {"code": FaultCode.DUPLICATE_ARGUMENT, "title": "duplicate argument"}


class UnparsedTokensError(ParseFailureError):
    __options__ = {"code": FaultCode.UNPARSED_TOKENS, "title": "unparsed input"}


class InvocationTargetError(BindingException):
    """
    the target method raised while being called.

    the original exception is chained as __cause__ and exposed as .exception,
    so it is never confused with an argument-parsing failure.
    """
    __options__ = {"code": FaultCode.INVOCATION_TARGET, "title": "invocation failed"}

    @property
    def exception(self):
        return self.options.get("exception")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see BindingException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "BindingException",
    "UnresolvedParserError",
    "UnknownMethodError",
    "AmbiguousMethodError",
    "ParseFailureError",
    "ArgumentExhaustedError",
    "UnknownParameterError",
    "DuplicateArgumentError",
    "UnparsedTokensError",
    "InvocationTargetError",
    "FaultCode",
    "trigger",
    "getdoc",
)

"""
Tether parser registries: map declared parameter types to parsers.

What this module provides
- ParserRegistry: an explicit type → parser table with deterministic fallback
  resolution. It is mutable while the host sets it up and read-only afterwards
  (freeze() makes that phase explicit).
- SimpleParserRegistry: a ParserRegistry seeded with the built-in parsers
  (str, int, float, bool, Remainder).

Resolution order (ParserRegistry.__rules__, evaluated in order, first hit wins)
1. exact: the requested type itself is registered.
2. hierarchy:
   • classes match every registered class they are a (virtual) subclass of;
     the most specific match wins (a key specialized by another matching key
     is dropped), remaining ties go to real bases in MRO order, then to
     abstract bases in registration order;
   • typing.NewType aliases resolve through their __supertype__.
3. equivalence: the Python analogue of primitive/boxed equivalence.
   • Optional[T] / T | None resolves like T;
   • Annotated[T, ...] resolves like T.
No hit returns None; turning that into a failure is the binder's job.

Registration
- register(type, parser) overwrites any previous parser for that exact type.
- parser may be a Parser (has parse(reader)) or a plain converter callable
  (int, float, a function str → T), which is wrapped in a TokenParser.

Example
    >>> registry = ParserRegistry().register(int, int)
    >>> registry.resolve(bool)   # bool → int through the MRO
    TokenParser(int)
"""
import builtins
import logging
import types
import typing

from .parsers import BUILTINS, Parser, TokenParser
from .utils import mirror

logger = logging.getLogger(__name__)


def _resolve_exact(registry, type, /):
    try:
        return registry._parsers.get(type)
    except TypeError:
        # Unhashable annotation (e.g. a Literal holding a list).
        return None


def _subclass(type, key, /):
    try:
        return issubclass(type, key)
    except TypeError:
        # Protocols that are not runtime_checkable refuse subclass checks.
        return False


def _resolve_hierarchy(registry, type, /):
    if isinstance(type, typing.NewType):
        return registry.resolve(type.__supertype__)

    if not isinstance(type, builtins.type):
        return None

    matches = [
        (key, parser) for key, parser in registry._parsers.items()
        if isinstance(key, builtins.type) and key is not type and _subclass(type, key)
    ]
    # Drop every key that another matching key specializes.
    specific = [
        (key, parser) for key, parser in matches
        if not any(other is not key and _subclass(other, key) for other, _ in matches)
    ]
    if not specific:
        return None

    # Real bases in MRO order, then virtual bases in registration order.
    mro = type.__mro__
    key, parser = min(specific, key=lambda match: mro.index(match[0]) if match[0] in mro else len(mro))
    return parser


def _resolve_equivalence(registry, type, /):
    origin = typing.get_origin(type)

    if origin is typing.Annotated:
        return registry.resolve(typing.get_args(type)[0])

    if origin is typing.Union or origin is types.UnionType:
        arguments = [argument for argument in typing.get_args(type) if argument is not types.NoneType]
        # Only Optional[T]; a real union of several types stays unresolved.
        if len(arguments) == 1:
            return registry.resolve(arguments[0])

    return None


class ParserRegistry:
    """
    Mapping from type identity to parser, with ordered fallback resolution.

    Keys are unique per exact type; lookups are deterministic. Registries are
    populated during setup and then shared read-only between bindings, so
    concurrent resolve() calls need no locking once setup is over.
    """

    __rules__ = (
        _resolve_exact,
        _resolve_hierarchy,
        _resolve_equivalence,
    )

    parsers = mirror("parsers")

    def __init__(self, parsers=(), /):
        self._parsers = {}
        self._frozen = False
        for type, parser in dict(parsers).items():
            self.register(type, parser)

    @property
    def frozen(self):
        return self._frozen

    def register(self, type, parser, /):
        """
        Associate parser with the exact type (last write wins).

        Returns
        - the registry itself, so registrations can be chained.

        Raises
        - TypeError: when the registry is frozen or parser is neither a Parser
          nor a callable converter.
        """
        if self._frozen:
            raise TypeError("cannot register parsers on a frozen registry")
        if not isinstance(parser, Parser):
            if not callable(parser):
                raise TypeError("register() second argument must be a parser or a callable")
            parser = TokenParser(parser)

        if type in self._parsers:
            logger.debug("register(): replacing parser for %r (%r → %r)", type, self._parsers[type], parser)
        else:
            logger.debug("register(): %r → %r", type, parser)
        self._parsers[type] = parser
        return self

    def unregister(self, type, /):
        """
        Remove the parser registered for the exact type.

        Raises
        - TypeError: when the registry is frozen.
        - LookupError: when nothing is registered for that exact type.
        """
        if self._frozen:
            raise TypeError("cannot unregister parsers from a frozen registry")
        try:
            del self._parsers[type]
        except KeyError:
            raise LookupError("no parser registered for %r" % (type,)) from None
        return self

    def resolve(self, type, /):
        """
        Return the parser for type, or None when no rule matches.
        """
        for rule in self.__rules__:
            if (parser := rule(self, type)) is not None:
                return parser
        logger.debug("resolve(): no parser for %r", type)
        return None

    def supported_types(self):
        return frozenset(self._parsers)

    def freeze(self):
        """
        End the setup phase: later register()/unregister() calls raise TypeError.
        """
        self._frozen = True
        return self

    def copy(self):
        """
        Return an unfrozen registry holding the same associations.
        """
        registry = ParserRegistry.__new__(type(self))
        registry._parsers = dict(self._parsers)
        registry._frozen = False
        return registry

    def __contains__(self, type):
        return _resolve_exact(self, type) is not None

    def __iter__(self):
        return iter(tuple(self._parsers))

    def __len__(self):
        return len(self._parsers)

    def __eq__(self, other):
        if not isinstance(other, ParserRegistry):
            return NotImplemented
        return self._parsers == other._parsers

    __hash__ = None

    def __repr__(self):
        return "%s(%s)" % (
            type(self).__name__,
            ", ".join(getattr(key, "__name__", repr(key)) for key in self._parsers),
        )

    def __rich_repr__(self):
        for key, parser in self._parsers.items():
            yield getattr(key, "__name__", repr(key)), parser
        yield "frozen", self._frozen, False


class SimpleParserRegistry(ParserRegistry):
    """
    ParserRegistry seeded with the built-in parsers.

    Extra associations passed to the constructor are registered after the
    built-ins, so they can override them.
    """

    def __init__(self, parsers=(), /):
        super().__init__(BUILTINS)
        for type, parser in dict(parsers).items():
            self.register(type, parser)


__all__ = (
    "ParserRegistry",
    "SimpleParserRegistry",
)

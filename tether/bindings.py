"""
Tether bindings: the executable pairing of a target method with its parsers.

What this module provides
- Binding: built once by tether.bind(...), then invoked any number of times
  with a fresh reader per call. It owns nothing mutable: the target is shared,
  the method reference, signature and resolved parsers are fixed at construction.

Invocation (Binding.invoke)
- Start → ParsingParameter(0) → … → ParsingParameter(n-1) → Invoking → Done,
  with Failed(kind) reachable from any parsing state and from Invoking.
- Positional parameters are filled in declaration order, one parser each.
- '--name=value', '--name:value' and '--name: value' fill the parameter called
  name; keyword-only parameters can only be filled this way.
- A parameter left without a token takes its Python default, if any.
- Failures while parsing
  • ArgumentExhaustedError: a required value is missing.
  • ParseFailureError: a parser could not convert its token(s); unexpected
    exceptions escaping a parser are wrapped into it.
  • UnknownParameterError / DuplicateArgumentError: bad '--name' usage.
  • UnparsedTokensError: input left after every parameter was filled.
- Failures of the target itself are wrapped into InvocationTargetError.
- Consumed tokens are never rolled back; nothing is retried.

Runtime options
- shell: print faults through the rich console instead of raising them, and
  return void from the failed invocation.
- fancy / colorful: rendering options forwarded to the printed fault.
"""
import copy
import logging
from collections import deque

from .faults import (
    ArgumentExhaustedError,
    DuplicateArgumentError,
    InvocationTargetError,
    ParseFailureError,
    UnknownParameterError,
    UnparsedTokensError,
    trigger,
)
from .readers import as_reader
from .utils import Unset, mirror, ordinal
from .void import void

logger = logging.getLogger(__name__)


class Binding:
    """
    Resolved, reusable pairing of a callable target and its parameter parsers.

    Invariants
    - len(parsers) == len(signature), indexed by parameter position.
    - Immutable: attributes cannot be rebound after construction, and invoke()
      keeps all per-call state local, so one Binding may serve concurrent
      callers as long as each brings its own reader.
    """

    __slots__ = ("_target", "_method", "_signature", "_parsers", "_shell", "_fancy", "_colorful")

    parsers = mirror("parsers")
    signature = mirror("signature")

    def __init__(self, target, method, signature, parsers, /, *, shell=False, fancy=False, colorful=True):
        parsers = tuple(parsers)
        if len(parsers) != len(signature):
            raise ValueError("binding needs exactly one parser per parameter")
        if not callable(method):
            raise TypeError("binding method must be callable")

        for name, value in (
            ("_target", target),
            ("_method", method),
            ("_signature", signature),
            ("_parsers", parsers),
            ("_shell", bool(shell)),
            ("_fancy", bool(fancy)),
            ("_colorful", bool(colorful)),
        ):
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value, /):
        raise AttributeError("bindings are immutable")

    def __delattr__(self, name, /):
        raise AttributeError("bindings are immutable")

    @property
    def target(self):
        return self._target

    @property
    def method(self):
        return self._method

    @property
    def name(self):
        return getattr(self._method, "__name__", type(self._method).__name__)

    @property
    def usage(self):
        """
        One-line usage string, e.g. 'lend_money <name:str> <amount:int>'.
        """
        return " ".join((self.name, *map(str, self._signature)))

    @property
    def options(self):
        return {"shell": self._shell, "fancy": self._fancy, "colorful": self._colorful}

    def replace(self, **options):
        """
        Return a copy of this binding with different runtime options.
        """
        return type(self)(self._target, self._method, self._signature, self._parsers, **self.options | options)

    __replace__ = replace

    def invoke(self, reader, registry=Unset, /):
        """
        Parse the reader into parameter values and call the target method.

        Parameters
        - reader: ArgumentReader | str | Iterable[str]
          Input for this call (strings are converted with as_reader).
        - registry: Unset | ParserRegistry
          When given, parameters are re-resolved against it for this call only;
          parameters it cannot resolve keep their bound parser.

        Returns
        - the method's result, or void when the method is annotated '-> None'
          (and when a fault was printed in shell mode).

        Raises
        - ArgumentExhaustedError, ParseFailureError (and subclasses),
          InvocationTargetError, unless the binding runs in shell mode.
        """
        reader = as_reader(reader)
        parsers = self._parsers if registry is Unset else self._override(registry)

        logger.debug("invoke(): %s ← %r", self.name, reader.source)
        try:
            args, kwargs = self._parse(reader, parsers)
        except ParseFailureError as fault:
            logger.debug("invoke(): %s failed while parsing: %s", self.name, fault)
            return self._surface(fault)

        logger.debug("invoke(): calling %s with args=%r kwargs=%r", self.name, args, kwargs)
        try:
            result = self._method(*args, **kwargs)
        except Exception as exception:
            logger.debug("invoke(): %s raised %r", self.name, exception)
            fault = InvocationTargetError(
                "%s raised %s: %s" % (self.name, type(exception).__name__, exception),
                exception=exception,
                binding=self,
            )
            fault.__cause__ = exception
            return self._surface(fault)

        return void if self._signature.void else result

    __call__ = invoke

    def _override(self, registry):
        parsers = []
        for slot, bound in zip(self._signature, self._parsers):
            parser = registry.resolve(slot.type)
            parsers.append(bound if parser is None else parser)
        return tuple(parsers)

    def _parse(self, reader, parsers):
        signature = self._signature
        values = [Unset] * len(signature)
        pending = deque(index for index, slot in enumerate(signature) if not slot.keyword)

        while reader.has_next():
            token = reader.peek()

            if named := reader.named():
                name, inline = named
                index = signature.find(name)
                if index is None:
                    raise UnknownParameterError(
                        "unknown parameter %r at %s position" % (name, ordinal(token.index + 1)),
                        token=token,
                        hint="usage: %s" % self.usage,
                    )
                if values[index] is not Unset:
                    raise DuplicateArgumentError(
                        "parameter %r received a second value at %s position" % (name, ordinal(token.index + 1)),
                        token=token,
                        parameter=name,
                        hint="pass %r only once" % name,
                    )
                values[index] = self._parse_parameter(index, parsers[index], reader if inline is None else inline)
                continue

            # Skip positional slots already filled by name.
            while pending and values[pending[0]] is not Unset:
                pending.popleft()
            if not pending:
                raise UnparsedTokensError(
                    "unexpected %r at %s position" % (str(token), ordinal(token.index + 1)),
                    token=token,
                    leftover=reader.tokens[reader.position:],
                    hint="remove the extra input (usage: %s)" % self.usage,
                )
            index = pending.popleft()
            values[index] = self._parse_parameter(index, parsers[index], reader)

        for index, slot in enumerate(signature):
            if values[index] is not Unset:
                continue
            if slot.required:
                raise ArgumentExhaustedError(
                    "missing value for parameter %r (%s argument)" % (slot.name, ordinal(index + 1)),
                    parameter=slot.name,
                    index=index,
                    hint="usage: %s" % self.usage,
                )
            values[index] = slot.default

        args = []
        kwargs = {}
        for slot, value in zip(signature, values):
            if slot.keyword:
                kwargs[slot.name] = value
            else:
                args.append(value)
        return tuple(args), kwargs

    def _parse_parameter(self, index, parser, reader):
        slot = self._signature[index]
        logger.debug("invoke(): parsing parameter %d (%s) with %r", index, slot, parser)
        try:
            return parser.parse(reader)
        except ArgumentExhaustedError:
            raise ArgumentExhaustedError(
                "missing value for parameter %r (%s argument)" % (slot.name, ordinal(index + 1)),
                parameter=slot.name,
                index=index,
                hint="usage: %s" % self.usage,
            ) from None
        except ParseFailureError as fault:
            raise copy.replace(fault, parameter=slot.name, index=index) from fault.__cause__
        except Exception as exception:
            raise ParseFailureError(
                "parser for parameter %r failed: %s" % (slot.name, exception),
                parameter=slot.name,
                index=index,
            ) from exception

    def _surface(self, fault):
        if not self._shell:
            raise fault
        trigger(fault, shell=True, fancy=self._fancy, colorful=self._colorful)
        return void

    def __eq__(self, other):
        if not isinstance(other, Binding):
            return NotImplemented
        return (
            self._target is other._target and
            getattr(self._method, "__func__", self._method) is getattr(other._method, "__func__", other._method) and
            self._parsers == other._parsers
        )

    def __hash__(self):
        return hash((id(self._target), getattr(self._method, "__func__", self._method)))

    def __repr__(self):
        return "Binding(%s)" % self.usage

    def __rich_repr__(self):
        yield self.usage
        yield "target", self._target
        yield "parsers", self._parsers
        yield "shell", self._shell, False


__all__ = (
    "Binding",
)

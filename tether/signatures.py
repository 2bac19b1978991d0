"""
Method signatures as the binder sees them.

A Signature is the ordered tuple of Slots of one candidate callable: for every
declared parameter its name, its type identity (annotation; `str` when the
parameter is unannotated), its default (Unset when required) and its kind.
Binding uses it to route tokens (positional order, `--name=value`) and to fill
in defaults; the binder uses it to resolve parsers and to break ties by arity.
"""
import inspect
from inspect import Parameter
from typing import NamedTuple, Any

from .utils import Unset

DEFAULT_TYPE = str


class Slot(NamedTuple):
    name: str
    type: Any
    default: Any = Unset
    kind: Any = Parameter.POSITIONAL_OR_KEYWORD

    @property
    def required(self):
        return self.default is Unset

    @property
    def keyword(self):
        """True when the slot can only be filled by name (--name=value)."""
        return self.kind is Parameter.KEYWORD_ONLY

    @property
    def variadic(self):
        return self.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)

    @property
    def addressable(self):
        """True when the slot can be filled by name."""
        return self.kind in (Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)

    def __str__(self):
        label = "%s:%s" % (self.name, getattr(self.type, "__name__", self.type))
        if self.keyword:
            label = "--" + label
        return "<%s>" % label if self.required else "[%s]" % label


class Signature(tuple):
    """
    Ordered Slots of one callable, plus whether it declares `-> None`.
    """

    def __new__(cls, slots=(), /, returns=Unset):
        self = super().__new__(cls, slots)
        self.returns = returns
        return self

    @classmethod
    def of(cls, callable, /):
        """
        Read the signature of a (bound) callable.

        String annotations are evaluated; when that fails (a forward reference
        to an unknown name) they are kept as strings, which no registry resolves.
        """
        try:
            signature = inspect.signature(callable, eval_str=True)
        except NameError:
            signature = inspect.signature(callable)

        slots = []
        for parameter in signature.parameters.values():
            annotation = parameter.annotation
            slots.append(Slot(
                parameter.name,
                DEFAULT_TYPE if annotation is Parameter.empty else annotation,
                Unset if parameter.default is Parameter.empty else parameter.default,
                parameter.kind,
            ))

        returns = signature.return_annotation
        return cls(slots, Unset if returns is Parameter.empty else returns)

    @property
    def types(self):
        return tuple(slot.type for slot in self)

    @property
    def names(self):
        return tuple(slot.name for slot in self)

    @property
    def required(self):
        """Number of slots without a default."""
        return sum(slot.required for slot in self)

    @property
    def void(self):
        """True when the callable is annotated `-> None`."""
        return self.returns is None or self.returns is type(None)

    def accepts(self, arity, /):
        """True when a call with `arity` arguments can fill this signature."""
        return self.required <= arity <= len(self)

    def find(self, name, /):
        """
        Return the index of the slot addressable as name, or None.
        """
        for index, slot in enumerate(self):
            if slot.name == name and slot.addressable:
                return index
        return None

    def __repr__(self):
        return "Signature(%s)" % ", ".join(map(str, self))


__all__ = (
    "Slot",
    "Signature",
)

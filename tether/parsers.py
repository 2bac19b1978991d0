"""
Tether parsers: the capability that turns tokens into typed values.

Overview
- Parser: anything with a parse(reader) method. A parser consumes one or more
  tokens from the reader and returns a value, or raises ParseFailureError
  (ArgumentExhaustedError when the reader is empty). It never touches tokens
  beyond the ones it attempted.
- TokenParser(convert): the workhorse; consumes exactly one token and feeds it
  to a converter (int, float, a user function, ...). Converter errors
  (ValueError, TypeError, ArithmeticError) become ParseFailureError.
- Built-ins (shared, stateless instances):
  • SequenceParser → str, one token
  • IntParser → int
  • FloatParser → float
  • BooleanParser → bool, from yes/true and no/false (case-insensitive)
  • RemainderParser → the rest of the input verbatim, for parameters typed `Remainder`
- Remainder: a NewType over str used to ask for “everything that is left”.

Example
    >>> from tether.readers import as_reader
    >>> IntParser.parse(as_reader("100"))
    100
    >>> BooleanParser.parse(as_reader("yes"))
    True
"""
from typing import NewType, Protocol, runtime_checkable

from .faults import ParseFailureError
from .utils import Unset, coalesce, ordinal

# str annotation asking for the unparsed rest of the input.
Remainder = NewType("Remainder", str)


@runtime_checkable
class Parser[T](Protocol):
    """
    Capability: read one or more tokens from a reader and produce a value.
    """

    def parse(self, reader, /) -> T: ...


class TokenParser:
    """
    Consume exactly one token and convert it.

    Parameters
    - convert: Callable[[str], T]
      Receives the token as a plain str. ValueError, TypeError and
      ArithmeticError raised by it are reported as ParseFailureError.
    - name: Unset | str
      Label used in messages; defaults to the converter's __name__.
    """

    def __init__(self, convert, /, name=Unset):
        if not callable(convert):
            raise TypeError("TokenParser() argument must be callable")
        if not isinstance(name, str | Unset):
            raise TypeError("TokenParser() 'name' must be a string")
        self.convert = convert
        self.name = coalesce(name, getattr(convert, "__name__", type(convert).__name__))

    def parse(self, reader, /):
        token = reader.next()
        try:
            return self.convert(str(token))
        except (ValueError, TypeError, ArithmeticError) as error:
            raise ParseFailureError(
                "cannot read %r as %s at %s position" % (str(token), self.name, ordinal(token.index + 1)),
                token=token,
                hint="pass a valid %s value" % self.name,
            ) from error

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.convert == other.convert and self.name == other.name

    def __hash__(self):
        return hash((type(self), self.convert, self.name))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self.name)


def _boolean(text):
    match text.lower():
        case "yes" | "true":
            return True
        case "no" | "false":
            return False
    raise ValueError("%r is not a boolean" % text)


class _RemainderParser:
    """
    Consume every remaining token as one verbatim string.
    """

    def parse(self, reader, /):
        return str(reader.remainder())

    def __repr__(self):
        return "RemainderParser"


SequenceParser = TokenParser(str, "text")
IntParser = TokenParser(int, "integer")
FloatParser = TokenParser(float, "number")
BooleanParser = TokenParser(_boolean, "boolean")
RemainderParser = _RemainderParser()

BUILTINS = {
    str: SequenceParser,
    int: IntParser,
    float: FloatParser,
    bool: BooleanParser,
    Remainder: RemainderParser,
}
"""Type → parser seed used by SimpleParserRegistry."""


__all__ = (
    "Parser",
    "TokenParser",
    "Remainder",
    "SequenceParser",
    "IntParser",
    "FloatParser",
    "BooleanParser",
    "RemainderParser",
    "BUILTINS",
)

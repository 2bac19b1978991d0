r"""
Tether argument readers: turn raw text into a consumable stream of tokens.

Overview
- Token: a str subclass for one argument unit. Besides its (unquoted) text it
  remembers where it came from: the original source, its start/end offsets, and
  its ordinal in the stream, and where its first quoted span began (if any).
- ArgumentReader: an ordered, single-use cursor over the tokens of one input.
  • has_next() / peek() / next(): inspect and consume; the cursor only moves forward.
  • remainder(): consume everything left as a single token (verbatim source text).
  • named(): consume a `--name=value` / `--name:value` / `--name:` token if one is next.
  • also a regular iterator (for token in reader: ...).
- as_reader(prompt): factory accepting a string, an iterable of strings, or a reader.

Tokenization rules
- Tokens are separated by runs of whitespace.
- A quote (" or ') at the start of a token, or right after '=' / ':' inside a
  token, opens a quoted span that runs to the matching quote; whitespace inside
  it does not split, the quotes are stripped, and a backslash escapes the next
  character. An unterminated quote runs to the end of the input.
- Quotes anywhere else are literal ("Luke's" stays one plain token).
- A token that starts with a quote is plain text, never a named argument, and
  `--name=""` passes an explicit empty value.

Quick example:
    >>> reader = as_reader('Luke "one hundred" 7')
    >>> [str(token) for token in reader]
    ['Luke', 'one hundred', '7']
"""
import re
from collections.abc import Iterable

from .faults import ArgumentExhaustedError
from .utils import mirror, ordinal

QUOTES = "\"'"

# '--name=value', '--name:value', '--name:' (value in the next token), '--name='
NAMED = re.compile(r"--(?P<name>[^\W\d]\w*)[=:](?P<value>.*)", re.DOTALL)


class Token(str):
    """
    One argument unit: immutable text plus its span in the original source.

    Attributes
    - source: the full text the token was read from.
    - start, end: offsets of the token inside source (quotes included).
    - index: 0-based ordinal of the token in its stream.
    - quoted: offset in the text where the first quoted span begins, or None
      when the token holds no quotes.
    """

    def __new__(cls, text, /, source=None, start=0, end=None, index=0, quoted=None):
        self = super().__new__(cls, text)
        source = text if source is None else source
        end = start + len(text) if end is None else end
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "quoted", quoted)
        return self

    @property
    def span(self):
        return self.start, self.end

    def __setattr__(self, name, value, /):
        raise AttributeError("tokens are immutable")

    def __delattr__(self, name, /):
        raise AttributeError("tokens are immutable")

    def __reduce__(self):
        return type(self), (str(self), self.source, self.start, self.end, self.index, self.quoted)

    def __repr__(self):
        return "Token(%s, span=%r)" % (super().__repr__(), self.span)

    def __rich_repr__(self):
        yield str(self)
        yield "span", self.span
        yield "index", self.index


def _tokenize(source):
    """
    Split source into Tokens (see module docstring for the rules).
    """
    tokens = []
    length = len(source)
    index = 0

    while index < length:
        if source[index].isspace():
            index += 1
            continue

        start = index
        chunks = []
        quoted = None
        while index < length and not source[index].isspace():
            char = source[index]
            opens = index == start or source[index - 1] in "=:"
            if char in QUOTES and opens:
                if quoted is None:
                    quoted = len(chunks)
                close = index + 1
                while close < length and source[close] != char:
                    if source[close] == "\\" and close + 1 < length:
                        close += 1
                    chunks.append(source[close])
                    close += 1
                # Skip the closing quote (if any).
                index = min(close + 1, length)
            else:
                chunks.append(char)
                index += 1

        tokens.append(Token("".join(chunks), source, start, index, len(tokens), quoted))

    return tuple(tokens)


class ArgumentReader:
    """
    Single-use, forward-only cursor over the tokens of one input.

    A reader is created per input string and discarded after one invocation;
    it is not thread-safe and must not be shared between concurrent calls.
    Only next()/remainder()/named() move the cursor; peek() has no side effects.
    """

    source = mirror("source")
    tokens = mirror("tokens")

    def __init__(self, source, tokens, /):
        self._source = source
        self._tokens = tuple(tokens)
        self._cursor = 0

    @classmethod
    def of(cls, source, /):
        """
        Build a reader by tokenizing source.
        """
        if not isinstance(source, str):
            raise TypeError("ArgumentReader.of() argument must be a string")
        return cls(source, _tokenize(source))

    @property
    def position(self):
        """
        Number of tokens consumed so far.
        """
        return self._cursor

    @property
    def remaining(self):
        return len(self._tokens) - self._cursor

    def has_next(self):
        return self._cursor < len(self._tokens)

    def peek(self):
        """
        Return the next token without consuming it.

        Raises
        - ArgumentExhaustedError: when no token remains.
        """
        if not self.has_next():
            raise ArgumentExhaustedError(
                "no argument left at %s position" % ordinal(self._cursor + 1),
                index=self._cursor,
                hint="add the missing argument at the end of the input",
            )
        return self._tokens[self._cursor]

    def next(self):
        """
        Consume and return the next token.

        Raises
        - ArgumentExhaustedError: when no token remains.
        """
        token = self.peek()
        self._cursor += 1
        return token

    def remainder(self):
        """
        Consume every remaining token and return them as one token holding the
        verbatim source text from the next token to the end of the input.

        Raises
        - ArgumentExhaustedError: when no token remains.
        """
        first = self.peek()
        last = self._tokens[-1]
        self._cursor = len(self._tokens)
        return Token(self._source[first.start:last.end], self._source, first.start, last.end, first.index)

    def named(self):
        """
        Consume the next token if it names a parameter.

        Returns
        - None when the next token is not of the named form (nothing is consumed).
        - (name, reader) when it is: reader yields the inline value when one was
          given ('--name=value', '--name=""'), or is None when the value follows
          as the next token of this reader ('--name:' or '--name=').
        - Tokens that start with a quote are never named ('"--x=1"' is plain text).
        """
        if not self.has_next():
            return None
        token = self._tokens[self._cursor]
        # A quote at the very start makes the whole token literal text.
        if token.quoted == 0 or not (match := NAMED.fullmatch(token)):
            return None
        self._cursor += 1

        name, value = match["name"], match["value"]
        if not value and token.quoted is None:
            return name, None
        # Quoted values lose their quotes, so anchor the value on the token end.
        start = max(token.start, token.end - len(value))
        return name, type(self)(self._source, (Token(value, self._source, start, token.end, token.index),))

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        return self.next()

    def __repr__(self):
        return "ArgumentReader(%r, position=%d)" % (self._source, self._cursor)

    def __rich_repr__(self):
        yield self._source
        yield "position", self._cursor
        yield "tokens", self._tokens


def as_reader(prompt, /):
    """
    Convert a prompt into an ArgumentReader.

    Parameters
    - prompt:
      • ArgumentReader: returned unchanged.
      • str: tokenized (see module docstring).
      • Iterable[str]: pre-tokenized; each item becomes one token, with offsets
        computed as if the items were joined by single spaces.

    Raises
    - TypeError: when prompt is none of the above, or an iterable contains a non-string.
    """
    if isinstance(prompt, ArgumentReader):
        return prompt
    if isinstance(prompt, str):
        return ArgumentReader.of(prompt)
    if isinstance(prompt, Iterable):
        items = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("as_reader() argument must be a string or an iterable of strings")
            items.append(str(item))

        source = " ".join(items)
        tokens = []
        start = 0
        for index, item in enumerate(items):
            tokens.append(Token(item, source, start, start + len(item), index))
            start += len(item) + 1
        return ArgumentReader(source, tokens)
    raise TypeError("as_reader() argument must be a string or an iterable of strings")


__all__ = (
    "Token",
    "ArgumentReader",
    "as_reader",
)

"""
Reader behavioral tests (tokenization, cursor movement, named arguments).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (as_reader, ArgumentReader, Token).
"""
import pickle
import unittest
from unittest import TestCase

from tether import ArgumentReader, Token, as_reader
from tether.faults import ArgumentExhaustedError


def texts(reader):
    return [str(token) for token in reader]


class TestTokenization(TestCase):
    """Splitting raw text into tokens."""

    def testWhitespaceSeparated(self):
        reader = as_reader("Luke   100\t7")
        self.assertEqual(texts(reader), ["Luke", "100", "7"])

    def testSpans(self):
        first, second = as_reader("Luke 100").tokens
        self.assertEqual(first.span, (0, 4))
        self.assertEqual(second.span, (5, 8))
        self.assertEqual((first.index, second.index), (0, 1))
        self.assertEqual(second.source, "Luke 100")

    def testDoubleQuotesGroupWords(self):
        reader = as_reader('Luke "one hundred" 7')
        self.assertEqual(texts(reader), ["Luke", "one hundred", "7"])

    def testQuotedTokenSpanIncludesQuotes(self):
        token = as_reader('Luke "one hundred"').tokens[1]
        self.assertEqual(token.span, (5, 18))

    def testSingleQuotes(self):
        self.assertEqual(texts(as_reader("'a b' c")), ["a b", "c"])

    def testApostropheInsideWordIsLiteral(self):
        self.assertEqual(texts(as_reader("Luke's ship")), ["Luke's", "ship"])

    def testBackslashEscapesInsideQuotes(self):
        self.assertEqual(texts(as_reader(r'"a \"b\" c"')), ['a "b" c'])

    def testUnterminatedQuoteRunsToEnd(self):
        self.assertEqual(texts(as_reader('x "abc def')), ["x", "abc def"])

    def testEmptyQuotesMakeEmptyToken(self):
        self.assertEqual(texts(as_reader('"" x')), ["", "x"])

    def testBlankInput(self):
        reader = as_reader("   ")
        self.assertFalse(reader.has_next())
        self.assertEqual(reader.remaining, 0)


class TestReaderCursor(TestCase):
    """Forward-only consumption."""

    def testPeekDoesNotConsume(self):
        reader = as_reader("a b")
        self.assertEqual(reader.peek(), "a")
        self.assertEqual(reader.peek(), "a")
        self.assertEqual(reader.position, 0)

    def testNextConsumes(self):
        reader = as_reader("a b")
        self.assertEqual(reader.next(), "a")
        self.assertEqual(reader.position, 1)
        self.assertEqual(reader.remaining, 1)
        self.assertEqual(reader.next(), "b")
        self.assertFalse(reader.has_next())

    def testExhaustedReaderRaises(self):
        reader = as_reader("a")
        reader.next()
        with self.assertRaises(ArgumentExhaustedError) as context:
            reader.next()
        self.assertIn("second position", str(context.exception))

    def testRemainderIsVerbatim(self):
        reader = as_reader("say hello   big world")
        reader.next()
        rest = reader.remainder()
        self.assertEqual(rest, "hello   big world")
        self.assertEqual(rest.span, (4, 21))
        self.assertFalse(reader.has_next())

    def testRemainderOnEmptyReaderRaises(self):
        with self.assertRaises(ArgumentExhaustedError):
            as_reader("").remainder()

    def testIteration(self):
        reader = as_reader("a b c")
        reader.next()
        self.assertEqual(list(map(str, reader)), ["b", "c"])

    def testTokensAreReadOnly(self):
        reader = as_reader("a b")
        self.assertIsInstance(reader.tokens, tuple)


class TestNamedArguments(TestCase):
    """'--name=value' style tokens."""

    def testInlineEquals(self):
        reader = as_reader("--amount=100 rest")
        name, inline = reader.named()
        self.assertEqual(name, "amount")
        self.assertEqual(inline.next(), "100")
        self.assertEqual(reader.next(), "rest")

    def testInlineColon(self):
        name, inline = as_reader("--amount:100").named()
        self.assertEqual((name, str(inline.next())), ("amount", "100"))

    def testValueInNextToken(self):
        reader = as_reader("--amount: 100")
        self.assertEqual(reader.named(), ("amount", None))
        self.assertEqual(reader.next(), "100")

    def testQuotedInlineValue(self):
        name, inline = as_reader('--name="Luke Skywalker"').named()
        self.assertEqual(name, "name")
        self.assertEqual(inline.next(), "Luke Skywalker")

    def testQuotedEmptyValueIsInline(self):
        reader = as_reader('--name="" 100')
        name, inline = reader.named()
        self.assertEqual(name, "name")
        self.assertEqual(inline.next(), "")
        self.assertEqual(reader.next(), "100")

    def testFullyQuotedTokenIsNotNamed(self):
        reader = as_reader('"--x=1" rest')
        self.assertIsNone(reader.named())
        self.assertEqual(reader.next(), "--x=1")

    def testPlainTokenIsNotNamed(self):
        reader = as_reader("--verbose plain")
        self.assertIsNone(reader.named())
        self.assertEqual(reader.position, 0)

    def testNamedOnEmptyReader(self):
        self.assertIsNone(as_reader("").named())


class TestAsReader(TestCase):
    """Input conversion."""

    def testReaderPassesThrough(self):
        reader = ArgumentReader.of("a")
        self.assertIs(as_reader(reader), reader)

    def testIterableOfStrings(self):
        reader = as_reader(["Luke", "one hundred"])
        first, second = reader.tokens
        self.assertEqual(reader.source, "Luke one hundred")
        self.assertEqual(second, "one hundred")
        self.assertEqual(second.span, (5, 16))
        self.assertEqual(first.index, 0)

    def testRejectsOtherTypes(self):
        with self.assertRaises(TypeError):
            as_reader(42)
        with self.assertRaises(TypeError):
            as_reader(["a", 1])
        with self.assertRaises(TypeError):
            ArgumentReader.of(b"a")


class TestToken(TestCase):

    def testImmutable(self):
        token = as_reader("a").next()
        with self.assertRaises(AttributeError):
            token.start = 3

    def testQuotedOffset(self):
        plain, leading, inline = as_reader('a "b c" --name="d"').tokens
        self.assertIsNone(plain.quoted)
        self.assertEqual(leading.quoted, 0)
        self.assertEqual(inline.quoted, 7)

    def testPickleKeepsSpan(self):
        token = as_reader("a bcd").tokens[1]
        restored = pickle.loads(pickle.dumps(token))
        self.assertEqual(restored, "bcd")
        self.assertEqual(restored.span, (2, 5))
        self.assertEqual(restored.source, "a bcd")
        self.assertIsInstance(restored, Token)

    def testRepr(self):
        self.assertEqual(repr(Token("ab", "ab")), "Token('ab', span=(0, 2))")


if __name__ == '__main__':
    unittest.main()

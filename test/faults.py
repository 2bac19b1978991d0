"""
Fault tests (codes, options, replacement, rendering, triggering).
"""
import copy
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from tether import bind
from tether import faults
from tether.faults import (
    ArgumentExhaustedError,
    BindingException,
    FaultCode,
    ParseFailureError,
    UnknownMethodError,
    UnresolvedParserError,
    getdoc,
    trigger,
)


class Bank:
    def lend_money(self, name: str, amount: int) -> bool:
        return amount < 200


def render(fault, **options):
    console = Console(file=io.StringIO(), color_system=None, width=120)
    console.print(copy.replace(fault, **options))
    return console.file.getvalue()


class TestFaultOptions(TestCase):

    def testDefaultMessageIsTitle(self):
        fault = ArgumentExhaustedError()
        self.assertEqual(fault.message, "missing argument")
        self.assertEqual(fault.code, FaultCode.ARGUMENT_EXHAUSTED)

    def testOptionsAreReadOnly(self):
        fault = ParseFailureError("bad", hint="try again")
        self.assertEqual(fault.hint, "try again")
        with self.assertRaises(TypeError):
            fault.options["hint"] = "other"

    def testHierarchy(self):
        self.assertTrue(issubclass(ArgumentExhaustedError, ParseFailureError))
        self.assertTrue(issubclass(ParseFailureError, ValueError))
        self.assertTrue(issubclass(UnknownMethodError, UnresolvedParserError))
        self.assertTrue(issubclass(UnresolvedParserError, LookupError))
        self.assertTrue(issubclass(UnresolvedParserError, BindingException))

    def testReplaceKeepsCauseAndAddsOptions(self):
        try:
            try:
                int("x")
            except ValueError as error:
                raise ParseFailureError("bad") from error
        except ParseFailureError as fault:
            replaced = copy.replace(fault, parameter="amount")
        self.assertIsInstance(replaced, ParseFailureError)
        self.assertEqual(replaced.options["parameter"], "amount")
        self.assertIsInstance(replaced.__cause__, ValueError)
        self.assertEqual(replaced.message, "bad")

    def testCodeNormalize(self):
        self.assertEqual(FaultCode.UNRESOLVED_PARSER.normalize(), "21101")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.PARSE_FAILURE))
        with self.assertRaises(TypeError):
            getdoc(22101)


class TestFaultRendering(TestCase):

    def setUp(self):
        with self.assertRaises(ParseFailureError) as context:
            bind(Bank(), "lend_money").invoke("Luke abc")
        self.fault = context.exception

    def testExcerptPointsAtToken(self):
        self.assertEqual(self.fault.excerpt(), "Luke abc\n     ^^^")

    def testExcerptWithoutToken(self):
        self.assertIsNone(ParseFailureError("bad").excerpt())

    def testPlainRendering(self):
        output = render(self.fault, colorful=False)
        self.assertIn("22101 | Parse Failure", output)
        self.assertIn("cannot read 'abc' as integer at second position", output)
        self.assertIn("     ^^^", output)
        self.assertIn("→ pass a valid integer value", output)

    def testFancyRendering(self):
        output = render(self.fault, colorful=False, fancy=True)
        self.assertIn("Parse Failure", output)
        self.assertIn("╭", output)


class TestTrigger(TestCase):

    def testRaisesOutsideShell(self):
        with self.assertRaises(ParseFailureError):
            trigger(ParseFailureError("bad"))

    def testPrintsInShell(self):
        buffer = io.StringIO()
        with patch.object(faults, "console", Console(file=buffer, color_system=None, width=120)):
            trigger(ParseFailureError("bad input"), shell=True)
        self.assertIn("bad input", buffer.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("bad"))


if __name__ == '__main__':
    unittest.main()

"""
Parser registry tests (registration, resolution rules, setup phase).

Scope
- Exact lookup, then hierarchy (MRO, abstract bases, NewType), then
  equivalence (Optional, Annotated).
- Freezing, copying and unregistering.
"""
import numbers
import unittest
from decimal import Decimal
from typing import Annotated, NewType, Optional, Protocol
from unittest import TestCase

from tether import (
    BooleanParser,
    FloatParser,
    IntParser,
    ParserRegistry,
    Remainder,
    RemainderParser,
    SequenceParser,
    SimpleParserRegistry,
    TokenParser,
)

UserId = NewType("UserId", int)


class Shaped(Protocol):
    def area(self) -> float: ...


class Animal:
    pass


class Dog(Animal):
    pass


class TestSimpleRegistry(TestCase):

    def setUp(self):
        self.registry = SimpleParserRegistry()

    def testBuiltins(self):
        self.assertIs(self.registry.resolve(str), SequenceParser)
        self.assertIs(self.registry.resolve(int), IntParser)
        self.assertIs(self.registry.resolve(float), FloatParser)
        self.assertIs(self.registry.resolve(bool), BooleanParser)
        self.assertIs(self.registry.resolve(Remainder), RemainderParser)

    def testSupportedTypes(self):
        self.assertEqual(self.registry.supported_types(), {str, int, float, bool, Remainder})
        self.assertIn(int, self.registry)
        self.assertEqual(len(self.registry), 5)

    def testUnknownTypeResolvesToNone(self):
        self.assertIsNone(self.registry.resolve(Decimal))

    def testConstructorOverridesBuiltins(self):
        parser = TokenParser(lambda text: int(text, 16), "hexadecimal")
        registry = SimpleParserRegistry({int: parser})
        self.assertIs(registry.resolve(int), parser)
        self.assertIs(registry.resolve(str), SequenceParser)


class TestResolutionRules(TestCase):

    def testExactMatchWinsOverHierarchy(self):
        animal, dog = TokenParser(Animal), TokenParser(Dog)
        registry = ParserRegistry({Animal: animal, Dog: dog})
        self.assertIs(registry.resolve(Dog), dog)

    def testSubclassResolvesThroughBase(self):
        animal = TokenParser(lambda text: Animal(), "animal")
        registry = ParserRegistry().register(Animal, animal)
        self.assertIs(registry.resolve(Dog), animal)

    def testBooleanFallsBackToIntegerWithoutItsOwnParser(self):
        registry = ParserRegistry().register(int, int)
        self.assertEqual(registry.resolve(bool), TokenParser(int))
        self.assertNotIn(bool, registry)

    def testAbstractBaseClass(self):
        parser = TokenParser(int, "integral")
        registry = ParserRegistry().register(numbers.Integral, parser)
        self.assertIs(registry.resolve(int), parser)

    def testMostSpecificAbstractBaseWins(self):
        number, integral = TokenParser(int, "number"), TokenParser(int, "integral")
        registry = ParserRegistry().register(numbers.Number, number).register(numbers.Integral, integral)
        self.assertIs(registry.resolve(int), integral)
        self.assertIs(registry.resolve(float), number)

    def testAbstractBaseBeatsObject(self):
        integral, anything = TokenParser(int, "integral"), TokenParser(str, "anything")
        registry = ParserRegistry().register(numbers.Integral, integral).register(object, anything)
        self.assertIs(registry.resolve(int), integral)
        self.assertIs(registry.resolve(Decimal), anything)

    def testNearestBaseWins(self):
        animal, anything = TokenParser(Animal), TokenParser(str, "anything")
        registry = ParserRegistry().register(object, anything).register(Animal, animal)
        self.assertIs(registry.resolve(Dog), animal)

    def testPlainProtocolKeyDoesNotBreakResolution(self):
        registry = SimpleParserRegistry().register(Shaped, TokenParser(str, "shape"))
        self.assertIsNone(registry.resolve(Decimal))
        self.assertIs(registry.resolve(Dog), None)
        self.assertIs(registry.resolve(int), IntParser)

    def testNewTypeResolvesThroughSupertype(self):
        self.assertIs(SimpleParserRegistry().resolve(UserId), IntParser)

    def testNewTypeCanBeRegisteredDirectly(self):
        parser = TokenParser(int, "user id")
        registry = SimpleParserRegistry().register(UserId, parser)
        self.assertIs(registry.resolve(UserId), parser)

    def testOptionalResolvesLikeItsType(self):
        registry = SimpleParserRegistry()
        self.assertIs(registry.resolve(Optional[int]), IntParser)
        self.assertIs(registry.resolve(int | None), IntParser)

    def testAnnotatedResolvesLikeItsType(self):
        self.assertIs(SimpleParserRegistry().resolve(Annotated[int, "amount"]), IntParser)

    def testRealUnionStaysUnresolved(self):
        self.assertIsNone(SimpleParserRegistry().resolve(int | str))

    def testEmptyRegistry(self):
        self.assertIsNone(ParserRegistry().resolve(int))


class TestRegistration(TestCase):

    def testConverterIsWrapped(self):
        registry = ParserRegistry().register(Decimal, Decimal)
        self.assertEqual(registry.resolve(Decimal), TokenParser(Decimal))

    def testLastWriteWins(self):
        first, second = TokenParser(int, "first"), TokenParser(int, "second")
        registry = ParserRegistry().register(int, first).register(int, second)
        self.assertIs(registry.resolve(int), second)
        self.assertEqual(len(registry), 1)

    def testRejectsNonCallableParser(self):
        with self.assertRaises(TypeError):
            ParserRegistry().register(int, 42)

    def testUnregister(self):
        registry = SimpleParserRegistry().unregister(bool)
        # bool falls back to int through the MRO.
        self.assertIs(registry.resolve(bool), IntParser)

    def testUnregisterMissingRaises(self):
        with self.assertRaises(LookupError):
            ParserRegistry().unregister(int)

    def testFrozenRegistryRejectsChanges(self):
        registry = SimpleParserRegistry().freeze()
        self.assertTrue(registry.frozen)
        with self.assertRaises(TypeError):
            registry.register(Decimal, Decimal)
        with self.assertRaises(TypeError):
            registry.unregister(int)
        self.assertIs(registry.resolve(int), IntParser)

    def testCopyIsUnfrozenAndEqual(self):
        registry = SimpleParserRegistry().freeze()
        clone = registry.copy()
        self.assertFalse(clone.frozen)
        self.assertEqual(clone, registry)
        self.assertIsInstance(clone, SimpleParserRegistry)
        clone.register(Decimal, Decimal)
        self.assertNotIn(Decimal, registry)

    def testParsersViewIsReadOnly(self):
        registry = SimpleParserRegistry()
        with self.assertRaises(TypeError):
            registry.parsers[Decimal] = TokenParser(Decimal)

    def testUnhashable(self):
        self.assertIsNone(SimpleParserRegistry().resolve([int]))

    def testRegistrationIsLogged(self):
        with self.assertLogs("tether.registries", level="DEBUG") as logs:
            ParserRegistry().register(Decimal, Decimal)
        self.assertTrue(any("Decimal" in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()

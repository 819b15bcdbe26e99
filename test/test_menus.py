"""
Menus module behavioral tests (engines, container and menu trees).

Scope
- Validate the written engine: accept, retry, fallback, end of input, stream failures.
- Validate the many-values variant and prompt_or_default().
- Validate the selected engine: matching, default fallback, bindings, and the
  absence of any re-prompt (unlike the written engine).
- Validate Values (format merging, exclusive stream use) and MenuTree navigation.

Conventions
- Test method names follow CamelCase per project convention.
- Terminal sessions are simulated with io.StringIO readers and writers.
"""

import unittest
from io import StringIO
from unittest import TestCase

from querent import (
    Accepted,
    Choice,
    DefaultIndexError,
    Failed,
    Format,
    InvalidSelectionError,
    MenuStream,
    MenuTree,
    MisconfiguredDefaultError,
    NoMoreInputError,
    ParseFailureError,
    Rejected,
    Selected,
    StreamBusyError,
    StreamFailureError,
    Values,
    Written,
    navigate,
    prompt,
    prompt_many,
    prompt_or_default,
    query,
    select,
)


def session(text=""):
    return MenuStream(StringIO(text), StringIO())


class BrokenReader:
    def readline(self):
        raise OSError("terminal closed")


class TestQuery(TestCase):
    """Behavioral tests for single attempts of the written engine."""

    def testAccepted(self):
        self.assertEqual(query(Written("Year", type=int), session(" 2018 \n")), Accepted(2018))

    def testParseFailureRejected(self):
        outcome = query(Written("Year", type=int), session("abc\n"))
        self.assertIsInstance(outcome, Rejected)
        self.assertEqual(outcome.raw, "abc")
        self.assertIsInstance(outcome.error, ParseFailureError)

    def testPredicateRefusalRejectedWithoutError(self):
        outcome = query(Written("Year", type=int, until=lambda year: year > 2000), session("1990\n"))
        self.assertEqual(outcome, Rejected("1990"))

    def testEndOfInputFailed(self):
        outcome = query(Written("Year", type=int), session(""))
        self.assertIsInstance(outcome, Failed)
        self.assertIsInstance(outcome.error, NoMoreInputError)

    def testStreamFailureFailed(self):
        outcome = query(Written("Year"), MenuStream(BrokenReader(), StringIO()))
        self.assertIsInstance(outcome.error, StreamFailureError)


class TestPrompt(TestCase):
    """Behavioral tests for the written engine loop."""

    def setUp(self):
        self.year = Written("Year", type=int, default="2022")

    def testEmptyLineFallsBack(self):
        stream = session("\n")
        self.assertEqual(prompt(self.year, stream), 2022)
        self.assertEqual(stream.writer.getvalue().count("Year"), 1)

    def testValidInput(self):
        self.assertEqual(prompt(self.year, session("2018\n")), 2018)

    def testUnparsableInputFallsBack(self):
        stream = session("abc\n2018\n")
        self.assertEqual(prompt(self.year, stream), 2022)
        self.assertEqual(stream.reader.readline(), "2018\n")

    def testEndOfInputFallsBack(self):
        self.assertEqual(prompt(self.year, session("")), 2022)

    def testEmptyStringNotAcceptedWhenDefaultExists(self):
        self.assertEqual(prompt(Written("Name", default="anon"), session("   \n")), "anon")

    def testRetryOnParseFailureWithoutDefault(self):
        stream = session("abc\nxyz\n42\n")
        self.assertEqual(prompt(Written("Count", type=int, format=Format(chip="")), stream), 42)
        self.assertEqual(stream.writer.getvalue().count("Count"), 3)

    def testRetryOnPredicateRefusal(self):
        stream = session("1990\n2010\n")
        field = Written("Year", type=int, default="2022", until=lambda year: year > 2000)
        self.assertEqual(prompt(field, stream), 2010)
        self.assertEqual(stream.writer.getvalue().count("Year"), 2)

    def testEndOfInputWithoutDefaultRaises(self):
        with self.assertRaises(NoMoreInputError):
            prompt(Written("Count", type=int), session("abc\n"))

    def testStreamFailurePropagatesDespiteDefault(self):
        with self.assertRaises(StreamFailureError):
            prompt(self.year, MenuStream(BrokenReader(), StringIO()))

    def testMisconfiguredDefaultFailsBeforePrompting(self):
        stream = session("2018\n")
        with self.assertRaises(MisconfiguredDefaultError) as ctx:
            prompt(Written("Year", type=int, default="abc"), stream)
        self.assertNotIsInstance(ctx.exception, ParseFailureError)
        self.assertEqual(ctx.exception.field, "Year")
        self.assertEqual(stream.writer.getvalue(), "")

    def testPromptRendering(self):
        stream = session("x\n")
        prompt(Written("Name"), stream, Format(chip="* ", line_break=False, suffix=": ", prefix=""))
        self.assertEqual(stream.writer.getvalue(), "* Name: ")

    def testSelectedFieldRejected(self):
        with self.assertRaises(TypeError):
            prompt(Selected("Pick", [("a", 1)]), session("a\n"))


class TestPromptMany(TestCase):
    """Behavioral tests for the many-values variant."""

    def testSplitsAndTrims(self):
        self.assertEqual(prompt_many(Written("Numbers", type=int), session(" 1, 2 ,,3 \n"), ","), [1, 2, 3])

    def testWholeLineRetry(self):
        stream = session("1,x\n4,5\n")
        self.assertEqual(prompt_many(Written("Numbers", type=int), stream, ","), [4, 5])
        self.assertEqual(stream.writer.getvalue().count("Numbers"), 2)

    def testPredicateAppliesToEveryToken(self):
        field = Written("Numbers", type=int, until=lambda number: number > 0)
        self.assertEqual(prompt_many(field, session("1,-2\n3\n"), ","), [3])

    def testEmptyLineFallsBackToSplitDefault(self):
        field = Written("Numbers", type=int, default="7, 8")
        self.assertEqual(prompt_many(field, session("\n"), ","), [7, 8])

    def testLineWithoutTokensRetries(self):
        field = Written("Numbers", type=int, default="7")
        stream = session(" , \n9\n")
        self.assertEqual(prompt_many(field, stream, ","), [9])

    def testSeparatorRequired(self):
        with self.assertRaises(ValueError):
            prompt_many(Written("Numbers"), session("a\n"), "")


class TestPromptOrDefault(TestCase):
    """Behavioral tests for single-attempt prompting with a fallback."""

    def testAccepted(self):
        self.assertEqual(prompt_or_default(Written("Count", type=int), session("3\n")), 3)

    def testDeclaredDefault(self):
        field = Written("Count", type=int, default="5")
        self.assertEqual(prompt_or_default(field, session("abc\n1\n")), 5)

    def testTypeDefaultWithoutDeclaredDefault(self):
        self.assertEqual(prompt_or_default(Written("Count", type=int), session("abc\n")), 0)
        self.assertEqual(prompt_or_default(Written("Name", until=lambda name: False), session("x\n")), "")

    def testPredicateRefusalFallsBack(self):
        field = Written("Count", type=int, default="5", until=lambda count: count < 3)
        self.assertEqual(prompt_or_default(field, session("4\n")), 5)

    def testTypeWithoutZeroValueIsMisconfigured(self):
        with self.assertRaises(MisconfiguredDefaultError):
            prompt_or_default(Written("Count", type=lambda raw: int(raw)), session("abc\n"))

    def testStreamFailurePropagates(self):
        with self.assertRaises(StreamFailureError):
            prompt_or_default(Written("Count", type=int, default="5"), MenuStream(BrokenReader(), StringIO()))


class TestSelect(TestCase):
    """Behavioral tests for the selected engine."""

    def setUp(self):
        self.field = Selected("Pick", [("one", 1), ("two", 2), ("three", 3)])

    def testMatchByLabel(self):
        self.assertEqual(select(self.field, session("two\n")), 2)

    def testMatchByIndex(self):
        self.assertEqual(select(self.field, session("2\n")), 2)

    def testNoMatchWithoutDefaultRaises(self):
        with self.assertRaises(InvalidSelectionError) as ctx:
            select(self.field, session("nine\n"))
        self.assertEqual(ctx.exception.raw, "nine")

    def testNoMatchFallsBackWithoutReprompting(self):
        field = Selected("Pick", [("one", 1), ("two", 2)], default=1, format=Format(chip=""))
        stream = session("nine\none\n")
        self.assertEqual(select(field, stream), 2)
        self.assertEqual(stream.writer.getvalue().count("Pick"), 1)
        self.assertEqual(stream.reader.readline(), "one\n")

    def testInvalidSelectionDoesNotReprompt(self):
        stream = session("nine\ntwo\n")
        with self.assertRaises(InvalidSelectionError):
            select(self.field, stream)
        self.assertEqual(stream.reader.readline(), "two\n")

    def testEndOfInput(self):
        with self.assertRaises(NoMoreInputError):
            select(self.field, session(""))
        self.assertEqual(select(Selected("Pick", [("one", 1)], default=0), session("")), 1)

    def testDefaultIndexOutOfRange(self):
        stream = session("one\n")
        with self.assertRaises(DefaultIndexError) as ctx:
            select(Selected("Pick", [("one", 1)], default=1), stream)
        self.assertIsInstance(ctx.exception, MisconfiguredDefaultError)
        self.assertEqual((ctx.exception.index, ctx.exception.size), (1, 1))
        self.assertEqual(stream.writer.getvalue(), "")

    def testBindCalledOnceWithStream(self):
        calls = []
        field = Selected("Pick", [Choice("go", "went", bind=calls.append), Choice("stay", "stayed")])
        stream = session("go\n")
        self.assertEqual(select(field, stream), "went")
        self.assertEqual(calls, [stream])

    def testBindExceptionPropagates(self):
        def explode(stream):
            raise RuntimeError("boom")

        field = Selected("Pick", [Choice("go", 1, bind=explode)])
        with self.assertRaises(RuntimeError):
            select(field, session("1\n"))

    def testWrittenFieldRejected(self):
        with self.assertRaises(TypeError):
            select(Written("Name"), session("a\n"))


class TestMenuTree(TestCase):
    """Behavioral tests for the menu tree arena and its navigation."""

    def setUp(self):
        self.tree = MenuTree("Main")
        self.settings = self.tree.submenu(MenuTree.ROOT, "Settings")
        self.tree.leaf(self.settings, "Dark", "dark")
        self.tree.back(self.settings)
        self.tree.leaf(MenuTree.ROOT, "Quit", "quit")

    def testStructure(self):
        self.assertEqual(len(self.tree), 2)
        self.assertEqual(self.tree.parent(self.settings), MenuTree.ROOT)
        self.assertIsNone(self.tree.parent(MenuTree.ROOT))
        self.assertEqual([entry.kind for entry in self.tree.entries(MenuTree.ROOT)], ["branch", "leaf"])

    def testNavigateDown(self):
        self.assertEqual(navigate(self.tree, session("settings\ndark\n")), "dark")

    def testNavigateBack(self):
        stream = session("1\n2\n2\n")
        self.assertEqual(navigate(self.tree, stream), "quit")
        self.assertEqual(stream.writer.getvalue().count("Main"), 2)

    def testLeafBinding(self):
        calls = []
        self.tree.leaf(MenuTree.ROOT, "Help", "help", bind=calls.append)
        stream = session("help\n")
        self.assertEqual(navigate(self.tree, stream), "help")
        self.assertEqual(calls, [stream])

    def testRootCannotGoBack(self):
        with self.assertRaises(ValueError):
            self.tree.back(MenuTree.ROOT)

    def testEmptyNodeRejected(self):
        self.tree.submenu(MenuTree.ROOT, "Empty")
        with self.assertRaises(ValueError):
            navigate(self.tree, session("empty\n"))

    def testUnknownNode(self):
        with self.assertRaises(IndexError):
            self.tree.leaf(9, "Lost", None)

    def testNodeDefault(self):
        tree = MenuTree("Main", default=1)
        tree.leaf(MenuTree.ROOT, "Yes", True)
        tree.leaf(MenuTree.ROOT, "No", False)
        self.assertIs(navigate(tree, session("maybe\n")), False)

    def testEndOfInputOnMovingDefaultsRaises(self):
        tree = MenuTree("Main", default=0)
        child = tree.submenu(MenuTree.ROOT, "Settings", default=0)
        tree.back(child)
        tree.leaf(child, "Dark", "dark")
        stream = session("")
        with self.assertRaises(NoMoreInputError):
            navigate(tree, stream)
        self.assertEqual(stream.writer.getvalue().count("Main"), 1)

    def testEndOfInputAfterMovingDown(self):
        tree = MenuTree("Main")
        child = tree.submenu(MenuTree.ROOT, "Settings", default=0)
        tree.back(child)
        with self.assertRaises(NoMoreInputError):
            navigate(tree, session("settings\n"))

    def testEndOfInputOnLeafDefault(self):
        tree = MenuTree("Main", default=0)
        tree.leaf(MenuTree.ROOT, "Quit", "quit")
        self.assertEqual(navigate(tree, session("")), "quit")

    def testDuplicatedLabelRejectedAtConstruction(self):
        with self.assertRaises(ValueError):
            self.tree.leaf(self.settings, "  back ", "oops")
        self.assertEqual(len(self.tree.entries(self.settings)), 2)

    def testDuplicatedSubmenuLabelLeavesTreeUnchanged(self):
        with self.assertRaises(ValueError):
            self.tree.submenu(MenuTree.ROOT, "quit")
        self.assertEqual(len(self.tree), 2)


class TestValues(TestCase):
    """Behavioral tests for the Values container."""

    def setUp(self):
        self.stream = session()
        self.values = Values(Format(chip="* ", line_break=False, suffix=": ", prefix=""), self.stream)

    def feed(self, text):
        self.stream.reader.write(text)
        self.stream.reader.seek(0)

    def testFieldFormatMergedOverContainer(self):
        self.feed("Ada\n1815\n")
        self.assertEqual(self.values.written(Written("Name")), "Ada")
        self.assertEqual(self.values.written(Written("Year", type=int, format=Format(suffix="? "))), 1815)
        self.assertEqual(self.stream.writer.getvalue(), "* Name: * Year? ")

    def testManyWrittenAndOrDefault(self):
        self.feed("a b\nabc\n")
        self.assertEqual(self.values.many_written(Written("Tags"), " "), ["a", "b"])
        self.assertEqual(self.values.written_or_default(Written("Count", type=int, default="1")), 1)

    def testSelectedAndNavigate(self):
        tree = MenuTree("Main")
        tree.leaf(MenuTree.ROOT, "Run", "run")
        self.feed("mit\nrun\n")
        self.assertEqual(self.values.selected(Selected("License", {"MIT": "mit"})), "mit")
        self.assertEqual(self.values.navigate(tree), "run")

    def testReentrantUseRaises(self):
        def nested(stream):
            self.values.written(Written("Inner"))

        self.feed("go\nName\n")
        with self.assertRaises(StreamBusyError):
            self.values.selected(Selected("Pick", [Choice("go", 1, bind=nested)]))
        self.assertEqual(self.values.written(Written("Name")), "Name")

    def testArgumentsChecked(self):
        with self.assertRaises(TypeError):
            Values(format={"chip": "* "})
        with self.assertRaises(TypeError):
            Values(stream=StringIO())

    def testDefaults(self):
        values = Values()
        self.assertEqual(values.format, Format())
        self.assertIsInstance(values.stream, MenuStream)


if __name__ == "__main__":
    unittest.main()

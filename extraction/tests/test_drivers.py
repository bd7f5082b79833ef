"""
Unit tests for drivers.py

Tests the namespace, enum and class drivers against events produced by the
declaration grammar.
"""

import unittest

from extraction.drivers import (
    AccumulatorState,
    ClassDriver,
    DriverStateError,
    EnumDriver,
    NamespaceDriver,
    annotation_keywords,
    attach_drivers,
)
from extraction.events import (
    DeclarationEvent,
    EnumMemberEvent,
    EventBus,
    EventType,
    MemberEvent,
    ScopeEvent,
)
from extraction.grammar import DeclarationParser
from extraction.models import Visibility


class DriverTestCase(unittest.TestCase):
    def setUp(self):
        self.bus = EventBus()
        self.enum_driver, self.class_driver = attach_drivers(self.bus, "test.h")
        self.published = []
        self.enum_driver.enum_available.connect(
            lambda key, data: self.published.append((key, data))
        )
        self.class_driver.class_available.connect(
            lambda key, data: self.published.append((key, data))
        )

    def tearDown(self):
        self.enum_driver.unsubscribe()
        self.class_driver.unsubscribe()

    def parse(self, text):
        result = DeclarationParser(self.bus).parse(text)
        self.assertTrue(result.success, result.remainder)
        return dict(self.published)


class TestNamespaceDriver(unittest.TestCase):
    """Test the namespace stack."""

    def test_one_pop_closes_shorthand_namespace(self):
        """Test a single } closes every segment of a::b::c."""
        bus = EventBus()
        driver = NamespaceDriver().register(bus)
        for name in ("a", "b", "c"):
            bus.emit(DeclarationEvent(EventType.NAMESPACE, name, 0))
        bus.emit(ScopeEvent(EventType.SCOPE_PUSH, 1))
        self.assertEqual(driver.current_namespace(), "a::b::c")

        bus.emit(ScopeEvent(EventType.SCOPE_PUSH, 2))
        bus.emit(ScopeEvent(EventType.SCOPE_POP, 1))
        self.assertEqual(driver.namespace_path(), ["a", "b", "c"])

        bus.emit(ScopeEvent(EventType.SCOPE_POP, 0))
        self.assertEqual(driver.namespace_path(), [])
        self.assertEqual(driver.depth, 0)

    def test_unsubscribe_stops_tracking(self):
        """Test events after unsubscribe are ignored."""
        bus = EventBus()
        driver = NamespaceDriver().register(bus)
        driver.unsubscribe()
        driver.unsubscribe()
        bus.emit(DeclarationEvent(EventType.NAMESPACE, "a", 0))
        bus.emit(ScopeEvent(EventType.SCOPE_PUSH, 1))
        self.assertEqual(driver.stack, [])
        self.assertEqual(driver.depth, 0)


class TestEnumDriver(DriverTestCase):
    """Test EnumDriver accumulation and publishing."""

    def test_namespaced_enums(self):
        """Test enums are keyed by their qualified name."""
        enums = self.parse("namespace a::b { enum E { x }; enum class G { y, z }; } enum F { w };")
        self.assertEqual(list(enums), ["a::b::E", "a::b::G", "F"])
        self.assertEqual(enums["a::b::G"].identifiers, ["y", "z"])
        self.assertTrue(enums["a::b::G"].is_class_enum)
        self.assertEqual(enums["F"].namespaces, [])
        self.assertEqual(enums["F"].defined_in, "test.h")

    def test_enum_inside_nested_block(self):
        """Test a bare { } block does not close the enclosing namespace."""
        enums = self.parse("namespace n { { enum E { x }; } }")
        self.assertEqual(list(enums), ["n::E"])

    def test_member_without_open_enum_raises(self):
        """Test an enum member with no open enum."""
        with self.assertRaises(DriverStateError):
            self.enum_driver.on_enum_member(EnumMemberEvent("E", "x"))

    def test_second_open_raises(self):
        """Test opening an enum while another is open."""
        self.enum_driver.on_enum(DeclarationEvent(EventType.ENUM, "A", 0))
        self.assertIs(self.enum_driver.state, AccumulatorState.OPEN)
        with self.assertRaises(DriverStateError):
            self.enum_driver.on_enum(DeclarationEvent(EventType.ENUM, "B", 0))

    def test_publish_returns_to_idle(self):
        """Test the accumulator is reset after publishing."""
        self.parse("enum E { x, y };")
        self.assertIs(self.enum_driver.state, AccumulatorState.IDLE)
        self.assertEqual(self.enum_driver.current.name, "")
        self.assertEqual(self.enum_driver.current.identifiers, [])

    def test_published_entity_is_a_copy(self):
        """Test mutating a published enum does not reach the driver."""
        self.parse("enum E { x };")
        _key, data = self.published[0]
        data.identifiers.append("mutated")
        self.assertEqual(self.enum_driver.current.identifiers, [])


class TestClassDriver(DriverTestCase):
    """Test ClassDriver accumulation, visibility and annotations."""

    def test_default_visibility(self):
        """Test struct members default to public and class members to private."""
        classes = self.parse("struct S { int a; }; class C { int b; public: int c; };")
        self.assertEqual(classes["S"].members[0].visibility, Visibility.PUBLIC)
        self.assertTrue(classes["S"].is_struct)
        self.assertEqual(
            [(m.name, m.visibility) for m in classes["C"].members],
            [("b", Visibility.PRIVATE), ("c", Visibility.PUBLIC)],
        )

    def test_class_level_cereal_marks_every_member(self):
        """Test [[cereal]] before a class applies to that class only."""
        classes = self.parse("[[cereal]] struct A { int x; int y; }; struct B { int z; };")
        self.assertTrue(classes["A"].serializable)
        self.assertTrue(all(m.serializable for m in classes["A"].members))
        self.assertFalse(classes["B"].serializable)
        self.assertFalse(classes["B"].members[0].serializable)

    def test_member_annotations(self):
        """Test per-member annotation flags are one-shot."""
        classes = self.parse("class C { [[cereal, get set]] int x; [[get]] int y; int z; };")
        flags = [
            (m.name, m.serializable, m.generate_getter, m.generate_setter)
            for m in classes["C"].members
        ]
        self.assertEqual(
            flags,
            [("x", True, True, True), ("y", False, True, False), ("z", False, False, False)],
        )

    def test_method_consumes_pending_annotation(self):
        """Test an annotation in front of a method is not carried to the next member."""
        classes = self.parse("class C { [[get]] void f(); int x; };")
        self.assertFalse(classes["C"].members[0].generate_getter)
        self.assertEqual(classes["C"].methods[0].name, "f")

    def test_parents_and_namespace(self):
        """Test parent names and the enclosing namespace are recorded."""
        classes = self.parse("namespace shop { class Customer : public Person, Auditable { }; }")
        customer = classes["shop::Customer"]
        self.assertEqual(customer.parents, ["Person", "Auditable"])
        self.assertEqual(customer.namespaces, ["shop"])

    def test_member_without_open_class_raises(self):
        """Test a member with no open class."""
        with self.assertRaises(DriverStateError):
            self.class_driver.on_member(MemberEvent("int", "x"))

    def test_second_open_raises(self):
        """Test opening a class while another is open."""
        self.class_driver.on_class(DeclarationEvent(EventType.CLASS, "A", 0))
        with self.assertRaises(DriverStateError):
            self.class_driver.on_class(DeclarationEvent(EventType.STRUCT, "B", 0))


class TestHelpers(unittest.TestCase):
    def test_annotation_keywords(self):
        self.assertEqual(annotation_keywords(" cereal,get  set "), {"cereal", "get", "set"})
        self.assertEqual(annotation_keywords(""), set())

    def test_attach_drivers_without_file(self):
        """Test drivers attached without a file path still publish."""
        bus = EventBus()
        enum_driver, class_driver = attach_drivers(bus)
        self.assertIsInstance(enum_driver, EnumDriver)
        self.assertIsInstance(class_driver, ClassDriver)
        self.assertEqual(enum_driver.current_file, "")
        published = []
        enum_driver.enum_available.connect(lambda key, data: published.append(key))
        self.assertTrue(DeclarationParser(bus).parse("enum E { x };").success)
        self.assertEqual(published, ["E"])


if __name__ == "__main__":
    unittest.main()

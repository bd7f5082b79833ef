"""
Event-driven accumulators that rebuild named structure from grammar events.

* :class:`NamespaceDriver` keeps the stack of currently open namespaces.
* :class:`EnumDriver` builds one :class:`~extraction.models.EnumData` per
  enum declaration and publishes it on its ``enum_available`` signal.
* :class:`ClassDriver` does the same for classes and structs through
  ``class_available``.

Each driver exclusively owns its accumulator. Published entities are deep
copies; the driver keeps no reference to them after publishing. Drivers are
per-document: build fresh instances before parsing another document and
release their subscriptions with :meth:`unsubscribe`.
"""

import logging
import re
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from core.qualified_name import join_namespace
from extraction.config import (
    ANNOTATION_GETTER,
    ANNOTATION_SERIALIZABLE,
    ANNOTATION_SETTER,
)
from extraction.events import (
    AnnotationEvent,
    ClassPopEvent,
    DeclarationEvent,
    EnumMemberEvent,
    EventBus,
    EventType,
    MemberEvent,
    MethodEvent,
    ParentEvent,
    ScopeEvent,
    Signal,
    Subscription,
    VisibilityEvent,
)
from extraction.models import (
    ClassData,
    EnumData,
    MemberData,
    MethodData,
    NamespaceEntry,
    Visibility,
)

logger = logging.getLogger(__name__)

_ANNOTATION_SPLIT_RE = re.compile(r"[\s,]+")


class AccumulatorState(Enum):
    IDLE = "idle"
    OPEN = "open"


class DriverStateError(RuntimeError):
    """Raised when an event arrives in a state that cannot accept it."""


def annotation_keywords(text: str) -> Set[str]:
    """Split annotation text (``cereal, get set``) into its keywords."""
    return {word for word in _ANNOTATION_SPLIT_RE.split(text.strip()) if word}


class _BusListener:
    """Holds the subscriptions a driver made on a bus."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []

    def _subscribe(self, bus: EventBus, event_type: EventType, handler: Callable) -> None:
        self._subscriptions.append(bus.subscribe(event_type, handler))

    def unsubscribe(self) -> None:
        """Release every subscription. Safe to call more than once."""
        for subscription in self._subscriptions:
            subscription.release()
        self._subscriptions = []


class NamespaceDriver(_BusListener):
    """Tracks the enclosing namespace path from namespace and scope events.

    A namespace seen at depth ``d`` is pushed with ``scope_depth = d + 1``,
    the depth inside its body. After each scope pop, every trailing entry
    whose ``scope_depth`` is greater than the new depth is removed, so one
    ``}`` closing ``namespace a::b::c {`` removes all three segments while an
    enum or class closing inside a namespace leaves it in place.
    """

    def __init__(self) -> None:
        super().__init__()
        self.stack: List[NamespaceEntry] = []
        self.depth = 0

    def register(self, bus: EventBus) -> "NamespaceDriver":
        self._subscribe(bus, EventType.NAMESPACE, self.on_namespace)
        self._subscribe(bus, EventType.SCOPE_PUSH, self.on_scope_push)
        self._subscribe(bus, EventType.SCOPE_POP, self.on_scope_pop)
        return self

    def namespace_path(self) -> List[str]:
        return [entry.name for entry in self.stack]

    def current_namespace(self) -> str:
        return join_namespace(self.namespace_path())

    def on_namespace(self, event: DeclarationEvent) -> None:
        self.stack.append(NamespaceEntry(event.name, event.depth + 1))

    def on_scope_push(self, event: ScopeEvent) -> None:
        self.depth += 1

    def on_scope_pop(self, event: ScopeEvent) -> None:
        self.depth -= 1
        while self.stack and self.stack[-1].scope_depth > self.depth:
            entry = self.stack.pop()
            logger.debug("Namespace %s closed at depth %d", entry.name, self.depth)


class EnumDriver(_BusListener):
    """Accumulates enum declarations: IDLE -> OPEN -> publish -> IDLE.

    Listeners connected to :attr:`enum_available` receive
    ``(fully_qualified_name, EnumData)`` as each enum body closes.
    """

    def __init__(self) -> None:
        super().__init__()
        self.namespaces = NamespaceDriver()
        self.enum_available = Signal("enum_available")
        self.state = AccumulatorState.IDLE
        self.current = EnumData()
        self.current_file = ""

    def register(self, bus: EventBus) -> "EnumDriver":
        self.namespaces.register(bus)
        self._subscribe(bus, EventType.ENUM, self.on_enum)
        self._subscribe(bus, EventType.ENUM_CLASS, self.on_enum)
        self._subscribe(bus, EventType.ENUM_MEMBER, self.on_enum_member)
        self._subscribe(bus, EventType.SCOPE_POP, self.on_scope_pop)
        return self

    def unsubscribe(self) -> None:
        self.namespaces.unsubscribe()
        super().unsubscribe()

    def set_current_file(self, file_path: str) -> None:
        self.current_file = file_path

    def on_enum(self, event: DeclarationEvent) -> None:
        if self.state is not AccumulatorState.IDLE:
            raise DriverStateError(
                f"Enum {event.name} opened while {self.current.name} is still open"
            )
        self.current = EnumData(
            namespaces=self.namespaces.namespace_path(),
            name=event.name,
            is_class_enum=event.type is EventType.ENUM_CLASS,
            defined_in=self.current_file,
        )
        self.state = AccumulatorState.OPEN

    def on_enum_member(self, event: EnumMemberEvent) -> None:
        if self.state is not AccumulatorState.OPEN:
            raise DriverStateError(
                f"Enum member {event.identifier} seen with no open enum"
            )
        self.current.identifiers.append(event.identifier)

    def on_scope_pop(self, event: ScopeEvent) -> None:
        if self.state is AccumulatorState.OPEN:
            self._publish()

    def _publish(self) -> None:
        published = self.current.copy()
        key = published.full_name()
        self.current = EnumData()
        self.state = AccumulatorState.IDLE
        logger.debug("Enum %s published with %d identifiers", key, len(published.identifiers))
        self.enum_available.emit(key, published)


class ClassDriver(_BusListener):
    """Accumulates class/struct declarations until their closing ``};``.

    Annotations seen while no class is open apply to the next class: a
    ``cereal`` keyword marks every member of that class serializable.
    Annotations seen inside a class body set one-shot flags that the very
    next member or method consumes.
    """

    def __init__(self) -> None:
        super().__init__()
        self.namespaces = NamespaceDriver()
        self.class_available = Signal("class_available")
        self.state = AccumulatorState.IDLE
        self.current = ClassData()
        self.current_file = ""
        self.visibility = Visibility.PRIVATE
        self.pending_class_serializable = False
        self._reset_pending()

    def register(self, bus: EventBus) -> "ClassDriver":
        self.namespaces.register(bus)
        self._subscribe(bus, EventType.ANNOTATION, self.on_annotation)
        self._subscribe(bus, EventType.CLASS, self.on_class)
        self._subscribe(bus, EventType.STRUCT, self.on_class)
        self._subscribe(bus, EventType.PARENT, self.on_parent)
        self._subscribe(bus, EventType.VISIBILITY, self.on_visibility)
        self._subscribe(bus, EventType.MEMBER, self.on_member)
        self._subscribe(bus, EventType.METHOD, self.on_method)
        self._subscribe(bus, EventType.CLASS_POP, self.on_class_pop)
        return self

    def unsubscribe(self) -> None:
        self.namespaces.unsubscribe()
        super().unsubscribe()

    def set_current_file(self, file_path: str) -> None:
        self.current_file = file_path

    def _reset_pending(self) -> None:
        self.pending_serializable = False
        self.pending_getter = False
        self.pending_setter = False

    def _require_open(self, what: str) -> None:
        if self.state is not AccumulatorState.OPEN:
            raise DriverStateError(f"{what} seen with no open class")

    def on_annotation(self, event: AnnotationEvent) -> None:
        keywords = annotation_keywords(event.text)
        if self.state is AccumulatorState.IDLE:
            if ANNOTATION_SERIALIZABLE in keywords:
                self.pending_class_serializable = True
            return
        self.pending_serializable |= ANNOTATION_SERIALIZABLE in keywords
        self.pending_getter |= ANNOTATION_GETTER in keywords
        self.pending_setter |= ANNOTATION_SETTER in keywords

    def on_class(self, event: DeclarationEvent) -> None:
        if self.state is not AccumulatorState.IDLE:
            raise DriverStateError(
                f"Class {event.name} opened while {self.current.name} is still open"
            )
        is_struct = event.type is EventType.STRUCT
        self.current = ClassData(
            defined_in=self.current_file,
            namespaces=self.namespaces.namespace_path(),
            name=event.name,
            is_struct=is_struct,
            serializable=self.pending_class_serializable,
        )
        self.visibility = Visibility.PUBLIC if is_struct else Visibility.PRIVATE
        self.pending_class_serializable = False
        self._reset_pending()
        self.state = AccumulatorState.OPEN

    def on_parent(self, event: ParentEvent) -> None:
        self._require_open(f"Parent {event.name}")
        self.current.parents.append(event.name)

    def on_visibility(self, event: VisibilityEvent) -> None:
        self._require_open("Visibility label")
        self.visibility = event.visibility

    def on_member(self, event: MemberEvent) -> None:
        self._require_open(f"Member {event.name}")
        self.current.members.append(
            MemberData(
                type=event.type_name,
                name=event.name,
                visibility=self.visibility,
                is_const=event.is_const,
                is_static=event.is_static,
                serializable=self.pending_serializable or self.current.serializable,
                generate_getter=self.pending_getter,
                generate_setter=self.pending_setter,
            )
        )
        self._reset_pending()

    def on_method(self, event: MethodEvent) -> None:
        self._require_open(f"Method {event.name}")
        self.current.methods.append(
            MethodData(
                return_type=event.return_type,
                name=event.name,
                visibility=self.visibility,
                is_const=event.is_const,
                is_static=event.is_static,
                is_virtual=event.is_virtual,
            )
        )
        self._reset_pending()

    def on_class_pop(self, event: ClassPopEvent) -> None:
        self._require_open(f"End of class {event.name}")
        published = self.current.copy()
        key = published.full_name()
        self.current = ClassData()
        self.state = AccumulatorState.IDLE
        self.visibility = Visibility.PRIVATE
        self._reset_pending()
        logger.debug(
            "Class %s published with %d members and %d methods",
            key,
            len(published.members),
            len(published.methods),
        )
        self.class_available.emit(key, published)


def attach_drivers(
    bus: EventBus, file_path: Optional[str] = None
) -> Tuple[EnumDriver, ClassDriver]:
    """Create and register an enum and a class driver on ``bus``."""
    enum_driver = EnumDriver().register(bus)
    class_driver = ClassDriver().register(bus)
    if file_path is not None:
        enum_driver.set_current_file(file_path)
        class_driver.set_current_file(file_path)
    return enum_driver, class_driver

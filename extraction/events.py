"""
Typed grammar events and the synchronous bus that delivers them.

Grammar rules never mutate driver state directly; they build an event and
hand it to :class:`EventBus`. Delivery happens on the caller's stack, in
subscription order, and a handler must return before matching continues.
Subscriptions are explicit handles that must be released when the
subscriber is done with a document.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from extraction.models import Visibility

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Every notification the declaration grammar can emit."""

    SCOPE_PUSH = "scope_push"
    SCOPE_POP = "scope_pop"
    NAMESPACE = "namespace"
    ENUM = "enum"
    ENUM_CLASS = "enum_class"
    ENUM_MEMBER = "enum_member"
    CLASS = "class"
    STRUCT = "struct"
    CLASS_POP = "class_pop"
    PARENT = "parent"
    VISIBILITY = "visibility"
    MEMBER = "member"
    METHOD = "method"
    ANNOTATION = "annotation"


@dataclass(frozen=True)
class ScopeEvent:
    """Tracked brace: ``depth`` is the scope depth after the brace."""

    type: EventType
    depth: int


@dataclass(frozen=True)
class DeclarationEvent:
    """A named declaration head (namespace, enum, enum class, class, struct).

    ``depth`` is the tracked scope depth at which the declaration appears,
    i.e. before its own body is entered.
    """

    type: EventType
    name: str
    depth: int


@dataclass(frozen=True)
class EnumMemberEvent:
    enum_name: str
    identifier: str
    type: EventType = field(default=EventType.ENUM_MEMBER, init=False)


@dataclass(frozen=True)
class ClassPopEvent:
    name: str
    type: EventType = field(default=EventType.CLASS_POP, init=False)


@dataclass(frozen=True)
class ParentEvent:
    name: str
    visibility: Visibility
    type: EventType = field(default=EventType.PARENT, init=False)


@dataclass(frozen=True)
class VisibilityEvent:
    visibility: Visibility
    type: EventType = field(default=EventType.VISIBILITY, init=False)


@dataclass(frozen=True)
class MemberEvent:
    type_name: str
    name: str
    is_const: bool = False
    is_static: bool = False
    type: EventType = field(default=EventType.MEMBER, init=False)


@dataclass(frozen=True)
class MethodEvent:
    return_type: str
    name: str
    is_const: bool = False
    is_static: bool = False
    is_virtual: bool = False
    type: EventType = field(default=EventType.METHOD, init=False)


@dataclass(frozen=True)
class AnnotationEvent:
    text: str
    type: EventType = field(default=EventType.ANNOTATION, init=False)


Event = Union[
    ScopeEvent,
    DeclarationEvent,
    EnumMemberEvent,
    ClassPopEvent,
    ParentEvent,
    VisibilityEvent,
    MemberEvent,
    MethodEvent,
    AnnotationEvent,
]

Handler = Callable[[Any], None]


class Subscription:
    """Handle returned by a connect/subscribe call; release it to detach."""

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def release(self) -> None:
        """Detach the handler. Releasing twice is a no-op."""
        if self._release is not None:
            release, self._release = self._release, None
            release()


class Signal:
    """A list of handlers called synchronously, in connection order."""

    def __init__(self, name: str = "signal"):
        self.name = name
        self._handlers: List[Handler] = []

    def connect(self, handler: Handler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(lambda: self._disconnect(handler))

    def _disconnect(self, handler: Handler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            logger.debug("Handler already disconnected from %s", self.name)

    def emit(self, *args: Any) -> None:
        # Copy so a handler may release its own subscription mid-delivery.
        for handler in list(self._handlers):
            handler(*args)


class EventBus:
    """Routes grammar events to the handlers subscribed to their type."""

    def __init__(self) -> None:
        self._signals: Dict[EventType, Signal] = defaultdict(Signal)
        self._catch_all = Signal("all_events")

    def subscribe(self, event_type: EventType, handler: Handler) -> Subscription:
        signal = self._signals[event_type]
        signal.name = event_type.value
        return signal.connect(handler)

    def subscribe_all(self, handler: Handler) -> Subscription:
        """Receive every event, after the type-specific handlers."""
        return self._catch_all.connect(handler)

    def emit(self, event: Event) -> None:
        signal = self._signals.get(event.type)
        if signal is not None:
            signal.emit(event)
        self._catch_all.emit(event)

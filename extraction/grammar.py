"""
Single-pass declaration grammar for C++ headers.

The parser walks the document once, left to right, and reports what it
recognizes as typed events on an :class:`~extraction.events.EventBus`.
It never builds a tree and never mutates listener state directly.

Top-level alternation, tried in this order at every position::

    scope-push | namespace | enum | template (skipped) | class/struct | scope-pop

Each rule looks ahead far enough to commit before it emits, so an event is
only published for a construct the grammar actually accepted. A position
where no alternative matches ends the parse with ``success=False`` and the
unconsumed remainder.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.qualified_name import normalize_cpp_type
from extraction.config import (
    CLASS_KEYWORD,
    CONSTRUCTOR_SPECIFIERS,
    ENUM_KEYWORD,
    FINAL_SPECIFIER,
    IGNORED_MODIFIERS,
    METHOD_DEFINITION_MARKERS,
    NAMESPACE_KEYWORD,
    NOEXCEPT_SPECIFIER,
    OPERATOR_KEYWORD,
    OVERRIDE_SPECIFIER,
    RECORDED_MODIFIERS,
    STRUCT_KEYWORD,
    TEMPLATE_KEYWORD,
    UNSUPPORTED_BODY_KEYWORDS,
    VISIBILITY_KEYWORDS,
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
    VisibilityEvent,
)
from extraction.models import Visibility
from extraction.scanner import SourceCursor

logger = logging.getLogger(__name__)

_PLAIN_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPERATOR_SYMBOL_RE = re.compile(
    r"\(\)|\[\]|<=>|<<=|>>=|->\*|->|\+\+|--|&&|\|\||<<|>>|[-+*/%^&|~!=<>,]=?"
)


@dataclass
class ParseResult:
    """Outcome of one :meth:`DeclarationParser.parse` call.

    Attributes:
        success: True when the whole document was consumed.
        remainder: Unconsumed text starting at the construct that failed
            (empty on success).
        offset: Character offset of ``remainder`` in the input.
        depth: Tracked scope depth when parsing stopped.
    """

    success: bool
    remainder: str
    offset: int
    depth: int


class DeclarationParser:
    """Recursive-descent recognizer for namespaces, enums and classes.

    One parser instance may parse several documents, one at a time. The
    tracked scope depth is reset at the start of every :meth:`parse`.
    """

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._cursor = SourceCursor("")
        self._depth = 0
        self._active = False

    @property
    def depth(self) -> int:
        return self._depth

    def parse(self, text: str) -> ParseResult:
        """Parse ``text`` and emit events for every recognized declaration.

        Raises:
            RuntimeError: If called again while a parse is in progress (for
                example from inside an event handler).
        """
        if self._active:
            raise RuntimeError("DeclarationParser.parse is not reentrant")
        self._active = True
        try:
            self._cursor = SourceCursor(text)
            self._depth = 0
            success = self._parse_document()
            cursor = self._cursor
            if success:
                return ParseResult(True, "", cursor.pos, self._depth)
            logger.debug(
                "Parse stopped at offset %d (depth %d)", cursor.pos, self._depth
            )
            return ParseResult(False, cursor.remainder(), cursor.pos, self._depth)
        finally:
            self._active = False

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def _parse_document(self) -> bool:
        cursor = self._cursor
        while not cursor.at_end():
            mark = cursor.mark()
            if not self._parse_top_level_item():
                cursor.reset(mark)
                return False
        return True

    def _parse_top_level_item(self) -> bool:
        cursor = self._cursor
        if cursor.peek("{"):
            self._scope_push()
            return True
        if cursor.peek_keyword(NAMESPACE_KEYWORD):
            return self._parse_namespace()
        if cursor.peek_keyword(ENUM_KEYWORD):
            return self._parse_enum()
        if cursor.peek_keyword(TEMPLATE_KEYWORD):
            return self._skip_template()
        if (
            cursor.peek("[[")
            or cursor.peek_keyword(CLASS_KEYWORD)
            or cursor.peek_keyword(STRUCT_KEYWORD)
        ):
            return self._parse_class()
        if cursor.peek("}"):
            if self._depth == 0:
                return False
            self._scope_pop()
            return True
        return False

    def _scope_push(self) -> None:
        self._cursor.match("{")
        self._depth += 1
        self.bus.emit(ScopeEvent(EventType.SCOPE_PUSH, self._depth))

    def _scope_pop(self) -> None:
        self._cursor.match("}")
        self._depth -= 1
        self.bus.emit(ScopeEvent(EventType.SCOPE_POP, self._depth))

    # ------------------------------------------------------------------
    # namespace a::b::c {
    # ------------------------------------------------------------------

    def _parse_namespace(self) -> bool:
        cursor = self._cursor
        cursor.match_keyword(NAMESPACE_KEYWORD)
        name = cursor.match_identifier()
        if name is None:
            return False
        names = [name]
        while cursor.match("::"):
            name = cursor.match_identifier()
            if name is None:
                return False
            names.append(name)
        if not cursor.peek("{"):
            return False

        depth = self._depth
        for name in names:
            self.bus.emit(DeclarationEvent(EventType.NAMESPACE, name, depth))
        self._scope_push()
        return True

    # ------------------------------------------------------------------
    # enum [class] Name [: type] { a [= v], ... };
    # ------------------------------------------------------------------

    def _parse_enum(self) -> bool:
        cursor = self._cursor
        cursor.match_keyword(ENUM_KEYWORD)
        is_class_enum = cursor.match_keyword(CLASS_KEYWORD) or cursor.match_keyword(
            STRUCT_KEYWORD
        )
        name = cursor.match_identifier()
        if name is None:
            return False
        if cursor.match_colon():
            if self._match_type_unit() is None:
                return False
            while self._match_type_unit() is not None:
                continue
        if cursor.match(";"):
            # Opaque declaration, nothing to record.
            return True
        if not cursor.peek("{"):
            return False

        event_type = EventType.ENUM_CLASS if is_class_enum else EventType.ENUM
        self.bus.emit(DeclarationEvent(event_type, name, self._depth))
        self._scope_push()
        while not cursor.peek("}"):
            identifier = cursor.match_identifier()
            if identifier is None:
                return False
            if cursor.match("=") and cursor.consume_until(",}") is None:
                return False
            self.bus.emit(EnumMemberEvent(name, identifier))
            if not cursor.match(","):
                break
        if not cursor.peek("}"):
            return False
        self._scope_pop()
        return cursor.match(";")

    # ------------------------------------------------------------------
    # template <...> declaration (skipped without events)
    # ------------------------------------------------------------------

    def _skip_template(self) -> bool:
        cursor = self._cursor
        while cursor.match_keyword(TEMPLATE_KEYWORD):
            if cursor.skip_balanced("<", ">") is None:
                return False

        if cursor.match_keyword(CLASS_KEYWORD) or cursor.match_keyword(STRUCT_KEYWORD):
            if cursor.consume_until("{;") is None:
                return False
            if cursor.match(";"):
                return True
            if cursor.skip_balanced("{", "}") is None:
                return False
            return cursor.match(";")

        # Function or variable template: up to `;` or through a body.
        if cursor.consume_until("{;") is None:
            return False
        if cursor.match(";"):
            return True
        if cursor.skip_balanced("{", "}") is None:
            return False
        cursor.match(";")
        return True

    # ------------------------------------------------------------------
    # [[...]]* class|struct Name [final] [: parents] { body };
    # ------------------------------------------------------------------

    def _parse_class(self) -> bool:
        cursor = self._cursor
        annotations: List[str] = []
        while True:
            annotation = cursor.match_annotation()
            if annotation is None:
                break
            annotations.append(annotation)

        if cursor.match_keyword(CLASS_KEYWORD):
            is_struct = False
        elif cursor.match_keyword(STRUCT_KEYWORD):
            is_struct = True
        else:
            return False

        name = cursor.match_identifier()
        if name is None:
            return False
        if cursor.match(";"):
            # Forward declaration.
            return True
        cursor.match_keyword(FINAL_SPECIFIER)

        default_visibility = Visibility.PUBLIC if is_struct else Visibility.PRIVATE
        parents: List[Tuple[str, Visibility]] = []
        if cursor.match_colon():
            while True:
                parent = self._match_parent(default_visibility)
                if parent is None:
                    return False
                parents.append(parent)
                if not cursor.match(","):
                    break
        if not cursor.peek("{"):
            return False

        for annotation in annotations:
            self.bus.emit(AnnotationEvent(annotation))
        event_type = EventType.STRUCT if is_struct else EventType.CLASS
        self.bus.emit(DeclarationEvent(event_type, name, self._depth))
        for parent_name, visibility in parents:
            self.bus.emit(ParentEvent(parent_name, visibility))
        self._scope_push()

        return self._parse_class_body(name)

    def _match_parent(self, default_visibility: Visibility) -> Optional[Tuple[str, Visibility]]:
        cursor = self._cursor
        visibility = default_visibility
        cursor.match_keyword("virtual")
        word = cursor.peek_identifier()
        if word in VISIBILITY_KEYWORDS:
            cursor.match_identifier()
            visibility = Visibility(word)
        cursor.match_keyword("virtual")
        parent = self._match_type_unit(allow_suffix=False)
        if parent is None:
            return None
        cursor.match("...")
        return parent, visibility

    def _parse_class_body(self, class_name: str) -> bool:
        cursor = self._cursor
        while True:
            if cursor.peek("}"):
                mark = cursor.mark()
                cursor.match("}")
                if not cursor.match(";"):
                    cursor.reset(mark)
                    return False
                cursor.reset(mark)
                self._scope_pop()
                cursor.match(";")
                self.bus.emit(ClassPopEvent(class_name))
                return True

            annotation = cursor.match_annotation()
            if annotation is not None:
                self.bus.emit(AnnotationEvent(annotation))
                continue

            if self._at_constructor(class_name):
                if not self._skip_constructor(class_name):
                    return False
                continue

            if cursor.peek_keyword(TEMPLATE_KEYWORD):
                if not self._skip_template():
                    return False
                continue

            word = cursor.peek_identifier()
            if word in VISIBILITY_KEYWORDS:
                cursor.match_identifier()
                if not cursor.match_colon():
                    return False
                self.bus.emit(VisibilityEvent(Visibility(word)))
                continue

            if word in UNSUPPORTED_BODY_KEYWORDS or (word is None and not cursor.peek("::")):
                return False
            if not self._parse_member_or_method():
                return False

    # ------------------------------------------------------------------
    # Constructors and destructors (consumed, never reported)
    # ------------------------------------------------------------------

    def _at_constructor(self, class_name: str) -> bool:
        cursor = self._cursor
        mark = cursor.mark()
        try:
            while cursor.peek_identifier() in CONSTRUCTOR_SPECIFIERS:
                cursor.match_identifier()
            cursor.match("~")
            return cursor.match_identifier() == class_name and cursor.peek("(")
        finally:
            cursor.reset(mark)

    def _skip_constructor(self, class_name: str) -> bool:
        cursor = self._cursor
        while cursor.peek_identifier() in CONSTRUCTOR_SPECIFIERS:
            cursor.match_identifier()
        cursor.match("~")
        cursor.match_identifier()
        if cursor.skip_balanced("(", ")") is None:
            return False
        if not self._skip_noexcept():
            return False

        if cursor.match_colon():
            while True:
                if self._match_type_unit(allow_suffix=False) is None:
                    return False
                if cursor.peek("("):
                    initializer = cursor.skip_balanced("(", ")")
                else:
                    initializer = cursor.skip_balanced("{", "}")
                if initializer is None:
                    return False
                cursor.match("...")
                if not cursor.match(","):
                    break

        return self._skip_function_end()

    def _skip_noexcept(self) -> bool:
        cursor = self._cursor
        if cursor.match_keyword(NOEXCEPT_SPECIFIER) and cursor.peek("("):
            return cursor.skip_balanced("(", ")") is not None
        return True

    def _skip_function_end(self) -> bool:
        """Consume ``;``, ``= 0|default|delete ;`` or a body with optional ``;``."""
        cursor = self._cursor
        if cursor.match(";"):
            return True
        if cursor.match("="):
            marker = "0" if cursor.match("0") else cursor.match_identifier()
            if marker not in METHOD_DEFINITION_MARKERS:
                return False
            return cursor.match(";")
        if cursor.skip_balanced("{", "}") is None:
            return False
        cursor.match(";")
        return True

    # ------------------------------------------------------------------
    # Members and methods
    # ------------------------------------------------------------------

    def _parse_member_or_method(self) -> bool:
        cursor = self._cursor
        is_const = False
        is_static = False
        is_virtual = False
        while True:
            word = cursor.peek_identifier()
            if word in RECORDED_MODIFIERS:
                is_static = is_static or word == "static"
                is_const = is_const or word == "const"
                is_virtual = is_virtual or word == "virtual"
            elif word not in IGNORED_MODIFIERS:
                break
            cursor.match_identifier()

        units: List[str] = []
        name: Optional[str] = None
        while True:
            if cursor.match_keyword(OPERATOR_KEYWORD):
                operator = self._match_operator_name()
                if operator is None:
                    return False
                name, conversion_type = operator
                if conversion_type is not None and not units:
                    units.append(conversion_type)
                break
            unit = self._match_type_unit()
            if unit is None:
                break
            units.append(unit)

        if name is None:
            if len(units) < 2 or not _PLAIN_NAME_RE.fullmatch(units[-1]):
                return False
            name = units.pop()
        if not units:
            return False
        type_name = normalize_cpp_type(" ".join(units))

        if cursor.peek("("):
            return self._finish_method(type_name, name, is_const, is_static, is_virtual)
        return self._finish_member(type_name, name, is_const or "const" in units, is_static)

    def _finish_member(self, type_name: str, name: str, is_const: bool, is_static: bool) -> bool:
        cursor = self._cursor
        while cursor.peek("["):
            extent = cursor.skip_balanced("[", "]")
            if extent is None:
                return False
            type_name += normalize_cpp_type(extent)
        if cursor.match_colon() and cursor.consume_until(";={") is None:
            return False
        if cursor.match("="):
            if cursor.consume_until(";") is None:
                return False
        elif cursor.peek("{"):
            if cursor.skip_balanced("{", "}") is None:
                return False
        if not cursor.match(";"):
            return False
        self.bus.emit(MemberEvent(type_name, name, is_const=is_const, is_static=is_static))
        return True

    def _finish_method(
        self,
        return_type: str,
        name: str,
        leading_const: bool,
        is_static: bool,
        is_virtual: bool,
    ) -> bool:
        cursor = self._cursor
        if leading_const:
            return_type = f"const {return_type}"
        if cursor.skip_balanced("(", ")") is None:
            return False

        is_const = False
        while True:
            if cursor.match_keyword("const"):
                is_const = True
            elif cursor.match_keyword(OVERRIDE_SPECIFIER):
                is_virtual = True
            elif cursor.match_keyword(FINAL_SPECIFIER):
                continue
            elif cursor.peek_keyword(NOEXCEPT_SPECIFIER):
                if not self._skip_noexcept():
                    return False
            elif cursor.match("&&") or cursor.match("&"):
                continue
            elif cursor.match("->"):
                if self._match_type_unit() is None:
                    return False
            else:
                break

        if not self._skip_function_end():
            return False
        self.bus.emit(
            MethodEvent(
                return_type,
                name,
                is_const=is_const,
                is_static=is_static,
                is_virtual=is_virtual,
            )
        )
        return True

    def _match_operator_name(self) -> Optional[Tuple[str, Optional[str]]]:
        """Match what follows ``operator``.

        Returns:
            ``(name, conversion_type)`` where ``conversion_type`` is set for
            conversion operators (``operator bool``), or ``None`` on mismatch.
        """
        cursor = self._cursor
        cursor.skip()
        match = _OPERATOR_SYMBOL_RE.match(cursor.text, cursor.pos)
        if match is not None:
            cursor.pos = match.end()
            return f"{OPERATOR_KEYWORD}{match.group(0)}", None
        target = self._match_type_unit()
        if target is None:
            return None
        if target in ("new", "delete"):
            suffix = "[]" if cursor.match("[]") else ""
            return f"{OPERATOR_KEYWORD} {target}{suffix}", None
        return f"{OPERATOR_KEYWORD} {target}", target

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _match_type_unit(self, allow_suffix: bool = True) -> Optional[str]:
        """Match ``[::]ident(::ident)*`` with template arguments and ``*``/``&``.

        Returns:
            The normalized spelling, or ``None`` with the cursor unchanged.
        """
        cursor = self._cursor
        mark = cursor.mark()
        pieces: List[str] = []
        if cursor.match("::"):
            pieces.append("::")
        identifier = cursor.match_identifier()
        if identifier is None:
            cursor.reset(mark)
            return None
        pieces.append(identifier)

        while True:
            if cursor.peek("<") and not cursor.peek("<<"):
                arguments = cursor.skip_balanced("<", ">")
                if arguments is None:
                    cursor.reset(mark)
                    return None
                pieces.append(arguments)
            elif cursor.match("::"):
                identifier = cursor.match_identifier()
                if identifier is None:
                    cursor.reset(mark)
                    return None
                pieces.append(f"::{identifier}")
            else:
                break

        while allow_suffix:
            for suffix in ("&&", "&", "*"):
                if cursor.match(suffix):
                    pieces.append(suffix)
                    break
            else:
                break

        return normalize_cpp_type(" ".join(pieces))

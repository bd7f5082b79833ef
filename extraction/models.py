"""
Data models for extracted C++ declarations.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

from core.qualified_name import join_namespace, make_qualified_name
from core.run_artifacts import write_json_artifact

logger = logging.getLogger(__name__)


class Visibility(Enum):
    """C++ access level of a member, method, parent or class section."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass
class NamespaceEntry:
    """One open namespace on the namespace stack.

    Attributes:
        name: Namespace segment name.
        scope_depth: Tracked scope depth inside the namespace body. The entry
            is stale once the depth falls below this value.
    """

    name: str
    scope_depth: int


@dataclass
class EnumData:
    """A published enum or enum class.

    Attributes:
        namespaces: Enclosing namespace segments, outermost first.
        name: Enum name.
        is_class_enum: True for ``enum class``.
        identifiers: Enumerator names in declaration order (values dropped).
        defined_in: File the enum was read from.
    """

    namespaces: List[str] = field(default_factory=list)
    name: str = ""
    is_class_enum: bool = False
    identifiers: List[str] = field(default_factory=list)
    defined_in: str = ""

    def enum_namespace(self) -> str:
        """Return the C++ namespace of this enum (``a::b``)."""
        return join_namespace(self.namespaces)

    def full_name(self) -> str:
        return make_qualified_name(self.namespaces, self.name)

    def copy(self) -> "EnumData":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespaces": list(self.namespaces),
            "name": self.name,
            "is_class_enum": self.is_class_enum,
            "identifiers": list(self.identifiers),
            "defined_in": self.defined_in,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EnumData":
        return cls(
            namespaces=[str(ns) for ns in payload.get("namespaces", [])],
            name=str(payload.get("name", "")),
            is_class_enum=bool(payload.get("is_class_enum", False)),
            identifiers=[str(ident) for ident in payload.get("identifiers", [])],
            defined_in=str(payload.get("defined_in", "")),
        )


@dataclass
class MemberData:
    """One data member of a class/struct.

    Visibility and modifier flags are the parser state at the moment the
    member was recognized. ``serializable``, ``generate_getter`` and
    ``generate_setter`` come from ``[[cereal]]``, ``[[get]]`` and ``[[set]]``
    annotations (or a class-level ``[[cereal]]``).
    """

    type: str
    name: str
    visibility: Visibility = Visibility.PRIVATE
    is_const: bool = False
    is_static: bool = False
    serializable: bool = False
    generate_getter: bool = False
    generate_setter: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "visibility": self.visibility.value,
            "is_const": self.is_const,
            "is_static": self.is_static,
            "serializable": self.serializable,
            "generate_getter": self.generate_getter,
            "generate_setter": self.generate_setter,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "MemberData":
        return cls(
            type=str(payload.get("type", "")),
            name=str(payload.get("name", "")),
            visibility=Visibility(payload.get("visibility", Visibility.PRIVATE.value)),
            is_const=bool(payload.get("is_const", False)),
            is_static=bool(payload.get("is_static", False)),
            serializable=bool(payload.get("serializable", False)),
            generate_getter=bool(payload.get("generate_getter", False)),
            generate_setter=bool(payload.get("generate_setter", False)),
        )


@dataclass
class MethodData:
    """One method of a class/struct. Constructors/destructors are not recorded."""

    return_type: str
    name: str
    visibility: Visibility = Visibility.PRIVATE
    is_const: bool = False
    is_static: bool = False
    is_virtual: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "return_type": self.return_type,
            "name": self.name,
            "visibility": self.visibility.value,
            "is_const": self.is_const,
            "is_static": self.is_static,
            "is_virtual": self.is_virtual,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "MethodData":
        return cls(
            return_type=str(payload.get("return_type", "")),
            name=str(payload.get("name", "")),
            visibility=Visibility(payload.get("visibility", Visibility.PRIVATE.value)),
            is_const=bool(payload.get("is_const", False)),
            is_static=bool(payload.get("is_static", False)),
            is_virtual=bool(payload.get("is_virtual", False)),
        )


@dataclass
class ClassData:
    """A published class or struct.

    Attributes:
        defined_in: File the class was read from.
        namespaces: Enclosing namespace segments, outermost first.
        name: Class name.
        parents: Base class names in declaration order (inheritance
            visibility is not kept).
        members: Data members in declaration order.
        methods: Methods in declaration order.
        is_struct: True when declared with ``struct``.
        serializable: True when the class carried a ``[[cereal]]`` annotation.
    """

    defined_in: str = ""
    namespaces: List[str] = field(default_factory=list)
    name: str = ""
    parents: List[str] = field(default_factory=list)
    members: List[MemberData] = field(default_factory=list)
    methods: List[MethodData] = field(default_factory=list)
    is_struct: bool = False
    serializable: bool = False

    def class_namespace(self) -> str:
        return join_namespace(self.namespaces)

    def full_name(self) -> str:
        return make_qualified_name(self.namespaces, self.name)

    def copy(self) -> "ClassData":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "defined_in": self.defined_in,
            "namespaces": list(self.namespaces),
            "name": self.name,
            "parents": list(self.parents),
            "members": [member.to_dict() for member in self.members],
            "methods": [method.to_dict() for method in self.methods],
            "is_struct": self.is_struct,
            "serializable": self.serializable,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ClassData":
        return cls(
            defined_in=str(payload.get("defined_in", "")),
            namespaces=[str(ns) for ns in payload.get("namespaces", [])],
            name=str(payload.get("name", "")),
            parents=[str(parent) for parent in payload.get("parents", [])],
            members=[MemberData.from_dict(m) for m in payload.get("members", [])],
            methods=[MethodData.from_dict(m) for m in payload.get("methods", [])],
            is_struct=bool(payload.get("is_struct", False)),
            serializable=bool(payload.get("serializable", False)),
        )


@dataclass
class CodeIndex:
    """All enums and classes found in a set of files, keyed by qualified name."""

    enums: Dict[str, EnumData] = field(default_factory=dict)
    classes: Dict[str, ClassData] = field(default_factory=dict)

    def add(self, key: str, entity: Union[EnumData, ClassData]) -> None:
        """Add an enum or class. A later entity with the same name replaces the earlier one."""
        target = self.enums if isinstance(entity, EnumData) else self.classes
        previous = target.get(key)
        if previous is not None:
            logger.warning(
                "%s redefined in %s (previously %s); keeping the later definition",
                key,
                entity.defined_in,
                previous.defined_in,
            )
        target[key] = entity

    def to_dict(self) -> Dict[str, Any]:
        """Convert the index to a dictionary suitable for JSON serialization."""
        return {
            "enums": {key: data.to_dict() for key, data in sorted(self.enums.items())},
            "classes": {key: data.to_dict() for key, data in sorted(self.classes.items())},
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CodeIndex":
        if not isinstance(payload, dict):
            raise ValueError("Code index payload must be an object")
        return cls(
            enums={key: EnumData.from_dict(value) for key, value in payload.get("enums", {}).items()},
            classes={key: ClassData.from_dict(value) for key, value in payload.get("classes", {}).items()},
        )

    def save(self, path: str) -> str:
        """Write the index as JSON and return the path written."""
        return write_json_artifact(self.to_dict(), path)

    @classmethod
    def load(cls, path: str) -> "CodeIndex":
        """Load an index written by :meth:`save`.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not a valid index.
        """
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"Index file not found: {source}")
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Index file {source} is not valid JSON: {exc}") from exc
        return cls.from_dict(payload)

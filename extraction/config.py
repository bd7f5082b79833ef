"""
Configuration constants for declaration extraction.

Defines the keyword vocabulary the grammar recognizes and the file
extensions the orchestrator picks up.
"""

from typing import FrozenSet, Set

# Declaration keywords
NAMESPACE_KEYWORD: str = "namespace"
ENUM_KEYWORD: str = "enum"
CLASS_KEYWORD: str = "class"
STRUCT_KEYWORD: str = "struct"
TEMPLATE_KEYWORD: str = "template"

# Visibility keywords, usable as section labels and inheritance prefixes
VISIBILITY_KEYWORDS: FrozenSet[str] = frozenset({"public", "protected", "private"})

# Leading member/method modifiers that are recorded on the entity
RECORDED_MODIFIERS: FrozenSet[str] = frozenset({"static", "const", "virtual"})

# Leading modifiers that are accepted but not recorded
IGNORED_MODIFIERS: FrozenSet[str] = frozenset({"inline", "constexpr", "mutable", "explicit"})

# Keywords that start a class-body declaration the grammar does not model
UNSUPPORTED_BODY_KEYWORDS: FrozenSet[str] = frozenset(
    {"using", "friend", "typedef", "enum", "class", "struct", "union", "namespace"}
)

OPERATOR_KEYWORD: str = "operator"
FINAL_SPECIFIER: str = "final"
NOEXCEPT_SPECIFIER: str = "noexcept"
OVERRIDE_SPECIFIER: str = "override"

# Specifiers allowed in front of a constructor/destructor
CONSTRUCTOR_SPECIFIERS: FrozenSet[str] = frozenset(
    {"explicit", "constexpr", "inline", "virtual"}
)

# `= X;` endings of a method declaration
METHOD_DEFINITION_MARKERS: FrozenSet[str] = frozenset({"0", "default", "delete"})

# One-line directives the lexical layer skips
PRAGMA_DIRECTIVE: str = "#pragma"
INCLUDE_DIRECTIVE: str = "#include"
PRAGMA_ONCE_ARGUMENT: str = "once"

# Annotation delimiters and the vocabulary with semantic effect
ANNOTATION_OPEN: str = "[["
ANNOTATION_CLOSE: str = "]]"
ANNOTATION_SERIALIZABLE: str = "cereal"
ANNOTATION_GETTER: str = "get"
ANNOTATION_SETTER: str = "set"

# Line tags consumed by the method emitters
GET_SET_METHODS_TAG: str = "[[genGetSetMethods]]"
CEREAL_METHODS_TAG: str = "[[genCerealLoadSave]]"

# Header extensions; `.in` covers tagged inputs such as `Foo.h.in`
HEADER_EXTENSIONS: Set[str] = {
    ".h",
    ".hh",
    ".hpp",
    ".hxx",
    ".in",
}

# Directories never descended into during discovery
SKIPPED_DIRECTORIES: Set[str] = {
    "build",
    "cmake-build-debug",
    "cmake-build-release",
    "node_modules",
    "venv",
    "__pycache__",
    "dist",
    "out",
}

# Characters of the remainder shown in failure diagnostics
REMAINDER_PREVIEW_CHARS: int = 80

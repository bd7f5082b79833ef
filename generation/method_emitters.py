"""
Filters that expand method-generation tags into C++ methods.

A tag must sit on a line by itself (whitespace is ignored). The line is
replaced by the generated methods of the class the mini parser says we are
in, indented like the tag line.
"""

import logging
from typing import Dict, List, Optional

from extraction.config import CEREAL_METHODS_TAG, GET_SET_METHODS_TAG
from extraction.events import Signal
from extraction.models import ClassData, CodeIndex
from generation.line_filters import (
    LineEmitter,
    LineFilter,
    LineMiniParser,
    LineReader,
    LineWriter,
)

logger = logging.getLogger(__name__)


def _classes_by_name(index: CodeIndex) -> Dict[str, ClassData]:
    # The line filters see bare class names only.
    by_name: Dict[str, ClassData] = {}
    for key, data in index.classes.items():
        if data.name in by_name:
            logger.warning(
                "Class name %s is ambiguous; %s shadows %s",
                data.name,
                key,
                by_name[data.name].full_name(),
            )
        by_name[data.name] = data
    return by_name


class ClassAwareFilter(LineFilter):
    """Filter that knows which indexed class the current line belongs to.

    It listens to ``class_pushed``/``class_popped`` of the upstream stage and
    forwards both on its own signals so several class-aware filters can be
    chained.
    """

    def __init__(self, index: CodeIndex):
        super().__init__()
        self.classes = _classes_by_name(index)
        self.current_class: Optional[ClassData] = None
        self.class_pushed = Signal("class_pushed")
        self.class_popped = Signal("class_popped")

    def subscribe_to(self, emitter: LineEmitter) -> None:
        super().subscribe_to(emitter)
        pushed = getattr(emitter, "class_pushed", None)
        popped = getattr(emitter, "class_popped", None)
        if pushed is not None:
            self._subscriptions.append(pushed.connect(self.on_class_pushed))
        if popped is not None:
            self._subscriptions.append(popped.connect(self.on_class_popped))

    def on_class_pushed(self, name: str) -> None:
        self.current_class = self.classes.get(name)
        if self.current_class is None:
            logger.warning("Class %s was not found in the code index", name)
        self.class_pushed.emit(name)

    def on_class_popped(self) -> None:
        self.current_class = None
        self.class_popped.emit()


class TagExpandingFilter(ClassAwareFilter):
    """Replaces a tag line with :meth:`render` output for the current class."""

    tag = ""

    def render(self, data: ClassData) -> List[str]:
        raise NotImplementedError

    def process(self, line: str) -> None:
        if "".join(line.split()) != self.tag:
            self.emit(line)
            return
        if self.current_class is None:
            logger.warning("%s encountered, but not in a known class", self.tag)
            return
        indent = line[: len(line) - len(line.lstrip())]
        for generated in self.render(self.current_class):
            self.emit(indent + generated)


class GetSetMethodEmitter(TagExpandingFilter):
    """Expands ``[[genGetSetMethods]]`` into getters, then setters."""

    tag = GET_SET_METHODS_TAG

    def render(self, data: ClassData) -> List[str]:
        lines = [
            f"{member.type} get_{member.name}() const {{ return {member.name}; }}"
            for member in data.members
            if member.generate_getter
        ]
        lines.extend(
            f"void set_{member.name}(const {member.type}& val) {{ {member.name} = val; }}"
            for member in data.members
            if member.generate_setter
        )
        return lines


class CerealMethodEmitter(TagExpandingFilter):
    """Expands ``[[genCerealLoadSave]]`` into cereal ``save``/``load`` templates."""

    tag = CEREAL_METHODS_TAG

    def render(self, data: ClassData) -> List[str]:
        names = [
            member.name
            for member in data.members
            if member.serializable or data.serializable
        ]
        lines = ["template <typename Archive>", "void save(Archive& ar) const {"]
        lines.extend(f'  ar(cereal::make_nvp("{name}", {name}));' for name in names)
        lines.append("}")
        lines.extend(["template <typename Archive>", "void load(Archive& ar) {"])
        lines.extend(f"  ar({name});" for name in names)
        lines.append("}")
        return lines


def generate_methods(index: CodeIndex, source: str, destination: str) -> int:
    """Rewrite ``source`` into ``destination``, expanding method tags.

    Chain: reader -> mini parser -> get/set emitter -> cereal emitter -> writer.

    Returns:
        Number of lines written.
    """
    reader = LineReader(source)
    mini_parser = LineMiniParser()
    get_set = GetSetMethodEmitter(index)
    cereal = CerealMethodEmitter(index)

    mini_parser.subscribe_to(reader)
    get_set.subscribe_to(mini_parser)
    cereal.subscribe_to(get_set)
    try:
        with LineWriter(destination) as writer:
            writer.subscribe_to(cereal)
            lines_read = reader.run()
    finally:
        for stage in (mini_parser, get_set, cereal):
            stage.unsubscribe()

    logger.info(
        "Generated %s from %s (%d lines read, %d written)",
        destination,
        source,
        lines_read,
        writer.lines_written,
    )
    return writer.lines_written

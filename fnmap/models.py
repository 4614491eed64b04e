"""Core data models produced by the analyzer and consumed by the serializers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class MethodKind(str, Enum):
    CONSTRUCTOR = "constructor"
    METHOD = "method"
    GETTER = "get"
    SETTER = "set"


class ExportKind(str, Enum):
    VALUE = "value"
    TYPE = "type"
    DEFAULT = "default"


@dataclass(frozen=True)
class ImportBinding:
    module: str
    members: Tuple[str, ...] = ()
    used_in: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionRecord:
    name: str
    params: str
    start_line: int
    end_line: int
    description: str = ""


@dataclass(frozen=True)
class MethodRecord:
    name: str
    params: str
    line: int
    static: bool = False
    kind: MethodKind = MethodKind.METHOD
    description: str = ""


@dataclass(frozen=True)
class ClassRecord:
    name: str
    start_line: int
    end_line: int
    super_class: Optional[str] = None
    description: str = ""
    methods: Tuple[MethodRecord, ...] = ()

    def qualname(self, method: MethodRecord) -> str:
        return f"{self.name}.{method.name}"


@dataclass(frozen=True)
class ConstantRecord:
    name: str
    line: int
    description: str = ""


@dataclass(frozen=True)
class ExportRecord:
    name: str
    kind: ExportKind = ExportKind.VALUE
    local_name: Optional[str] = None
    line: int = 0


@dataclass(frozen=True)
class Module:
    """Structural summary of one source file.

    ``call_graph`` maps a caller (``name`` or ``Class.method``) to the
    callees it invokes, in first-seen order.
    """

    description: str = ""
    imports: Tuple[ImportBinding, ...] = ()
    functions: Tuple[FunctionRecord, ...] = ()
    classes: Tuple[ClassRecord, ...] = ()
    constants: Tuple[ConstantRecord, ...] = ()
    exports: Tuple[ExportRecord, ...] = ()
    call_graph: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    is_pure_type: bool = False

    def callables(self) -> Tuple[str, ...]:
        """Display names of every function and ``Class.method``, deduplicated."""
        names: Dict[str, None] = {}
        for fn in self.functions:
            names[fn.name] = None
        for cls in self.classes:
            for method in cls.methods:
                names[cls.qualname(method)] = None
        return tuple(names)

    def calls_from(self, caller: str) -> Tuple[str, ...]:
        return self.call_graph.get(caller, ())


@dataclass(frozen=True)
class FileEntry:
    relative_path: str
    module: Module

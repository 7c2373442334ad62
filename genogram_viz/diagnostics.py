"""Non-fatal problems found while building or laying out a family graph.

Every diagnostic is logged through the logger of the module that reported it
and kept in a ``DiagnosticLog`` so callers can show them next to the diagram.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple


class DiagnosticKind(Enum):
    SELF_MARRIAGE = "self_marriage"
    UNKNOWN_PERSON = "unknown_person"
    UNKNOWN_MARRIAGE = "unknown_marriage"
    UNRESOLVED_PARENT = "unresolved_parent"
    CYCLE = "cycle"
    COHORT_CONFLICT = "cohort_conflict"
    LAYOUT_SKIP = "layout_skip"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    keys: Tuple[int, ...] = ()

    def __str__(self):
        return self.message


@dataclass
class DiagnosticLog:
    entries: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        kind: DiagnosticKind,
        message: str,
        *keys: int,
        logger: logging.Logger = None,
        level: int = logging.WARNING,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, tuple(keys))
        self.entries.append(diagnostic)
        (logger or logging.getLogger(__name__)).log(level, message)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.entries if d.kind is kind]

    def messages(self) -> List[str]:
        return [d.message for d in self.entries]

    def extend(self, other: "DiagnosticLog"):
        self.entries.extend(other.entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

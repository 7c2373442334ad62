from dataclasses import dataclass, field
from typing import List, Optional

from .errors import MalformedPersonError

MALE = "M"
FEMALE = "F"


@dataclass
class LifeEvent:
    date: Optional[str] = None
    place: Optional[str] = None


@dataclass
class Person:
    key: int
    sex: str  # "M" | "F" | anything else
    name: str = ""
    birth: Optional[LifeEvent] = None
    death: Optional[LifeEvent] = None
    mother: Optional[int] = None
    father: Optional[int] = None
    # hidden placeholder: laid out, but collapsed onto its spouse and not painted
    suppressed: bool = False
    # excluded from the layout entirely
    visible: bool = True
    width: Optional[float] = None
    height: Optional[float] = None
    markers: List[str] = field(default_factory=list)

    @property
    def is_male(self) -> bool:
        return self.sex == MALE

    @property
    def is_female(self) -> bool:
        return self.sex == FEMALE


@dataclass
class Marriage:
    one: int
    two: int
    children: List[int] = field(default_factory=list)

    @property
    def pair(self) -> frozenset:
        return frozenset((self.one, self.two))


@dataclass
class Family:
    name: str = "Untitled"
    people: List[Person] = field(default_factory=list)
    marriages: List[Marriage] = field(default_factory=list)


def to_key(value, record=None) -> int:
    """Convert a person reference to an integer key."""
    if isinstance(value, bool):
        raise MalformedPersonError(f"invalid person key {value!r}", record)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedPersonError(f"invalid person key {value!r}", record) from None


def optional_key(value, record=None) -> Optional[int]:
    if value is None or value == "":
        return None
    return to_key(value, record)


def _event(value, record=None) -> Optional[LifeEvent]:
    if value is None:
        return None
    if isinstance(value, LifeEvent):
        return value
    if isinstance(value, str):
        return LifeEvent(date=value)
    if not isinstance(value, dict):
        raise MalformedPersonError(f"invalid life event {value!r}", record)
    return LifeEvent(date=value.get("date") or value.get("datetime"), place=value.get("place"))


def person_from_record(record: dict) -> Person:
    """Build a Person from a canonical record, failing fast on missing identity."""
    if record.get("key") is None:
        raise MalformedPersonError(f"person record without key: {record!r}", record)
    sex = record.get("sex")
    if sex is None:
        raise MalformedPersonError(f"person {record['key']} has no sex", record)

    return Person(
        key=to_key(record["key"], record),
        sex=str(sex).strip().upper(),
        name=record.get("name") or "",
        birth=_event(record.get("birth"), record),
        death=_event(record.get("death"), record),
        mother=optional_key(record.get("mother"), record),
        father=optional_key(record.get("father"), record),
        suppressed=bool(record.get("suppressed", False)),
        visible=bool(record.get("visible", True)),
        width=record.get("width"),
        height=record.get("height"),
        markers=list(record.get("markers") or []),
    )

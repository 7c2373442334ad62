"""Readers for the family data shapes in circulation.

The canonical shape is ``{"name": ..., "people": [...], "marriages": [{"one",
"two", "children"}]}``. Older exports describe relations on the person records
instead (``mom``/``dad``/``partner``, the short ``m``/``f`` keys, or
``wife``/``husband``), and the spreadsheet export is a ``;``-separated CSV with
``parent1_id``/``parent2_id``/``spouse_id`` columns. All of them are converted
here so nothing downstream has to know about them.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List

import pandas as pd

from .errors import GenogramInputError, MalformedPersonError
from .model import Family, LifeEvent, Marriage, Person, optional_key, person_from_record, to_key

logger = logging.getLogger(__name__)

# legacy field name -> canonical field name
FIELD_ALIASES = {
    "gender": "sex",
    "s": "sex",
    "n": "name",
    "mom": "mother",
    "m": "mother",
    "dad": "father",
    "f": "father",
}
PARTNER_FIELDS = ("partner", "wife", "husband")


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def normalize_record(record: dict) -> dict:
    """Rename legacy person fields to their canonical names."""
    normalized = {}
    for name, value in record.items():
        canonical = FIELD_ALIASES.get(name, name)
        # an explicit canonical field wins over its alias
        if canonical != name and canonical in record:
            continue
        normalized[canonical] = value
    return normalized


def family_from_records(records: Iterable[dict], name: str = "Untitled") -> Family:
    """Build a family from person records that carry their own relations."""
    people = []
    marriages = []
    for record in records:
        record = normalize_record(record)
        person = person_from_record(record)
        people.append(person)
        for field_name in PARTNER_FIELDS:
            for partner in _as_list(record.get(field_name)):
                marriages.append(Marriage(person.key, to_key(partner, record)))

    return Family(name=name, people=people, marriages=marriages)


def marriage_from_record(record: dict) -> Marriage:
    try:
        one, two = record["one"], record["two"]
    except KeyError as e:
        raise GenogramInputError(f"marriage record without {e.args[0]!r}: {record!r}") from None
    return Marriage(
        one=to_key(one, record),
        two=to_key(two, record),
        children=[to_key(c, record) for c in _as_list(record.get("children"))],
    )


def family_from_dict(data) -> Family:
    """Convert any supported JSON shape to a Family."""
    if isinstance(data, list):
        return family_from_records(data)
    if not isinstance(data, dict) or "people" not in data:
        raise GenogramInputError("family data needs a 'people' list")

    name = data.get("name") or "Untitled"
    if "marriages" not in data:
        return family_from_records(data["people"], name=name)

    family = family_from_records(data["people"], name=name)
    family.marriages.extend(marriage_from_record(m) for m in data["marriages"] or [])
    return family


def _split_ids(value) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in str(value).split(":") if v.strip() and v.strip() != "-"]


def family_from_dataframe(df: pd.DataFrame, name: str = "Untitled") -> Family:
    """Convert the spreadsheet export (one row per person) to a Family."""
    for column in ("id", "sex"):
        if column not in df.columns:
            raise GenogramInputError(f"missing column {column!r}")

    people = []
    marriages = []
    for row in df.to_dict("records"):
        # blank cells come back as NaN or NA depending on the column dtype
        record = {column: (None if pd.isna(value) else value) for column, value in row.items()}
        if not record.get("id"):
            raise MalformedPersonError(f"row without id: {record!r}", record)
        if not record.get("sex"):
            raise MalformedPersonError(f"person {record['id']} has no sex.", record)

        markers = []
        parent_id = record.get("parent1_id")
        if isinstance(parent_id, str) and "*" in parent_id:
            parent_id = parent_id.replace("*", "")
            markers.append("adopted")

        person = Person(
            key=to_key(record["id"], record),
            sex=str(record["sex"]).strip().upper(),
            name=record.get("name") or "",
            father=optional_key(parent_id, record),
            mother=optional_key(record.get("parent2_id"), record),
            markers=markers,
        )
        if record.get("birth_date") or record.get("place_of_birth"):
            person.birth = LifeEvent(record.get("birth_date"), record.get("place_of_birth"))
        if record.get("death_date") or record.get("place_of_death"):
            person.death = LifeEvent(record.get("death_date"), record.get("place_of_death"))
        people.append(person)

        for spouse_id in _split_ids(record.get("spouse_id")):
            marriages.append(Marriage(person.key, to_key(spouse_id, record)))

    logger.info(f"Loaded {len(people)} records")
    return Family(name=name, people=people, marriages=marriages)


def load_family(path) -> Family:
    """Load a family from a .json or ;-separated .csv file."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".json"):
        raise GenogramInputError(f"unsupported family file type: {path.name}")

    try:
        if suffix == ".csv":
            df = pd.read_csv(path, sep=";", dtype=str)
        else:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise GenogramInputError(f"unreadable family file: {e}") from e

    if suffix == ".csv":
        return family_from_dataframe(df, name=path.stem)
    return family_from_dict(data)

"""Read-only access to static balance rows.

The simulation never owns balance data. It reads rows (plain key/value
records) through the ``StaticDataProvider`` protocol, which any loader can
implement. ``InMemoryDataProvider`` is the provider used by the headless
runner and the tests; it normalizes rows once at construction so the rest
of the code can rely on parsed fields:

* ``prerequisites`` is always a tuple of ids (``"a;b"`` strings are split)
* ``materials_cost`` / ``materials_gain`` are always ``{material: int}``
  (``"Wood x5;Stone x3"`` strings are parsed)
* ``screen`` and ``family`` string identifiers are mapped onto their enums
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from idlefarm.enums import ScreenId, WeaponFamily
from idlefarm.exceptions import DataError

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

# Row categories understood by the simulation
CROP = "crop"
BLUEPRINT = "blueprint"
UPGRADE = "upgrade"
CLEANUP = "cleanup"
RECIPE = "recipe"
ROUTE = "route"
HELPER = "helper"

KNOWN_CATEGORIES = frozenset({CROP, BLUEPRINT, UPGRADE, CLEANUP, RECIPE, ROUTE, HELPER})

_MATERIAL_TOKEN = re.compile(r"^\s*([A-Za-z][A-Za-z _-]*?)\s*x\s*(\d+)\s*$", re.IGNORECASE)


class StaticDataProvider(Protocol):
    """Lookup of balance rows by id and by category. Rows are never mutated."""

    def get_by_id(self, row_id: str) -> Optional[Row]:
        ...

    def get_by_category(self, category: str) -> List[Row]:
        ...


def material_key(name: str) -> str:
    """Normalize a display material name ("Pine Resin") to its id ("pine_resin")."""
    return name.strip().lower().replace(" ", "_").replace("-", "_")


def parse_material_costs(raw: Any) -> Dict[str, int]:
    """Parse a material cost field.

    Accepts ``None``/empty, a mapping, or the semicolon-separated
    ``"Wood x5;Stone x3"`` form.

    Raises:
        DataError: If a token cannot be parsed or a quantity is negative
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, Mapping):
        parsed = {}
        for name, qty in raw.items():
            qty = int(qty)
            if qty < 0:
                raise DataError(f"Negative material quantity for {name!r}: {qty}")
            parsed[material_key(str(name))] = qty
        return parsed
    if not isinstance(raw, str):
        raise DataError(f"Unsupported material field: {raw!r}")

    parsed = {}
    for token in raw.split(";"):
        if not token.strip():
            continue
        match = _MATERIAL_TOKEN.match(token)
        if match is None:
            raise DataError(f"Malformed material token: {token!r}")
        key = material_key(match.group(1))
        parsed[key] = parsed.get(key, 0) + int(match.group(2))
    return parsed


def parse_prerequisites(raw: Any) -> tuple:
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        return tuple(part.strip() for part in raw.split(";") if part.strip())
    return tuple(str(part) for part in raw)


def normalize_row(raw: Mapping[str, Any]) -> Row:
    """Validate and normalize a raw row into a read-only mapping.

    Raises:
        DataError: Missing id/category, unknown category or bad field
    """
    row_id = raw.get("id")
    category = raw.get("category")
    if not row_id or not isinstance(row_id, str):
        raise DataError(f"Row without a string id: {dict(raw)!r}")
    if category not in KNOWN_CATEGORIES:
        raise DataError(f"Row {row_id!r} has unknown category {category!r}")

    row: Dict[str, Any] = dict(raw)
    row.setdefault("name", row_id.replace("_", " ").title())
    row["prerequisites"] = parse_prerequisites(raw.get("prerequisites"))
    for key in ("materials_cost", "materials_gain", "build_materials"):
        if key in row:
            row[key] = parse_material_costs(row[key])
    if "screen" in row and row["screen"] is not None:
        row["screen"] = ScreenId.from_id(str(row["screen"]))
    if "family" in row and row["family"] is not None:
        row["family"] = WeaponFamily.from_id(str(row["family"]))
    return MappingProxyType(row)


class InMemoryDataProvider:
    """StaticDataProvider backed by a list of rows held in memory."""

    def __init__(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self._by_id: Dict[str, Row] = {}
        self._by_category: Dict[str, List[Row]] = {}
        for raw in rows:
            row = normalize_row(raw)
            if row["id"] in self._by_id:
                raise DataError(f"Duplicate row id: {row['id']!r}")
            self._by_id[row["id"]] = row
            self._by_category.setdefault(row["category"], []).append(row)
        logger.debug(
            f"Loaded {len(self._by_id)} rows across {len(self._by_category)} categories"
        )

    def get_by_id(self, row_id: str) -> Optional[Row]:
        return self._by_id.get(row_id)

    def get_by_category(self, category: str) -> List[Row]:
        return list(self._by_category.get(category, ()))

    def require(self, row_id: str) -> Row:
        """Like get_by_id, but a missing row is a data error."""
        row = self._by_id.get(row_id)
        if row is None:
            raise DataError(f"Missing static data row: {row_id!r}")
        return row

    def __len__(self) -> int:
        return len(self._by_id)

    def __repr__(self) -> str:
        return f"InMemoryDataProvider(rows={len(self._by_id)})"

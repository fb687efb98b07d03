"""
Utilities for loading the inbound payload field schema.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

CONFIG_PATH = Path(__file__).resolve().parent / "payload_schema.yaml"

FIELD_TYPES = ("string", "date", "decimal")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    column: str
    type: str = "string"
    max_length: Optional[int] = None
    lite: bool = False


def _parse_field(section: str, raw: Dict[str, Any]) -> FieldSpec:
    field_type = raw.get("type", "string")
    if field_type not in FIELD_TYPES:
        raise ValueError(f"Unknown field type '{field_type}' for {section}.{raw.get('name')}")
    max_length = raw.get("max_length")
    return FieldSpec(
        name=raw["name"],
        column=raw["column"],
        type=field_type,
        max_length=int(max_length) if max_length is not None else None,
        lite=bool(raw.get("lite", False)),
    )


@lru_cache()
def load_schema_config() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@lru_cache()
def get_section(section: str) -> Tuple[FieldSpec, ...]:
    """Return the ordered field specs declared for a payload section."""
    entries: List[Dict[str, Any]] = load_schema_config().get(section) or []
    return tuple(_parse_field(section, entry) for entry in entries)


def shipment_fields() -> Tuple[FieldSpec, ...]:
    return get_section("shipment")


def scan_fields() -> Tuple[FieldSpec, ...]:
    return get_section("scan")


def length_limits(section: str = "shipment") -> Tuple[FieldSpec, ...]:
    """Field specs in a section that carry a maximum length."""
    return tuple(spec for spec in get_section(section) if spec.max_length is not None)


def date_fields(section: str = "shipment") -> Tuple[FieldSpec, ...]:
    return tuple(spec for spec in get_section(section) if spec.type == "date")

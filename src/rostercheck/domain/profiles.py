from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

import yaml

from .errors import ProfileConfigError
from .results import EntityType, KNOWN_ENTITIES
from .table import to_number, cell_text

DEFAULT_PROFILES_PATH = Path(__file__).resolve().parent.parent / "data" / "profiles.yaml"

_profiles_cache: dict[Path, "ProfileSet"] = {}


@dataclass(frozen=True)
class ContentSignal:
    """A (predicate, weight) rule evaluated against sampled cell values."""

    weight: float
    pattern: Optional[re.Pattern[str]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    above: Optional[float] = None
    below: Optional[float] = None

    def fires(self, value: object) -> bool:
        if self.pattern is not None:
            return self.pattern.search(cell_text(value)) is not None
        num = to_number(value)
        if num is None:
            return False
        if self.minimum is not None and num < self.minimum:
            return False
        if self.maximum is not None and num > self.maximum:
            return False
        if self.above is not None and num <= self.above:
            return False
        if self.below is not None and num >= self.below:
            return False
        return True


@dataclass(frozen=True)
class EntityProfile:
    entity_type: EntityType
    required_fields: tuple[str, ...]
    optional_fields: tuple[str, ...]
    patterns: Mapping[str, tuple[re.Pattern[str], ...]]
    id_field: str
    id_aliases: tuple[str, ...]
    id_token: re.Pattern[str]
    expected_id: re.Pattern[str]
    filename_patterns: tuple[re.Pattern[str], ...]
    header_patterns: tuple[re.Pattern[str], ...]
    signals: tuple[ContentSignal, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        return self.required_fields + self.optional_fields

    def is_required(self, field: str) -> bool:
        return field in self.required_fields

    def patterns_for(self, field: str) -> tuple[re.Pattern[str], ...]:
        return self.patterns.get(field, ())


@dataclass(frozen=True)
class ProfileSet:
    profiles: tuple[EntityProfile, ...]
    columns: Mapping[str, tuple[str, ...]]

    def get(self, entity_type: EntityType) -> EntityProfile:
        for p in self.profiles:
            if p.entity_type is entity_type:
                return p
        raise KeyError(entity_type.value)

    def column_aliases(self, key: str) -> tuple[str, ...]:
        return self.columns.get(key, ())

    def __iter__(self) -> Iterator[EntityProfile]:
        return iter(self.profiles)


def _compile(raw: object, where: str, flags: int = re.IGNORECASE) -> re.Pattern[str]:
    if not isinstance(raw, str):
        raise ProfileConfigError(f"{where}: pattern must be a string, got {raw!r}")
    try:
        return re.compile(raw, flags)
    except re.error as e:
        raise ProfileConfigError(f"{where}: invalid regex {raw!r}: {e}") from e


def _str_list(raw: object, where: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ProfileConfigError(f"{where}: expected a list of strings")
    return tuple(raw)


def _parse_signal(raw: object, where: str) -> ContentSignal:
    if not isinstance(raw, dict) or "weight" not in raw:
        raise ProfileConfigError(f"{where}: signal needs a weight")

    def _num(key: str) -> Optional[float]:
        v = raw.get(key)
        return None if v is None else float(v)

    pattern = raw.get("pattern")
    return ContentSignal(
        weight=float(raw["weight"]),
        pattern=None if pattern is None else _compile(pattern, where, flags=0),
        minimum=_num("min"),
        maximum=_num("max"),
        above=_num("above"),
        below=_num("below"),
    )


def _parse_profile(entity: EntityType, raw: Mapping[str, Any]) -> EntityProfile:
    where = f"profiles.{entity.value}"
    required = _str_list(raw.get("required"), f"{where}.required")
    optional = _str_list(raw.get("optional"), f"{where}.optional")
    if not required:
        raise ProfileConfigError(f"{where}: at least one required field is needed")
    pats_raw = raw.get("patterns") or {}
    if not isinstance(pats_raw, dict):
        raise ProfileConfigError(f"{where}.patterns: expected a mapping")
    patterns: dict[str, tuple[re.Pattern[str], ...]] = {}
    for field, plist in pats_raw.items():
        if field not in required and field not in optional:
            raise ProfileConfigError(f"{where}.patterns: '{field}' is not a declared field")
        patterns[field] = tuple(
            _compile(p, f"{where}.patterns.{field}")
            for p in _str_list(plist, f"{where}.patterns.{field}")
        )
    id_field = str(raw.get("id_field") or required[0])
    signals = tuple(
        _parse_signal(s, f"{where}.signals[{i}]") for i, s in enumerate(raw.get("signals") or [])
    )
    return EntityProfile(
        entity_type=entity,
        required_fields=required,
        optional_fields=optional,
        patterns=MappingProxyType(patterns),
        id_field=id_field,
        id_aliases=_str_list(raw.get("id_aliases"), f"{where}.id_aliases") or (id_field,),
        id_token=_compile(raw.get("id_token", r"^\w+\d+$"), f"{where}.id_token"),
        expected_id=_compile(raw.get("expected_id", r"^[A-Z]\d+$"), f"{where}.expected_id"),
        filename_patterns=tuple(
            _compile(p, f"{where}.filename_patterns")
            for p in _str_list(raw.get("filename_patterns"), f"{where}.filename_patterns")
        ),
        header_patterns=tuple(
            _compile(p, f"{where}.header_patterns")
            for p in _str_list(raw.get("header_patterns"), f"{where}.header_patterns")
        ),
        signals=signals,
    )


def parse_profiles(raw: object) -> ProfileSet:
    if not isinstance(raw, dict) or not isinstance(raw.get("profiles"), dict):
        raise ProfileConfigError("profiles file must contain a 'profiles' mapping")
    declared = raw["profiles"]
    profiles: list[EntityProfile] = []
    for entity in KNOWN_ENTITIES:
        body = declared.get(entity.value)
        if not isinstance(body, dict):
            raise ProfileConfigError(f"profiles.{entity.value}: missing profile")
        profiles.append(_parse_profile(entity, body))
    cols_raw = raw.get("columns") or {}
    if not isinstance(cols_raw, dict):
        raise ProfileConfigError("columns: expected a mapping")
    columns = {str(k): _str_list(v, f"columns.{k}") for k, v in cols_raw.items()}
    return ProfileSet(profiles=tuple(profiles), columns=MappingProxyType(columns))


def load_profiles(path: Optional[Path] = None) -> ProfileSet:
    """Load and compile entity profiles once per path."""
    key = (path or DEFAULT_PROFILES_PATH).resolve()
    cached = _profiles_cache.get(key)
    if cached is not None:
        return cached
    try:
        with open(key, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ProfileConfigError(f"Cannot read profiles file {key}: {e}") from e
    except yaml.YAMLError as e:
        raise ProfileConfigError(f"Invalid YAML in profiles file {key}: {e}") from e
    profiles = parse_profiles(raw)
    _profiles_cache[key] = profiles
    return profiles

"""
Teapot API — Data Models
Teapots, teas, brews and steeps.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum


class _Unrecognized:
    """Outcome of parsing a string that names no member of the enum."""

    def __repr__(self) -> str:
        return "UNRECOGNIZED"


UNRECOGNIZED = _Unrecognized()


class Choice(str, Enum):
    """Closed set of string values."""

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, raw: str | None):
        """
        Parse a raw query-string value.
        Returns the member, None when the value is absent or empty,
        or UNRECOGNIZED when it names no member.
        """
        if raw is None or raw == "":
            return None
        try:
            return cls(raw)
        except ValueError:
            return UNRECOGNIZED


class TeaType(Choice):
    GREEN = "green"
    BLACK = "black"
    OOLONG = "oolong"
    WHITE = "white"
    PUERH = "puerh"
    HERBAL = "herbal"
    ROOIBOS = "rooibos"


class CaffeineLevel(Choice):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TeapotMaterial(Choice):
    CERAMIC = "ceramic"
    CAST_IRON = "cast-iron"
    GLASS = "glass"
    PORCELAIN = "porcelain"
    CLAY = "clay"
    STAINLESS_STEEL = "stainless-steel"


class TeapotStyle(Choice):
    KYUSU = "kyusu"
    GAIWAN = "gaiwan"
    ENGLISH = "english"
    MOROCCAN = "moroccan"
    TURKISH = "turkish"
    YIXING = "yixing"


class BrewStatus(Choice):
    PREPARING = "preparing"
    STEEPING = "steeping"
    READY = "ready"
    SERVED = "served"
    COLD = "cold"


# ── Timestamps ────────────────────────────────────────────────────────────────

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ── Entities ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Teapot:
    id: str
    name: str
    material: TeapotMaterial
    capacity_ml: int
    style: TeapotStyle
    description: str | None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "material": self.material.value,
            "capacityMl": self.capacity_ml,
            "style": self.style.value,
            "description": self.description,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Tea:
    id: str
    name: str
    type: TeaType
    origin: str | None
    caffeine_level: CaffeineLevel
    steep_temp_celsius: int
    steep_time_seconds: int
    description: str | None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "origin": self.origin,
            "caffeineLevel": self.caffeine_level.value,
            "steepTempCelsius": self.steep_temp_celsius,
            "steepTimeSeconds": self.steep_time_seconds,
            "description": self.description,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Brew:
    id: str
    teapot_id: str
    tea_id: str
    status: BrewStatus
    water_temp_celsius: int
    notes: str | None
    started_at: datetime
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teapotId": self.teapot_id,
            "teaId": self.tea_id,
            "status": self.status.value,
            "waterTempCelsius": self.water_temp_celsius,
            "notes": self.notes,
            "startedAt": _iso(self.started_at),
            "completedAt": _iso(self.completed_at),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Steep:
    id: str
    brew_id: str
    steep_number: int
    duration_seconds: int
    rating: int | None
    notes: str | None
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "brewId": self.brew_id,
            "steepNumber": self.steep_number,
            "durationSeconds": self.duration_seconds,
            "rating": self.rating,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }


def merge(existing, changes: dict, now: datetime):
    """
    Overlay `changes` (attribute name → new value) on an entity snapshot.
    Attributes missing from `changes` keep their value; a None in `changes`
    clears the attribute. Returns a new snapshot stamped with `now`.
    """
    return replace(existing, **changes, updated_at=now)

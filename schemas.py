"""
Teapot API — Request Schemas
Request bodies use camelCase keys on the wire and snake_case attributes here,
matching the entity dataclasses in models.py so a dumped body can be merged
straight onto a record.
"""

import math
import uuid
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from models import BrewStatus, CaffeineLevel, TeapotMaterial, TeapotStyle, TeaType

WATER_TEMP_MIN = 60
WATER_TEMP_MAX = 100

Name = Annotated[str, Field(min_length=1, max_length=100)]
CapacityMl = Annotated[int, Field(ge=1, le=5000, strict=True)]
SteepTemp = Annotated[int, Field(ge=60, le=100, strict=True)]
SteepTime = Annotated[int, Field(ge=1, le=600, strict=True)]
WaterTemp = Annotated[int, Field(ge=WATER_TEMP_MIN, le=WATER_TEMP_MAX, strict=True)]
Duration = Annotated[int, Field(ge=1, strict=True)]
Rating = Annotated[int, Field(ge=1, le=5, strict=True)]

Text100 = Annotated[str, Field(max_length=100)]
Text200 = Annotated[str, Field(max_length=200)]
Text500 = Annotated[str, Field(max_length=500)]
Text1000 = Annotated[str, Field(max_length=1000)]


class Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def changes(self) -> dict:
        """Attributes the client actually sent, explicit nulls included."""
        return self.model_dump(exclude_unset=True)


def _reject_null(value, info):
    if value is None:
        raise PydanticCustomError(
            "not_null",
            "The {field} field may not be null.",
            {"field": info.field_name},
        )
    return value


def _require_uuid(value: str) -> str:
    """Only the hyphenated 8-4-4-4-12 form, in either case."""
    try:
        canonical = str(uuid.UUID(value))
    except ValueError:
        canonical = None
    if canonical != value.lower():
        raise PydanticCustomError("uuid", "Must be a valid UUID.")
    return value


def _date_string(value):
    if value is not None and not isinstance(value, str):
        raise PydanticCustomError("date_string", "Must be an ISO-8601 date string.")
    return value


def _to_utc(value: datetime | None) -> datetime | None:
    """Offset-less timestamps are read as UTC; everything is stored in UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Teapots ───────────────────────────────────────────────────────────────────

class TeapotCreate(Body):
    name: Name
    material: TeapotMaterial
    capacity_ml: CapacityMl = Field(alias="capacityMl")
    style: TeapotStyle = TeapotStyle.ENGLISH
    description: Optional[Text500] = None


class TeapotReplace(Body):
    name: Name
    material: TeapotMaterial
    capacity_ml: CapacityMl = Field(alias="capacityMl")
    style: TeapotStyle
    description: Optional[Text500] = None


class TeapotPatch(Body):
    name: Optional[Name] = None
    material: Optional[TeapotMaterial] = None
    capacity_ml: Optional[CapacityMl] = Field(None, alias="capacityMl")
    style: Optional[TeapotStyle] = None
    description: Optional[Text500] = None

    not_null = field_validator("name", "material", "capacity_ml", "style")(_reject_null)


# ── Teas ──────────────────────────────────────────────────────────────────────

class TeaCreate(Body):
    name: Name
    type: TeaType
    origin: Optional[Text100] = None
    caffeine_level: CaffeineLevel = Field(CaffeineLevel.MEDIUM, alias="caffeineLevel")
    steep_temp_celsius: SteepTemp = Field(alias="steepTempCelsius")
    steep_time_seconds: SteepTime = Field(alias="steepTimeSeconds")
    description: Optional[Text1000] = None


class TeaReplace(Body):
    name: Name
    type: TeaType
    origin: Optional[Text100] = None
    caffeine_level: CaffeineLevel = Field(alias="caffeineLevel")
    steep_temp_celsius: SteepTemp = Field(alias="steepTempCelsius")
    steep_time_seconds: SteepTime = Field(alias="steepTimeSeconds")
    description: Optional[Text1000] = None


class TeaPatch(Body):
    name: Optional[Name] = None
    type: Optional[TeaType] = None
    origin: Optional[Text100] = None
    caffeine_level: Optional[CaffeineLevel] = Field(None, alias="caffeineLevel")
    steep_temp_celsius: Optional[SteepTemp] = Field(None, alias="steepTempCelsius")
    steep_time_seconds: Optional[SteepTime] = Field(None, alias="steepTimeSeconds")
    description: Optional[Text1000] = None

    not_null = field_validator(
        "name", "type", "caffeine_level", "steep_temp_celsius", "steep_time_seconds",
    )(_reject_null)


# ── Brews ─────────────────────────────────────────────────────────────────────

class BrewCreate(Body):
    teapot_id: str = Field(alias="teapotId")
    tea_id: str = Field(alias="teaId")
    water_temp_celsius: Optional[WaterTemp] = Field(None, alias="waterTempCelsius")
    notes: Optional[Text500] = None

    ids_are_uuids = field_validator("teapot_id", "tea_id")(_require_uuid)
    not_null = field_validator("water_temp_celsius")(_reject_null)


class BrewPatch(Body):
    status: Optional[BrewStatus] = None
    notes: Optional[Text500] = None
    completed_at: Optional[datetime] = Field(None, alias="completedAt")

    not_null = field_validator("status")(_reject_null)
    completed_at_is_text = field_validator("completed_at", mode="before")(_date_string)
    completed_at_in_utc = field_validator("completed_at")(_to_utc)


# ── Steeps ────────────────────────────────────────────────────────────────────

class SteepCreate(Body):
    duration_seconds: Duration = Field(alias="durationSeconds")
    rating: Optional[Rating] = None
    notes: Optional[Text200] = None


# ── Query strings ─────────────────────────────────────────────────────────────

def _as_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return 0


def clamp_pagination(page: str | None, limit: str | None) -> tuple[int, int]:
    """
    Read page/limit query values.
    Non-numeric values count as 0; page is at least 1, limit within 1..100.
    """
    page_n = max(1, _as_int(page, 1))
    limit_n = min(MAX_PAGE_LIMIT, max(1, _as_int(limit, DEFAULT_PAGE_LIMIT)))
    return page_n, limit_n


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def flatten_errors(errors) -> dict[str, list[str]]:
    """
    Turn pydantic's error list into {"field": ["message", ...]}.
    Body fields are keyed by their camelCase name; a body that is missing,
    malformed or not an object is reported under "body".
    """
    out: dict[str, list[str]] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        # json_invalid errors carry a character offset, not a field name
        if not loc or not isinstance(loc[0], str) or err.get("type") == "json_invalid":
            key = "body"
        else:
            key = ".".join(str(part) for part in loc)
        out.setdefault(key, []).append(err.get("msg", "Invalid value."))
    return out

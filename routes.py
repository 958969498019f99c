"""
Teapot API — Routes
Teapots, teas, brews and steeps, plus health probes.
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from config import API_VERSION
from errors import NotFound, ValidationFailed
from models import (
    UNRECOGNIZED,
    Brew,
    BrewStatus,
    CaffeineLevel,
    Steep,
    Tea,
    Teapot,
    TeapotMaterial,
    TeapotStyle,
    TeaType,
    merge,
    utcnow,
)
from schemas import (
    WATER_TEMP_MAX,
    WATER_TEMP_MIN,
    BrewCreate,
    BrewPatch,
    SteepCreate,
    TeaCreate,
    TeaPatch,
    TeapotCreate,
    TeapotPatch,
    TeapotReplace,
    TeaReplace,
    clamp_pagination,
    total_pages,
)
from store import Store

router = APIRouter()
log = structlog.get_logger()


# ── Helpers ───────────────────────────────────────────────────────────────────

def get_store(request: Request) -> Store:
    return request.app.state.store


def new_id() -> str:
    return str(uuid.uuid4())


def resolve(entity, name: str):
    if entity is None:
        raise NotFound(name)
    return entity


def parse_filter(enum_cls, raw: str | None, field: str):
    """Typed filter value, or None when the filter is absent or unrecognized."""
    parsed = enum_cls.parse(raw)
    if parsed is UNRECOGNIZED:
        log.warning("filter.unrecognized", field=field, value=raw)
        return None
    return parsed


def paginated(items: list, page: int, limit: int, total: int) -> dict:
    return {
        "data": [item.to_dict() for item in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages(total, limit),
        },
    }


# ── Teapots ───────────────────────────────────────────────────────────────────

@router.get("/teapots")
def list_teapots(
    page: str | None = None,
    limit: str | None = None,
    material: str | None = None,
    style: str | None = None,
    store: Store = Depends(get_store),
):
    page_n, limit_n = clamp_pagination(page, limit)
    filters = {
        "material": parse_filter(TeapotMaterial, material, "material"),
        "style": parse_filter(TeapotStyle, style, "style"),
    }
    with store.transaction():
        items = store.list_teapots(page_n, limit_n, **filters)
        total = store.count_teapots(**filters)
    return paginated(items, page_n, limit_n, total)


@router.post("/teapots", status_code=201)
def create_teapot(body: TeapotCreate, store: Store = Depends(get_store)):
    now = utcnow()
    teapot = Teapot(id=new_id(), **body.model_dump(), created_at=now, updated_at=now)
    store.teapots.create(teapot)
    log.info("teapot.created", teapot_id=teapot.id, material=teapot.material.value)
    return teapot.to_dict()


@router.get("/teapots/{teapot_id}")
def get_teapot(teapot_id: str, store: Store = Depends(get_store)):
    return resolve(store.teapots.get(teapot_id), "Teapot").to_dict()


@router.put("/teapots/{teapot_id}")
def replace_teapot(teapot_id: str, body: TeapotReplace, store: Store = Depends(get_store)):
    with store.transaction():
        existing = resolve(store.teapots.get(teapot_id), "Teapot")
        teapot = merge(existing, body.model_dump(), utcnow())
        store.teapots.update(teapot)
    log.info("teapot.replaced", teapot_id=teapot_id)
    return teapot.to_dict()


@router.patch("/teapots/{teapot_id}")
def patch_teapot(teapot_id: str, body: TeapotPatch | None = None, store: Store = Depends(get_store)):
    changes = body.changes() if body is not None else {}
    with store.transaction():
        existing = resolve(store.teapots.get(teapot_id), "Teapot")
        teapot = merge(existing, changes, utcnow())
        store.teapots.update(teapot)
    log.info("teapot.patched", teapot_id=teapot_id, fields=sorted(changes))
    return teapot.to_dict()


@router.delete("/teapots/{teapot_id}", status_code=204)
def delete_teapot(teapot_id: str, store: Store = Depends(get_store)):
    if not store.teapots.delete(teapot_id):
        raise NotFound("Teapot")
    log.info("teapot.deleted", teapot_id=teapot_id)
    return Response(status_code=204)


@router.get("/teapots/{teapot_id}/brews")
def list_teapot_brews(
    teapot_id: str,
    page: str | None = None,
    limit: str | None = None,
    store: Store = Depends(get_store),
):
    page_n, limit_n = clamp_pagination(page, limit)
    with store.transaction():
        resolve(store.teapots.get(teapot_id), "Teapot")
        items = store.list_brews_by_teapot(teapot_id, page_n, limit_n)
        total = store.count_brews_by_teapot(teapot_id)
    return paginated(items, page_n, limit_n, total)


# ── Teas ──────────────────────────────────────────────────────────────────────

@router.get("/teas")
def list_teas(
    page: str | None = None,
    limit: str | None = None,
    type: str | None = None,
    caffeine_level: str | None = Query(None, alias="caffeineLevel"),
    store: Store = Depends(get_store),
):
    page_n, limit_n = clamp_pagination(page, limit)
    filters = {
        "type": parse_filter(TeaType, type, "type"),
        "caffeine_level": parse_filter(CaffeineLevel, caffeine_level, "caffeineLevel"),
    }
    with store.transaction():
        items = store.list_teas(page_n, limit_n, **filters)
        total = store.count_teas(**filters)
    return paginated(items, page_n, limit_n, total)


@router.post("/teas", status_code=201)
def create_tea(body: TeaCreate, store: Store = Depends(get_store)):
    now = utcnow()
    tea = Tea(id=new_id(), **body.model_dump(), created_at=now, updated_at=now)
    store.teas.create(tea)
    log.info("tea.created", tea_id=tea.id, type=tea.type.value)
    return tea.to_dict()


@router.get("/teas/{tea_id}")
def get_tea(tea_id: str, store: Store = Depends(get_store)):
    return resolve(store.teas.get(tea_id), "Tea").to_dict()


@router.put("/teas/{tea_id}")
def replace_tea(tea_id: str, body: TeaReplace, store: Store = Depends(get_store)):
    with store.transaction():
        existing = resolve(store.teas.get(tea_id), "Tea")
        tea = merge(existing, body.model_dump(), utcnow())
        store.teas.update(tea)
    log.info("tea.replaced", tea_id=tea_id)
    return tea.to_dict()


@router.patch("/teas/{tea_id}")
def patch_tea(tea_id: str, body: TeaPatch | None = None, store: Store = Depends(get_store)):
    changes = body.changes() if body is not None else {}
    with store.transaction():
        existing = resolve(store.teas.get(tea_id), "Tea")
        tea = merge(existing, changes, utcnow())
        store.teas.update(tea)
    log.info("tea.patched", tea_id=tea_id, fields=sorted(changes))
    return tea.to_dict()


@router.delete("/teas/{tea_id}", status_code=204)
def delete_tea(tea_id: str, store: Store = Depends(get_store)):
    if not store.teas.delete(tea_id):
        raise NotFound("Tea")
    log.info("tea.deleted", tea_id=tea_id)
    return Response(status_code=204)


# ── Brews ─────────────────────────────────────────────────────────────────────

@router.get("/brews")
def list_brews(
    page: str | None = None,
    limit: str | None = None,
    status: str | None = None,
    teapot_id: str | None = Query(None, alias="teapotId"),
    tea_id: str | None = Query(None, alias="teaId"),
    store: Store = Depends(get_store),
):
    page_n, limit_n = clamp_pagination(page, limit)
    filters = {
        "status": parse_filter(BrewStatus, status, "status"),
        "teapot_id": teapot_id or None,
        "tea_id": tea_id or None,
    }
    with store.transaction():
        items = store.list_brews(page_n, limit_n, **filters)
        total = store.count_brews(**filters)
    return paginated(items, page_n, limit_n, total)


@router.post("/brews", status_code=201)
def create_brew(body: BrewCreate, store: Store = Depends(get_store)):
    with store.transaction():
        resolve(store.teapots.get(body.teapot_id), "Teapot")
        tea = resolve(store.teas.get(body.tea_id), "Tea")

        water_temp = body.water_temp_celsius
        if water_temp is None:
            water_temp = tea.steep_temp_celsius
            if not WATER_TEMP_MIN <= water_temp <= WATER_TEMP_MAX:
                raise ValidationFailed({
                    "waterTempCelsius": [
                        f"The tea's steep temperature {water_temp} is outside "
                        f"{WATER_TEMP_MIN}-{WATER_TEMP_MAX}; supply waterTempCelsius.",
                    ],
                })

        now = utcnow()
        brew = Brew(
            id=new_id(),
            teapot_id=body.teapot_id,
            tea_id=body.tea_id,
            status=BrewStatus.PREPARING,
            water_temp_celsius=water_temp,
            notes=body.notes,
            started_at=now,
            completed_at=None,
            created_at=now,
            updated_at=now,
        )
        store.brews.create(brew)

    log.info("brew.created",
        brew_id=brew.id,
        teapot_id=brew.teapot_id,
        tea_id=brew.tea_id,
        water_temp_celsius=water_temp,
        defaulted_temp=body.water_temp_celsius is None,
    )
    return brew.to_dict()


@router.get("/brews/{brew_id}")
def get_brew(brew_id: str, store: Store = Depends(get_store)):
    return resolve(store.brews.get(brew_id), "Brew").to_dict()


@router.patch("/brews/{brew_id}")
def patch_brew(brew_id: str, body: BrewPatch | None = None, store: Store = Depends(get_store)):
    changes = body.changes() if body is not None else {}
    with store.transaction():
        existing = resolve(store.brews.get(brew_id), "Brew")
        brew = merge(existing, changes, utcnow())
        store.brews.update(brew)
    log.info("brew.patched", brew_id=brew_id, fields=sorted(changes), status=brew.status.value)
    return brew.to_dict()


@router.delete("/brews/{brew_id}", status_code=204)
def delete_brew(brew_id: str, store: Store = Depends(get_store)):
    if not store.delete_brew(brew_id):
        raise NotFound("Brew")
    log.info("brew.deleted", brew_id=brew_id)
    return Response(status_code=204)


# ── Steeps ────────────────────────────────────────────────────────────────────

@router.get("/brews/{brew_id}/steeps")
def list_steeps(
    brew_id: str,
    page: str | None = None,
    limit: str | None = None,
    store: Store = Depends(get_store),
):
    page_n, limit_n = clamp_pagination(page, limit)
    with store.transaction():
        resolve(store.brews.get(brew_id), "Brew")
        items = store.list_steeps_by_brew(brew_id, page_n, limit_n)
        total = store.count_steeps_by_brew(brew_id)
    return paginated(items, page_n, limit_n, total)


@router.post("/brews/{brew_id}/steeps", status_code=201)
def create_steep(brew_id: str, body: SteepCreate, store: Store = Depends(get_store)):
    with store.transaction():
        resolve(store.brews.get(brew_id), "Brew")
        steep = Steep(
            id=new_id(),
            brew_id=brew_id,
            steep_number=store.next_steep_number(brew_id),
            **body.model_dump(),
            created_at=utcnow(),
        )
        store.steeps.create(steep)
    log.info("steep.created", brew_id=brew_id, steep_id=steep.id, steep_number=steep.steep_number)
    return steep.to_dict()


# ── Health ────────────────────────────────────────────────────────────────────

@router.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "version": API_VERSION,
    }


@router.get("/health/live")
def live():
    return {"status": "ok"}


@router.get("/health/ready")
def ready(store: Store = Depends(get_store)):
    checks = [{"name": "store", "status": "ok" if store.responsive() else "down"}]
    all_ok = all(c["status"] == "ok" for c in checks)
    return JSONResponse(status_code=200 if all_ok else 503, content={
        "status": "ok" if all_ok else "degraded",
        "timestamp": utcnow().isoformat(),
        "checks": checks,
    })


@router.get("/brew")
def brew_coffee():
    """The one thing this server will never do."""
    log.warning("teapot.coffee_refused", status_code=418)
    return JSONResponse(status_code=418, content={
        "error": "I'm a teapot",
        "message": "This server is TIF-compliant and cannot brew coffee",
        "spec": "https://teapotframework.dev",
    })

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ...api import ApiState
from ...api.models import (
    CategoryInput,
    ConnectivityInput,
    EventInput,
    MoveInput,
    ScheduleInput,
    SessionInput,
    SuggestionInput,
    SyncInput,
    TaskInput,
)
from ...api.serializers import (
    serialize_category,
    serialize_event,
    serialize_session,
    serialize_suggestion,
    serialize_task,
)
from ...data import RecordNotFoundError, StorageError
from ...domain import SyncStatus
from ...logging import configure_logging
from ...sync import SyncReport
from ..calendar import DEFAULT_DROP_TIME

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _state(request: Request) -> ApiState:
    state: Optional[ApiState] = getattr(request.app.state, "api", None)
    if state is None:
        state = ApiState()
        request.app.state.api = state
    return state


def _not_found(kind: str, identifier: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{kind} '{identifier}' not found")


def _report_response(report: SyncReport) -> JSONResponse:
    status_code = 200
    if report.auth_expired:
        status_code = 401
    elif report.status is SyncStatus.FAILED:
        status_code = 502
    return JSONResponse(report.to_dict(), status_code=status_code)


# Tasks


@router.get("/tasks")
async def list_tasks(request: Request) -> List[Dict[str, Any]]:
    return [serialize_task(task) for task in _state(request).tasks.list_tasks()]


@router.get("/tasks/filter")
async def filter_tasks(
    request: Request,
    search: str = "",
    category_id: Optional[str] = None,
    show_completed: bool = False,
    sort_by: str = Query(default="priority"),
) -> List[Dict[str, Any]]:
    tasks = _state(request).tasks.filter_tasks(
        search=search,
        category_id=category_id,
        show_completed=show_completed,
        sort_by=sort_by,
    )
    return [serialize_task(task) for task in tasks]


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, request: Request) -> Dict[str, Any]:
    task = _state(request).tasks.fetch(task_id)
    if task is None:
        raise _not_found("Task", task_id)
    return serialize_task(task)


@router.post("/tasks", status_code=201)
async def create_task(payload: TaskInput, request: Request) -> Dict[str, Any]:
    task = _state(request).tasks.upsert_task(task_id=None, **payload.model_dump())
    return serialize_task(task)


@router.put("/tasks/{task_id}")
async def update_task(task_id: str, payload: TaskInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    state.tasks.require(task_id)
    return serialize_task(state.tasks.upsert_task(task_id=task_id, **payload.model_dump()))


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, request: Request) -> Response:
    if not _state(request).tasks.delete_task(task_id):
        raise _not_found("Task", task_id)
    return Response(status_code=204)


@router.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, request: Request) -> Dict[str, Any]:
    return serialize_task(_state(request).tasks.toggle_complete(task_id))


@router.post("/tasks/{task_id}/schedule", status_code=201)
async def schedule_task(task_id: str, payload: ScheduleInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    event, task = state.calendar.schedule_task(task_id, payload.day, at=payload.at or DEFAULT_DROP_TIME)
    event = await state.sync.mirror_save(event)
    return {"event": serialize_event(event), "task": serialize_task(task)}


# Events


@router.get("/events")
async def list_events(
    request: Request,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    calendar = _state(request).calendar
    if start is not None and end is not None:
        events = calendar.list_between(start, end)
    else:
        events = calendar.list_events()
    return [serialize_event(event) for event in events]


@router.get("/events/{event_id}")
async def get_event(event_id: str, request: Request) -> Dict[str, Any]:
    event = _state(request).calendar.fetch(event_id)
    if event is None:
        raise _not_found("Event", event_id)
    return serialize_event(event)


@router.post("/events", status_code=201)
async def create_event(payload: EventInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    event = state.calendar.upsert_event(event_id=None, **payload.model_dump())
    event = await state.sync.mirror_save(event)
    return serialize_event(event)


@router.put("/events/{event_id}")
async def update_event(event_id: str, payload: EventInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    state.calendar.require(event_id)
    event = state.calendar.upsert_event(event_id=event_id, **payload.model_dump())
    event = await state.sync.mirror_save(event)
    return serialize_event(event)


@router.post("/events/{event_id}/move")
async def move_event(event_id: str, payload: MoveInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    event = state.calendar.move_event(event_id, payload.start, payload.end)
    event = await state.sync.mirror_save(event)
    return serialize_event(event)


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(event_id: str, request: Request) -> Response:
    state = _state(request)
    event = state.calendar.fetch(event_id)
    if event is None:
        raise _not_found("Event", event_id)
    state.calendar.delete_event(event_id)
    await state.sync.mirror_delete(event)
    return Response(status_code=204)


# Categories


@router.get("/categories")
async def list_categories(request: Request) -> List[Dict[str, Any]]:
    return [serialize_category(category) for category in _state(request).categories.list_categories()]


@router.get("/categories/{category_id}")
async def get_category(category_id: str, request: Request) -> Dict[str, Any]:
    category = _state(request).categories.fetch(category_id)
    if category is None:
        raise _not_found("Category", category_id)
    return serialize_category(category)


@router.post("/categories", status_code=201)
async def create_category(payload: CategoryInput, request: Request) -> Dict[str, Any]:
    category = _state(request).categories.upsert_category(category_id=None, **payload.model_dump())
    return serialize_category(category)


@router.put("/categories/{category_id}")
async def update_category(category_id: str, payload: CategoryInput, request: Request) -> Dict[str, Any]:
    state = _state(request)
    state.categories.require(category_id)
    return serialize_category(state.categories.upsert_category(category_id=category_id, **payload.model_dump()))


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(category_id: str, request: Request) -> Response:
    if not _state(request).categories.delete_category(category_id):
        raise _not_found("Category", category_id)
    return Response(status_code=204)


# Summary and suggestions


@router.get("/summary/weekly")
async def weekly_summary(request: Request, narrative: bool = True) -> Dict[str, Any]:
    return _state(request).summary.weekly_summary(include_narrative=narrative)


@router.post("/suggestions")
async def suggestions(payload: SuggestionInput, request: Request) -> List[Dict[str, Any]]:
    items = _state(request).suggestions.suggest(payload.goals)
    return [serialize_suggestion(item) for item in items]


# Session and sync


@router.post("/auth/session")
async def sign_in(payload: SessionInput, request: Request) -> JSONResponse:
    state = _state(request)
    session = state.auth.sign_in(payload.to_domain())
    report = await state.sync.on_login()
    return JSONResponse({"session": serialize_session(session), "sync": report.to_dict()})


@router.delete("/auth/session", status_code=204)
async def sign_out(request: Request) -> Response:
    _state(request).auth.sign_out()
    return Response(status_code=204)


@router.post("/sync")
async def manual_sync(request: Request, payload: Optional[SyncInput] = None) -> JSONResponse:
    report = await _state(request).sync.request_manual_sync(shortcut=bool(payload and payload.shortcut))
    return _report_response(report)


@router.get("/sync")
async def sync_status(request: Request) -> Dict[str, Any]:
    return _state(request).sync.status()


@router.post("/sync/connectivity")
async def connectivity(payload: ConnectivityInput, request: Request) -> JSONResponse:
    state = _state(request)
    report = await state.sync.set_online(payload.online)
    if report is None:
        return JSONResponse({"online": state.sync.online, "sync": None})
    response = _report_response(report)
    if response.status_code != 200:
        return response
    return JSONResponse({"online": state.sync.online, "sync": report.to_dict()})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)

    @app.exception_handler(RecordNotFoundError)
    async def _missing(_: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=404)

    @app.exception_handler(ValueError)
    async def _invalid(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=400)

    @app.exception_handler(StorageError)
    async def _storage(_: Request, exc: StorageError) -> JSONResponse:
        logger.exception("Storage failure")
        return JSONResponse({"detail": str(exc)}, status_code=500)


def create_app(state: Optional[ApiState] = None) -> FastAPI:
    """Build the FastAPI app; ``state`` is created lazily when omitted."""

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        api_state = getattr(app.state, "api", None) or ApiState()
        app.state.api = api_state
        api_state.categories.seed_defaults()
        periodic: Optional[asyncio.Task] = None
        if api_state.settings.sync.auto_sync:
            await api_state.sync.on_startup()
            periodic = asyncio.create_task(api_state.sync.run_periodic())
        try:
            yield
        finally:
            if periodic is not None:
                periodic.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await periodic
            await api_state.aclose()

    app = FastAPI(title="Smart Calendar Local API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if state is not None:
        app.state.api = state
    _install_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()


def run_local_server(host: str = "127.0.0.1", port: int = 5000) -> None:
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    configure_logging()
    config = Config()
    config.bind = [f"{host}:{port}"]
    logger.info("Serving Smart Calendar API on %s:%s", host, port)
    asyncio.run(serve(app, config))

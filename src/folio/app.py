# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from folio.auth.session import MemorySessionStore, SessionManager, prune_periodically
from folio.auth.users import authenticate, ensure_admin
from folio.config import Settings, load_settings
from folio.core.errors import AuthenticationError
from folio.core.logs import setup_logging
from folio.core.mapping import MESSAGES, PROJECTS, SKILLS
from folio.handlers import register_exception_handlers
from folio.infra.store import EntityStore, MemoryStore
from folio.infra.workbook_store import WorkbookStore
from folio.models import AboutInfo, ContactMessage, Project, PublicUser, Skill
from folio.permissions import CurrentUser, cookie_settings, current_user_optional, load_user_from_request, require_user
from folio.schemas import (
    AboutUpdate,
    ContactCreate,
    LoginRequest,
    ProjectCreate,
    ProjectUpdate,
    SkillCreate,
    SkillUpdate,
)
from folio.services import content_service
from folio.services.seed_service import load_seed_file, seed_store

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def _message(text: str) -> dict:
    return {"message": text}


# ------------------ Auth ------------------


@router.post("/auth/login")
def login(request: Request, payload: Optional[LoginRequest] = None):
    username, password = payload.credentials() if payload else ("", "")
    store = get_store(request)
    user = authenticate(store, username, password)
    if user is None:
        LOGGER.warning("Login failed username=%s", username)
        raise AuthenticationError("Invalid username or password")

    settings: Settings = request.app.state.settings
    sessions = get_sessions(request)
    previous = request.cookies.get(settings.cookie_name)
    if previous:
        sessions.revoke(previous)
    _, cookie_value = sessions.create(user.id)

    LOGGER.info("Login succeeded username=%s", user.username)
    resp = JSONResponse({"message": "Login successful", "user": user.public().model_dump(by_alias=True)})
    resp.set_cookie(settings.cookie_name, cookie_value, **cookie_settings(settings, sessions))
    return resp


@router.post("/auth/logout")
def logout(request: Request):
    settings: Settings = request.app.state.settings
    token = request.cookies.get(settings.cookie_name)
    if token and get_sessions(request).revoke(token):
        u = getattr(request.state, "user", None)
        LOGGER.info("Logout username=%s", u.username if u else "-")
    resp = JSONResponse(_message("Logout successful"))
    resp.delete_cookie(settings.cookie_name, httponly=True, samesite="lax", secure=settings.cookie_secure)
    return resp


@router.get("/auth/user", response_model=PublicUser)
def auth_user(request: Request):
    u = current_user_optional(request)
    if not u:
        raise AuthenticationError("Not authenticated")
    return PublicUser(id=u.id, username=u.username, is_admin=u.is_admin)


# ------------------ Projects ------------------


@router.get("/projects", response_model=List[Project])
def list_projects(store: EntityStore = Depends(get_store)):
    return content_service.list_records(store, PROJECTS)


@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, store: EntityStore = Depends(get_store)):
    return content_service.get_record(store, PROJECTS, project_id)


@router.post("/projects", response_model=Project, status_code=201)
def create_project(
    payload: ProjectCreate,
    store: EntityStore = Depends(get_store),
    user: CurrentUser = Depends(require_user),
):
    return content_service.create_record(store, PROJECTS, payload.to_fields())


@router.put("/projects/{project_id}", response_model=Project)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    store: EntityStore = Depends(get_store),
    user: CurrentUser = Depends(require_user),
):
    return content_service.update_record(store, PROJECTS, project_id, payload.to_fields())


@router.delete("/projects/{project_id}")
def delete_project(project_id: str, store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return _message(content_service.delete_record(store, PROJECTS, project_id))


# ------------------ Skills ------------------


@router.get("/skills", response_model=List[Skill])
def list_skills(store: EntityStore = Depends(get_store)):
    return content_service.list_records(store, SKILLS)


@router.get("/skills/{skill_id}", response_model=Skill)
def get_skill(skill_id: str, store: EntityStore = Depends(get_store)):
    return content_service.get_record(store, SKILLS, skill_id)


@router.post("/skills", response_model=Skill, status_code=201)
def create_skill(
    payload: SkillCreate,
    store: EntityStore = Depends(get_store),
    user: CurrentUser = Depends(require_user),
):
    return content_service.create_record(store, SKILLS, payload.to_fields())


@router.put("/skills/{skill_id}", response_model=Skill)
def update_skill(
    skill_id: str,
    payload: SkillUpdate,
    store: EntityStore = Depends(get_store),
    user: CurrentUser = Depends(require_user),
):
    return content_service.update_record(store, SKILLS, skill_id, payload.to_fields())


@router.delete("/skills/{skill_id}")
def delete_skill(skill_id: str, store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return _message(content_service.delete_record(store, SKILLS, skill_id))


# ------------------ About ------------------


@router.get("/about", response_model=AboutInfo)
def get_about(store: EntityStore = Depends(get_store)):
    return content_service.get_about(store)


@router.put("/about", response_model=AboutInfo)
def put_about(payload: AboutUpdate, store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return content_service.save_about(store, payload.to_fields())


# ------------------ Contact ------------------


@router.post("/contact", response_model=ContactMessage, status_code=201)
def submit_contact(payload: ContactCreate, store: EntityStore = Depends(get_store)):
    return content_service.create_record(store, MESSAGES, payload.to_fields())


@router.get("/contact/messages", response_model=List[ContactMessage])
def list_messages(store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return content_service.list_records(store, MESSAGES)


@router.put("/contact/messages/{message_id}/read")
def mark_message_read(message_id: str, store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return _message(content_service.mark_message_read(store, message_id))


@router.delete("/contact/messages/{message_id}")
def delete_message(message_id: str, store: EntityStore = Depends(get_store), user: CurrentUser = Depends(require_user)):
    return _message(content_service.delete_record(store, MESSAGES, message_id))


@router.get("/health")
def health():
    return {"status": "ok"}


# ------------------ App factory ------------------


def build_store(settings: Settings) -> EntityStore:
    """Instantiate the store backend selected by FOLIO_STORE."""
    if settings.store_backend == "workbook":
        return WorkbookStore(settings.workbook_path)
    return MemoryStore()


def _bootstrap_content(store: EntityStore, settings: Settings) -> None:
    if settings.seed_path:
        seed_store(store, load_seed_file(settings.seed_path), admin_password=settings.admin_password or None)
    if settings.admin_username and settings.admin_password:
        ensure_admin(store, settings.admin_username, settings.admin_password)


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[EntityStore] = None,
    sessions: Optional[SessionManager] = None,
) -> FastAPI:
    """Build the API. Settings default to the environment; a missing secret aborts startup."""
    settings = settings or load_settings()
    if not settings.secret_key:
        raise RuntimeError("SESSION_SECRET (or FOLIO_SECRET_KEY) must be set")
    setup_logging(settings.log_level, json_logs=settings.log_json)

    if store is None:
        store = build_store(settings)
    if sessions is None:
        sessions = SessionManager(MemorySessionStore(), settings.secret_key, max_age=settings.session_max_age)
    _bootstrap_content(store, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(prune_periodically(sessions, settings.session_prune_interval))
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(title="folio", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.sessions = sessions
    register_exception_handlers(app)

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        request.state.user = await run_in_threadpool(load_user_from_request, request)
        return await call_next(request)

    app.include_router(router)
    LOGGER.info("folio ready store=%s env=%s", type(store).__name__, settings.env)
    return app

# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Mapping between entity kinds, their record models and their storage sheets.

Centralising this keeps the store backends kind-agnostic: they only move rows
around, while column types and sort keys live here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Type

from folio.models import AboutInfo, ApiModel, ContactMessage, Project, Skill, User

PROJECTS = "projects"
SKILLS = "skills"
MESSAGES = "messages"
ABOUT = "about"
USERS = "users"

# Kinds reachable through the generic list/get/create/update/delete operations
CONTENT_KINDS = (PROJECTS, SKILLS, MESSAGES)


@dataclass(frozen=True)
class EntitySpec:
    kind: str
    label: str
    sheet: str
    model: Type[ApiModel]
    order_by: Tuple[str, ...]
    # column -> "str" | "int" | "bool" | "json" | "datetime"
    columns: Dict[str, str] = field(default_factory=dict)


ENTITIES: Dict[str, EntitySpec] = {
    PROJECTS: EntitySpec(
        kind=PROJECTS,
        label="Project",
        sheet="projects",
        model=Project,
        order_by=("order", "id"),
        columns={
            "id": "str",
            "title": "str",
            "description": "str",
            "long_description": "str",
            "image_url": "str",
            "demo_url": "str",
            "github_url": "str",
            "technologies": "json",
            "featured": "bool",
            "order": "int",
            "created_at": "datetime",
        },
    ),
    SKILLS: EntitySpec(
        kind=SKILLS,
        label="Skill",
        sheet="skills",
        model=Skill,
        order_by=("order", "id"),
        columns={
            "id": "str",
            "name": "str",
            "category": "str",
            "proficiency": "int",
            "icon": "str",
            "order": "int",
        },
    ),
    MESSAGES: EntitySpec(
        kind=MESSAGES,
        label="Message",
        sheet="contact_messages",
        model=ContactMessage,
        order_by=("created_at", "id"),
        columns={
            "id": "str",
            "name": "str",
            "email": "str",
            "subject": "str",
            "message": "str",
            "read": "bool",
            "created_at": "datetime",
        },
    ),
    ABOUT: EntitySpec(
        kind=ABOUT,
        label="About info",
        sheet="about_info",
        model=AboutInfo,
        order_by=("id",),
        columns={
            "id": "str",
            "name": "str",
            "title": "str",
            "bio": "str",
            "avatar_url": "str",
            "resume_url": "str",
            "github_url": "str",
            "linkedin_url": "str",
            "twitter_url": "str",
            "email": "str",
            "updated_at": "datetime",
        },
    ),
    USERS: EntitySpec(
        kind=USERS,
        label="User",
        sheet="users",
        model=User,
        order_by=("username",),
        columns={
            "id": "str",
            "username": "str",
            "password_hash": "str",
            "is_admin": "bool",
        },
    ),
}


def spec_for(kind: str) -> Optional[EntitySpec]:
    """Return metadata for a kind (e.g. 'projects')."""
    return ENTITIES.get(str(kind or "").strip().lower())


def require_spec(kind: str) -> EntitySpec:
    spec = spec_for(kind)
    if spec is None:
        raise ValueError(f"Unknown entity kind '{kind}'")
    return spec

# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Persisted record shapes.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ABOUT_ID = "main"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Project(ApiModel):
    id: str
    title: str
    description: str
    long_description: Optional[str] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: List[str]
    featured: bool = False
    order: int = 0
    created_at: datetime


class Skill(ApiModel):
    id: str
    name: str
    category: str
    proficiency: int
    icon: Optional[str] = None
    order: int = 0


class ContactMessage(ApiModel):
    id: str
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    read: bool = False
    created_at: datetime


class AboutInfo(ApiModel):
    id: str = ABOUT_ID
    name: str
    title: str
    bio: str
    avatar_url: Optional[str] = None
    resume_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    email: Optional[str] = None
    updated_at: datetime


class User(ApiModel):
    id: str
    username: str
    password_hash: str
    is_admin: bool = True

    def public(self) -> "PublicUser":
        return PublicUser(id=self.id, username=self.username, is_admin=self.is_admin)


class PublicUser(ApiModel):
    id: str
    username: str
    is_admin: bool = True

# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request payloads.

Validation happens here, before anything reaches the store. Each rule raises
a message naming the violated constraint, e.g. "proficiency must be between
1 and 100".
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import AnyHttpUrl, ConfigDict, EmailStr, StrictBool, StrictInt, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from folio.core.utils import has_control_chars, none_if_blank
from folio.models import ApiModel

SKILL_CATEGORIES = ("Frontend", "Backend", "3D/Graphics", "Tools", "Other")
PROFICIENCY_MIN = 1
PROFICIENCY_MAX = 100
CONTACT_NAME_MIN = 2
CONTACT_MESSAGE_MIN = 10

_URL = TypeAdapter(AnyHttpUrl)


def _check_url(value: Optional[str], field_name: str) -> Optional[str]:
    value = none_if_blank(value)
    if value is None:
        return None
    try:
        _URL.validate_python(value)
    except PydanticValidationError:
        raise ValueError(f"{to_camel(field_name)} must be a valid URL")
    return value


class Payload(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    # Fields that may be omitted from a partial update but never set to null
    not_null: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def _no_control_chars(cls, v, info):
        if has_control_chars(v):
            raise ValueError(f"{to_camel(info.field_name)} contains unsupported control characters")
        return v

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        for name in self.not_null:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def to_fields(self) -> dict:
        """Snake_case dict of the values the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ------------------ Projects ------------------


class _ProjectRules(Payload):
    @field_validator("title", "description", check_fields=False)
    @classmethod
    def _text_required(cls, v, info):
        if v is not None and not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("long_description", check_fields=False)
    @classmethod
    def _blank_to_none(cls, v):
        return none_if_blank(v)

    @field_validator("image_url", "demo_url", "github_url", check_fields=False)
    @classmethod
    def _urls(cls, v, info):
        return _check_url(v, info.field_name)

    @field_validator("technologies", check_fields=False)
    @classmethod
    def _at_least_one_technology(cls, v):
        if v is None:
            return v
        cleaned = [t.strip() for t in v if t and t.strip()]
        if not cleaned:
            raise ValueError("At least one technology is required")
        return cleaned


class ProjectCreate(_ProjectRules):
    title: str
    description: str
    long_description: Optional[str] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: List[str]
    featured: StrictBool = False
    order: StrictInt = 0

    def to_fields(self) -> dict:
        return self.model_dump()


class ProjectUpdate(_ProjectRules):
    not_null = ("title", "description", "technologies", "featured", "order")

    title: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: Optional[List[str]] = None
    featured: Optional[StrictBool] = None
    order: Optional[StrictInt] = None


# ------------------ Skills ------------------


class _SkillRules(Payload):
    @field_validator("name", check_fields=False)
    @classmethod
    def _name_required(cls, v):
        if v is not None and not v:
            raise ValueError("name is required")
        return v

    @field_validator("category", check_fields=False)
    @classmethod
    def _known_category(cls, v):
        if v is not None and v not in SKILL_CATEGORIES:
            raise ValueError("category must be one of: " + ", ".join(SKILL_CATEGORIES))
        return v

    @field_validator("proficiency", check_fields=False)
    @classmethod
    def _proficiency_range(cls, v):
        if v is not None and not (PROFICIENCY_MIN <= v <= PROFICIENCY_MAX):
            raise ValueError(f"proficiency must be between {PROFICIENCY_MIN} and {PROFICIENCY_MAX}")
        return v

    @field_validator("icon", check_fields=False)
    @classmethod
    def _blank_icon(cls, v):
        return none_if_blank(v)


class SkillCreate(_SkillRules):
    name: str
    category: str
    proficiency: StrictInt
    icon: Optional[str] = None
    order: StrictInt = 0

    def to_fields(self) -> dict:
        return self.model_dump()


class SkillUpdate(_SkillRules):
    not_null = ("name", "category", "proficiency", "order")

    name: Optional[str] = None
    category: Optional[str] = None
    proficiency: Optional[StrictInt] = None
    icon: Optional[str] = None
    order: Optional[StrictInt] = None


# ------------------ Contact ------------------


class ContactCreate(Payload):
    name: str
    email: EmailStr
    subject: Optional[str] = None
    message: str

    @field_validator("name")
    @classmethod
    def _name_length(cls, v):
        if len(v) < CONTACT_NAME_MIN:
            raise ValueError(f"Name must be at least {CONTACT_NAME_MIN} characters")
        return v

    @field_validator("message")
    @classmethod
    def _message_length(cls, v):
        if len(v) < CONTACT_MESSAGE_MIN:
            raise ValueError(f"Message must be at least {CONTACT_MESSAGE_MIN} characters")
        return v

    @field_validator("subject")
    @classmethod
    def _blank_subject(cls, v):
        return none_if_blank(v)

    def to_fields(self) -> dict:
        return self.model_dump()


# ------------------ About ------------------


class AboutUpdate(Payload):
    name: str
    title: str
    bio: str
    avatar_url: Optional[str] = None
    resume_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("name", "title", "bio")
    @classmethod
    def _text_required(cls, v, info):
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("avatar_url", "resume_url", "github_url", "linkedin_url", "twitter_url")
    @classmethod
    def _urls(cls, v, info):
        return _check_url(v, info.field_name)

    def to_fields(self) -> dict:
        return self.model_dump()


# ------------------ Auth ------------------


class LoginRequest(ApiModel):
    model_config = ConfigDict(extra="ignore")

    username: Any = ""
    password: Any = ""

    def credentials(self) -> Tuple[str, str]:
        u = self.username if isinstance(self.username, str) else ""
        p = self.password if isinstance(self.password, str) else ""
        return u.strip(), p

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

_ARTICLE_CHARS = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


def _check_article(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("article is required")
    if not _ARTICLE_CHARS.match(v):
        raise ValueError("article may contain only Latin letters, digits, spaces, hyphens and underscores")
    return v


class ProductCreate(BaseModel):
    name: str
    article: str
    brand_id: int | None = None
    category_id: int | None = None
    color_id: int | str | None = None
    price: float = 0.0
    composition: str = ""

    @field_validator("article")
    @classmethod
    def validate_article(cls, v):
        return _check_article(v)


class ProductUpdate(BaseModel):
    name: str | None = None
    article: str | None = None
    brand_id: int | None = None
    category_id: int | None = None
    color_id: int | str | None = None
    price: float | None = None
    composition: str | None = None

    @field_validator("article")
    @classmethod
    def validate_article(cls, v):
        if v is None:
            return v
        return _check_article(v)


class ProductOut(BaseModel):
    id: int
    name: str
    article: str
    brand_id: int | None
    category_id: int | None
    color_id: int | None
    price: float
    composition: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ReferenceCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        if not v.strip():
            raise ValueError("name is required")
        return v.strip()


class ReferenceOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}

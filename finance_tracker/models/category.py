from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=64)
    color: str = Field(pattern=HEX_COLOR_PATTERN)
    icon: str = Field(min_length=1, max_length=64)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=64)


class Category(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    color: str
    icon: str


DEFAULT_CATEGORIES = [
    CategoryCreate(name="Food & Dining", color="#3B82F6", icon="utensils"),
    CategoryCreate(name="Transport", color="#10B981", icon="car"),
    CategoryCreate(name="Entertainment", color="#8B5CF6", icon="film"),
    CategoryCreate(name="Utilities", color="#F59E0B", icon="zap"),
    CategoryCreate(name="Healthcare", color="#EF4444", icon="heart"),
    CategoryCreate(name="Shopping", color="#EC4899", icon="shopping-bag"),
    CategoryCreate(name="Education", color="#06B6D4", icon="book"),
    CategoryCreate(name="Other", color="#6B7280", icon="more-horizontal"),
]

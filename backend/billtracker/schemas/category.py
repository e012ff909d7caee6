# billtracker/schemas/category.py
from pydantic import BaseModel, Field
from typing import Optional

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    color: str = Field("#3b82f6", pattern=HEX_COLOR)
    icon: str = Field("📁", max_length=16)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=16)


class CategoryOut(CategoryBase):
    id: int
    user_id: int

    class Config:
        from_attributes = True

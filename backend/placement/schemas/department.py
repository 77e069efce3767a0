"""
Schémas Pydantic pour les départements.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class DepartmentCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Department name is required")
        return v.strip()


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Department name is required")
        return v.strip() if v else v


class DepartmentResponse(BaseModel):
    id: uuid.UUID
    name: str
    is_active: bool
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

from pydantic import BaseModel, Field
from typing import List, Optional

from ...models.rollcall_models import StudentImportRow


class StudentRequest(BaseModel):
    """Request model for creating or replacing a student."""
    name: str = Field(..., min_length=1)
    matricule: str = Field(..., min_length=1, description="Unique student identification code.")
    field: str = Field(..., min_length=1)
    level: str = Field(..., min_length=1)
    parent_name: str = Field(..., min_length=1)
    parent_phone: str = Field(..., min_length=1)
    parent_email: Optional[str] = None
    photo: Optional[str] = None


class StudentImportRequest(BaseModel):
    students: List[StudentImportRow] = Field(..., min_length=1)


class FieldRequest(BaseModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=10, description="Stored upper-cased.")
    description: Optional[str] = None
    levels: Optional[List[str]] = Field(None, description="Defaults to Level 100 and Level 200.")

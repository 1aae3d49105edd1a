"""
Student-related Pydantic models
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from email_validator import validate_email, EmailNotValidError

MIN_ENROLLMENT_YEAR = 2000
MAX_ENROLLMENT_YEAR = 2024
MIN_PASSWORD_LENGTH = 6


class StudentCreateRequest(BaseModel):
    """Creation payload. Field order is the order violations are reported in."""
    model_config = ConfigDict(extra="forbid")

    student_id: StrictStr = Field(min_length=1)
    name: StrictStr = Field(min_length=1)
    email: StrictStr = Field(min_length=1)
    password: StrictStr = Field(min_length=MIN_PASSWORD_LENGTH)
    department: StrictStr = Field(min_length=1)
    enrollment_year: int = Field(ge=MIN_ENROLLMENT_YEAR, le=MAX_ENROLLMENT_YEAR)

    @field_validator("email")
    @classmethod
    def validate_email_grammar(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        # keep the address exactly as submitted
        return value

    @field_validator("enrollment_year", mode="before")
    @classmethod
    def reject_booleans(cls, value):
        if isinstance(value, bool):
            raise ValueError("booleans are not numbers")
        return value


class StudentResponse(BaseModel):
    """Safe view of a student row - never carries the credential hash"""
    id: int
    student_id: str
    name: str
    email: str
    department: str
    enrollment_year: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str


class ErrorResponse(BaseModel):
    error: str

"""
Shared fixtures for the student registry test suite
"""

import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List

import httpx
import pytest
import pytest_asyncio

from app import create_app
from services.credential_hasher import ScryptCredentialHasher
from services.students_service import UPDATABLE_FIELDS
from utils.errors import ConflictError, NotFoundError, InternalError


class InMemoryStudentsService:
    """
    Stand-in for StudentsService used by the HTTP tests.

    Mirrors the gateway contract: unique student_id/email, store-assigned
    id and timestamps, newest-first listing, COALESCE-style updates.
    """

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.password_hashes: Dict[str, str] = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, 12, 0, 0)
        self.healthy = True

    def _now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _view(row: Dict[str, Any]) -> Dict[str, Any]:
        return dict(row)

    def _find(self, student_id: str) -> Dict[str, Any]:
        for row in self.rows:
            if row["student_id"] == student_id:
                return row
        raise NotFoundError("Student not found", student_id=student_id)

    async def insert(self, student: Dict[str, Any], password_hash: str) -> Dict[str, Any]:
        for field in ("student_id", "email"):
            if any(row[field] == student[field] for row in self.rows):
                raise ConflictError(
                    f"Student with this {field} already exists",
                    student_id=student["student_id"],
                    field=field
                )
        now = self._now()
        row = {
            "id": next(self._ids),
            "student_id": student["student_id"],
            "name": student["name"],
            "email": student["email"],
            "department": student["department"],
            "enrollment_year": student["enrollment_year"],
            "created_at": now,
            "updated_at": now,
        }
        self.rows.append(row)
        self.password_hashes[student["student_id"]] = password_hash
        return self._view(row)

    async def list_all(self) -> List[Dict[str, Any]]:
        ordered = sorted(self.rows, key=lambda row: (row["created_at"], row["id"]), reverse=True)
        return [self._view(row) for row in ordered]

    async def get_by_student_id(self, student_id: str) -> Dict[str, Any]:
        return self._view(self._find(student_id))

    async def update(self, student_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = self._find(student_id)
        email = fields.get("email")
        if email is not None and any(
            other["email"] == email and other is not row for other in self.rows
        ):
            raise ConflictError("Student with this email already exists", student_id=student_id, field="email")
        changes = {name: fields[name] for name in UPDATABLE_FIELDS if fields.get(name) is not None}
        if "enrollment_year" in changes:
            # the store casts the bound text to an integer
            try:
                changes["enrollment_year"] = int(str(changes["enrollment_year"]))
            except ValueError as e:
                raise InternalError("update failed", student_id=student_id) from e
        row.update(changes)
        row["updated_at"] = self._now()
        return self._view(row)

    async def delete_by_student_id(self, student_id: str) -> None:
        row = self._find(student_id)
        self.rows.remove(row)
        self.password_hashes.pop(student_id, None)

    async def ping(self) -> bool:
        return self.healthy


def make_student(**overrides) -> Dict[str, Any]:
    """A valid creation payload"""
    payload = {
        "student_id": "STU001",
        "name": "John Doe",
        "email": "john@example.com",
        "password": "password123",
        "department": "Computer Science",
        "enrollment_year": 2023,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def student_payload() -> Dict[str, Any]:
    return make_student()


@pytest.fixture
def fast_hasher() -> ScryptCredentialHasher:
    # Low cost parameters keep the suite fast; production uses settings
    return ScryptCredentialHasher(n=16, r=8, p=1)


@pytest.fixture
def students_service() -> InMemoryStudentsService:
    return InMemoryStudentsService()


@pytest.fixture
def app(students_service, fast_hasher):
    return create_app(students_service=students_service, credential_hasher=fast_hasher)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def student_factory():
    return make_student

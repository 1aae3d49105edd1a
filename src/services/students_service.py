"""
Students service - persistence gateway for the students table

Every operation acquires one pooled connection, runs a single
parameterized statement and maps the resulting row to a plain dict.
The password column is never selected back out of the table.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, List, Optional

import asyncpg
from fastapi import Request

from utils.errors import ConflictError, NotFoundError, InternalError

logger = logging.getLogger(__name__)

# Columns returned by every read path (safe view)
STUDENT_COLUMNS = "id, student_id, name, email, department, enrollment_year, created_at, updated_at"

UPDATABLE_FIELDS = ("name", "email", "department", "enrollment_year")

# Default constraint names generated by PostgreSQL for the UNIQUE columns
_CONSTRAINT_FIELDS = {
    "students_student_id_key": "student_id",
    "students_email_key": "email",
}


def _as_text(value: Any) -> Optional[str]:
    """Render a raw JSON value the way it is bound for a text parameter"""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class StudentsService:
    """Persistence gateway for student records"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @asynccontextmanager
    async def _connection(self, operation: str, student_id: Optional[str] = None):
        """Acquire a connection and translate store failures into domain errors"""
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except asyncpg.UniqueViolationError as e:
            field = _CONSTRAINT_FIELDS.get(getattr(e, "constraint_name", None) or "")
            logger.warning(f"{operation} rejected by unique constraint for student {student_id}: {field or 'unknown field'}")
            raise ConflictError(
                f"Student with this {field or 'student_id or email'} already exists",
                student_id=student_id,
                field=field
            ) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"{operation} failed for student {student_id}: {e}")
            raise InternalError(f"{operation} failed", student_id=student_id) from e

    async def insert(self, student: Dict[str, Any], password_hash: str) -> Dict[str, Any]:
        """
        Insert a new student

        Args:
            student: Validated creation fields (password excluded)
            password_hash: Output of the credential hasher

        Returns:
            The stored record including generated id and timestamps

        Raises:
            ConflictError: student_id or email already exists
        """
        query = f"""
            INSERT INTO students (student_id, name, email, password, department, enrollment_year)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {STUDENT_COLUMNS}
        """
        async with self._connection("insert", student["student_id"]) as conn:
            row = await conn.fetchrow(
                query,
                student["student_id"],
                student["name"],
                student["email"],
                password_hash,
                student["department"],
                student["enrollment_year"]
            )
        return dict(row)

    async def list_all(self) -> List[Dict[str, Any]]:
        """All students, newest first"""
        query = f"SELECT {STUDENT_COLUMNS} FROM students ORDER BY created_at DESC, id DESC"
        async with self._connection("list") as conn:
            rows = await conn.fetch(query)
        return [dict(row) for row in rows]

    async def get_by_student_id(self, student_id: str) -> Dict[str, Any]:
        """Raises NotFoundError when no row matches"""
        query = f"SELECT {STUDENT_COLUMNS} FROM students WHERE student_id = $1"
        async with self._connection("get", student_id) as conn:
            row = await conn.fetchrow(query, student_id)
        if row is None:
            raise NotFoundError("Student not found", student_id=student_id)
        return dict(row)

    async def update(self, student_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply name/email/department/enrollment_year and refresh updated_at.

        Absent or null fields keep their stored value. Values are bound as
        text and cast by the store, so a form-style "2021" year is accepted
        and anything the store can't convert fails there; no validation
        happens here.
        """
        query = f"""
            UPDATE students
            SET name = COALESCE($1::text, name),
                email = COALESCE($2::text, email),
                department = COALESCE($3::text, department),
                enrollment_year = COALESCE($4::text::integer, enrollment_year),
                updated_at = CURRENT_TIMESTAMP
            WHERE student_id = $5
            RETURNING {STUDENT_COLUMNS}
        """
        async with self._connection("update", student_id) as conn:
            row = await conn.fetchrow(
                query,
                *(_as_text(fields.get(name)) for name in UPDATABLE_FIELDS),
                student_id
            )
        if row is None:
            raise NotFoundError("Student not found", student_id=student_id)
        return dict(row)

    async def delete_by_student_id(self, student_id: str) -> None:
        """Permanently remove a student; raises NotFoundError when none matched"""
        async with self._connection("delete", student_id) as conn:
            deleted_id = await conn.fetchval(
                "DELETE FROM students WHERE student_id = $1 RETURNING id",
                student_id
            )
        if deleted_id is None:
            raise NotFoundError("Student not found", student_id=student_id)

    async def ping(self) -> bool:
        async with self._connection("ping") as conn:
            return await conn.fetchval("SELECT 1") == 1


def get_students_service(request: Request) -> StudentsService:
    """FastAPI dependency returning the gateway created at startup"""
    return request.app.state.students_service

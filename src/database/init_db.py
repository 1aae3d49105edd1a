"""
Creates the students schema if it does not already exist.

Applied at startup when DB_AUTO_INIT is enabled. Every statement is
idempotent so it is safe to run against an initialized database.
"""

import logging

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS students (
    id              SERIAL PRIMARY KEY,
    student_id      VARCHAR(20) UNIQUE NOT NULL,
    name            VARCHAR(100) NOT NULL,
    email           VARCHAR(100) UNIQUE NOT NULL,
    password        VARCHAR(255) NOT NULL,
    department      VARCHAR(50) NOT NULL,
    enrollment_year INTEGER NOT NULL,
    created_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_student_id ON students(student_id);
CREATE INDEX IF NOT EXISTS idx_email ON students(email);

-- Keep updated_at current on every UPDATE
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ language 'plpgsql';

DROP TRIGGER IF EXISTS update_students_updated_at ON students;
CREATE TRIGGER update_students_updated_at
    BEFORE UPDATE ON students
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();
"""


async def create_schema(conn: asyncpg.Connection) -> None:
    """Create the students table, indexes and updated_at trigger."""
    # Serialize concurrent startups so two replicas don't race on DDL
    async with conn.transaction():
        await conn.execute("SELECT pg_advisory_xact_lock(hashtext('students_schema'))")
        await conn.execute(SCHEMA_SQL)
    logger.info("Students schema ensured")

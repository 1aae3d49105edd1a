"""
Domain error taxonomy for student operations
"""

from typing import Optional


class StudentServiceError(Exception):
    """Base class for all student service failures"""

    def __init__(self, message: str, student_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.student_id = student_id


class ValidationError(StudentServiceError):
    """Client-supplied data violates the creation schema"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(StudentServiceError):
    """No student exists for the given external identifier"""


class ConflictError(StudentServiceError):
    """A unique constraint (student_id or email) rejected the write"""

    def __init__(self, message: str, student_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message, student_id)
        self.field = field


class InternalError(StudentServiceError):
    """Any other persistence or unexpected failure"""

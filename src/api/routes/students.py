"""
Student management API routes

Handlers are stateless: decode the request, validate and hash (create
only), delegate to the persistence gateway, then map the outcome to a
status code. Domain errors are translated to HTTPException here; the
centralized handlers render them as {"error": message}.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from starlette.concurrency import run_in_threadpool

from models.student import StudentResponse, ErrorResponse
from services.credential_hasher import CredentialHasher, get_credential_hasher
from services.student_validation import validate_student_payload
from services.students_service import StudentsService, get_students_service, UPDATABLE_FIELDS
from utils.error_handling import INTERNAL_ERROR_MESSAGE, log_business_error, set_endpoint_context
from utils.errors import ValidationError, NotFoundError, ConflictError

router = APIRouter(responses={
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Student not found"


def _internal_error(request: Request, operation: str, student_id: Any, e: Exception) -> HTTPException:
    log_business_error(
        "internal",
        f"Error {operation} student",
        request=request,
        exception=e,
        context={"operation": operation, "student_id": student_id}
    )
    return HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    request: Request,
    payload: Any = Body(None),
    students_service: StudentsService = Depends(get_students_service),
    hasher: CredentialHasher = Depends(get_credential_hasher)
):
    """Register a new student"""
    set_endpoint_context("create_student")
    student_id = payload.get("student_id") if isinstance(payload, dict) else None

    try:
        student = validate_student_payload(payload)

        # scrypt is CPU bound - keep it off the event loop
        password_hash = await run_in_threadpool(hasher.hash, student.password)

        created = await students_service.insert(
            student.model_dump(exclude={"password"}),
            password_hash
        )

        logger.info(f"Student created: {student.student_id}")
        return created

    except ValidationError as e:
        logger.info(f"Rejected student payload for {student_id}: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except ConflictError as e:
        logger.warning(f"Duplicate student {student_id}: {e.message}")
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        raise _internal_error(request, "creating", student_id, e)


@router.get("", response_model=List[StudentResponse])
async def list_students(
    request: Request,
    students_service: StudentsService = Depends(get_students_service)
):
    """List all students, newest first"""
    set_endpoint_context("list_students")

    try:
        return await students_service.list_all()
    except Exception as e:
        raise _internal_error(request, "fetching", None, e)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    request: Request,
    student_id: str,
    students_service: StudentsService = Depends(get_students_service)
):
    """Get a student by external identifier"""
    set_endpoint_context("get_student")

    try:
        return await students_service.get_by_student_id(student_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        raise _internal_error(request, "fetching", student_id, e)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    request: Request,
    student_id: str,
    payload: Any = Body(None),
    students_service: StudentsService = Depends(get_students_service)
):
    """
    Update name, email, department and enrollment_year.

    The values are not run through the creation validation gate;
    anything the store rejects surfaces as a 500.
    """
    set_endpoint_context("update_student")

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail='"value" must be of type object')

    fields: Dict[str, Any] = {name: payload[name] for name in UPDATABLE_FIELDS if name in payload}

    try:
        updated = await students_service.update(student_id, fields)
        logger.info(f"Student updated: {student_id} ({', '.join(fields) or 'no fields'})")
        return updated
    except NotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except ConflictError as e:
        logger.warning(f"Update of {student_id} conflicts: {e.message}")
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        raise _internal_error(request, "updating", student_id, e)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_student(
    request: Request,
    student_id: str,
    students_service: StudentsService = Depends(get_students_service)
):
    """Permanently delete a student"""
    set_endpoint_context("delete_student")

    try:
        await students_service.delete_by_student_id(student_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        raise _internal_error(request, "deleting", student_id, e)

    logger.info(f"Student deleted: {student_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

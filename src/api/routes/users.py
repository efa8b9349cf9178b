"""User CRUD routes.

Endpoints:
- POST /users: Create a user
- POST /users/batch: Create users from an uploaded CSV file
- GET /users/{id}: Get an enabled user
- PATCH /users/{id}: Update some or all user fields
- DELETE /users/{id}: Soft delete a user
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from api.dependencies import get_user_service
from api.models import (
    BatchCreatedResponse,
    CreatedResponse,
    CreateUserRequest,
    ErrorDetail,
    UpdateUserRequest,
    UserResponse,
)
from domain.model.errors import (
    DeadlineExceededError,
    DomainError,
    DuplicateError,
    MalformedInputError,
    NotFoundError,
    UnsupportedFormatError,
    ValidationError,
)
from services.user_import import parse_users_csv
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

# Looked up along the error's MRO, so subclasses inherit their parent's status
STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateError: status.HTTP_400_BAD_REQUEST,
    UnsupportedFormatError: status.HTTP_400_BAD_REQUEST,
    MalformedInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DeadlineExceededError: status.HTTP_504_GATEWAY_TIMEOUT,
}


def to_http_error(error: DomainError) -> HTTPException:
    """Convert a domain error to an HTTPException carrying an ErrorDetail."""
    status_code = next(
        (STATUS_CODES[cls] for cls in type(error).__mro__ if cls in STATUS_CODES),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    details = error.details
    if isinstance(error, ValidationError) and error.violations:
        details = [asdict(v) for v in error.violations]

    if status_code >= 500:
        logger.error("Request failed", extra={"code": error.code, "error": error.message})

    detail = ErrorDetail(code=error.code, message=error.message, details=details)
    return HTTPException(status_code=status_code, detail=detail.model_dump())


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(request: CreateUserRequest, service: UserService = Depends(get_user_service)):
    """Create a user.

    Raises:
        HTTPException: 400 invalid input or email/userName in use, 500 store failure
    """
    try:
        user_id = service.create_user(request.to_domain())
    except DomainError as e:
        raise to_http_error(e)
    return CreatedResponse(id=user_id)


@router.post("/batch", response_model=BatchCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_users_batch(
    file: Optional[UploadFile] = File(None),
    service: UserService = Depends(get_user_service),
):
    """Create users from a CSV upload (form field ``file``).

    Expected header: ``name,email,password,username``.
    """
    if file is None:
        raise to_http_error(ValidationError("Failed to get file"))

    try:
        users = parse_users_csv(file.file.read(), file.filename or "")
        ids = service.create_user_batch(users)
    except DomainError as e:
        raise to_http_error(e)
    finally:
        file.file.close()

    logger.info("Users imported", extra={"uploadName": file.filename, "count": len(ids)})
    return BatchCreatedResponse(ids=ids)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    """Get an enabled user by ID."""
    try:
        user = service.get_user(user_id)
    except DomainError as e:
        raise to_http_error(e)
    return UserResponse.from_domain(user)


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
):
    """Update the supplied fields of an enabled user."""
    try:
        user = service.update_user(user_id, request.to_domain())
    except DomainError as e:
        raise to_http_error(e)
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    """Soft delete an enabled user."""
    try:
        service.delete_user(user_id)
    except DomainError as e:
        raise to_http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

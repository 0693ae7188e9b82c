"""
Users Router
CRUD endpoints for the user resource.

Routes are matched in declaration order. The id segment only accepts
letters, digits and hyphens; anything else falls through to the 404 handler.
Each handler validates its input first and answers 422 before touching the
service.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from starlette.convertors import Convertor, register_url_convertor

from app.api.dependencies import get_user_service
from app.api.responses import not_found_response, success_response, validation_error_response
from app.errors import BadRequestError
from app.models.user import User
from app.schemas.common import UserListResponse
from app.schemas.user import UserCreate, UserIdParams, UserListQuery, UserResponse, UserUpdate
from app.schemas.validation import validate_schema
from app.services.user_service import UserService


class IdentifierConvertor(Convertor):
    regex = "[a-zA-Z0-9-]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return str(value)


register_url_convertor("identifier", IdentifierConvertor())

router = APIRouter()


def _public(user: User) -> Dict[str, Any]:
    return UserResponse.model_validate(user).model_dump(mode="json")


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise BadRequestError("Invalid JSON body")


@router.get("")
async def list_users(request: Request, service: UserService = Depends(get_user_service)):
    """
    List users, newest first.
    Empty query values fall back to the defaults.
    """
    query = {key: value for key, value in request.query_params.items() if value}
    validation = validate_schema(UserListQuery, query)
    if not validation.success:
        return validation_error_response(validation.errors)

    users, pagination = await service.list_users(validation.data.page, validation.data.limit)
    body = UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=pagination,
    )
    return success_response(body.model_dump(mode="json"))


@router.post("")
async def create_user(request: Request, service: UserService = Depends(get_user_service)):
    validation = validate_schema(UserCreate, await _read_json(request))
    if not validation.success:
        return validation_error_response(validation.errors)

    user = await service.create_user(validation.data)
    return success_response(_public(user), "User created successfully", status.HTTP_201_CREATED)


@router.get("/{user_id:identifier}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    params = validate_schema(UserIdParams, {"id": user_id})
    if not params.success:
        return validation_error_response(params.errors)

    user = await service.get_user_by_id(params.data.id)
    if not user:
        return not_found_response("User not found")
    return success_response(_public(user))


@router.put("/{user_id:identifier}")
async def update_user(
    user_id: str,
    request: Request,
    service: UserService = Depends(get_user_service),
):
    """Partial update. Only supplied, non-null fields are written."""
    params = validate_schema(UserIdParams, {"id": user_id})
    if not params.success:
        return validation_error_response(params.errors)

    validation = validate_schema(UserUpdate, await _read_json(request))
    if not validation.success:
        return validation_error_response(validation.errors)

    changes = validation.data.model_dump(exclude_unset=True, exclude_none=True)
    user = await service.update_user(params.data.id, changes)
    return success_response(_public(user), "User updated successfully")


@router.delete("/{user_id:identifier}")
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    params = validate_schema(UserIdParams, {"id": user_id})
    if not params.success:
        return validation_error_response(params.errors)

    await service.delete_user(params.data.id)
    return success_response(None, "User deleted successfully")


@router.patch("/{user_id:identifier}/toggle-status")
async def toggle_user_status(user_id: str, service: UserService = Depends(get_user_service)):
    params = validate_schema(UserIdParams, {"id": user_id})
    if not params.success:
        return validation_error_response(params.errors)

    user = await service.toggle_user_status(params.data.id)
    state = "activated" if user.is_active else "deactivated"
    return success_response(_public(user), f"User {state} successfully")

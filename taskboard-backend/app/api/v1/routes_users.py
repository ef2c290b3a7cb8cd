# File: app/api/v1/routes_users.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require
from app.schemas.auth import Message
from app.schemas.user import UserRead, UserUpdate
from app.services import user_service
from app.services.access_policy import Action, Principal, ResourceKind

router = APIRouter()


@router.get("", response_model=list[UserRead], summary="List users (Admin)")
def list_users(
    principal: Principal = Depends(require(ResourceKind.USER, Action.LIST)),
    db: Session = Depends(get_db),
):
    return user_service.list_users(db)


@router.put("/{user_id}", response_model=UserRead, summary="Update a user (Admin)")
def update_user(
    user_id: int,
    payload: UserUpdate,
    principal: Principal = Depends(require(ResourceKind.USER, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    return user_service.update_user(db, user_id, payload)


@router.delete("/{user_id}", response_model=Message, summary="Delete a user (Admin)")
def delete_user(
    user_id: int,
    principal: Principal = Depends(require(ResourceKind.USER, Action.DELETE)),
    db: Session = Depends(get_db),
):
    user_service.delete_user(db, user_id)
    return Message(message="User removed")

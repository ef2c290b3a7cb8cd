# File: app/api/v1/routes_teams.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require
from app.schemas.auth import Message
from app.schemas.team import TeamCreate, TeamRead, TeamUpdate
from app.services import team_service
from app.services.access_policy import Action, Principal, ResourceKind

router = APIRouter()


@router.post(
    "",
    response_model=TeamRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team (Admin)",
)
def create_team(
    payload: TeamCreate,
    principal: Principal = Depends(require(ResourceKind.TEAM, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return team_service.create_team(
        db, name=payload.name, member_ids=payload.members, creator_id=principal.id
    )


@router.get("", response_model=list[TeamRead], summary="List all teams (Admin, Team Lead)")
def list_teams(
    principal: Principal = Depends(require(ResourceKind.TEAM, Action.LIST)),
    db: Session = Depends(get_db),
):
    return team_service.list_teams(db)


@router.get("/my", response_model=TeamRead, summary="The caller's own team")
def get_my_team(
    principal: Principal = Depends(require(ResourceKind.TEAM, Action.LIST_OWN)),
    db: Session = Depends(get_db),
):
    return team_service.get_my_team(db, principal)


@router.put("/{team_id}", response_model=TeamRead, summary="Rename a team or replace its members (Admin)")
def update_team(
    team_id: int,
    payload: TeamUpdate,
    principal: Principal = Depends(require(ResourceKind.TEAM, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    return team_service.update_team(db, team_id, name=payload.name, member_ids=payload.members)


@router.delete("/{team_id}", response_model=Message, summary="Delete a team (Admin)")
def delete_team(
    team_id: int,
    principal: Principal = Depends(require(ResourceKind.TEAM, Action.DELETE)),
    db: Session = Depends(get_db),
):
    team_service.delete_team(db, team_id)
    return Message(message="Team removed")

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.dependencies import get_db, require_admin
from arena.models.enums import MatchStatus
from arena.schemas import match_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import match_service

router = APIRouter()

@router.post("", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_match_endpoint(
    match_in: match_schemas.MatchCreate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return match_service.create_match(db=db, match_in=match_in)

@router.get("/tournament/{tournament_id}", response_model=List[match_schemas.MatchRead])
async def get_tournament_matches_endpoint(
    tournament_id: int,
    status: Optional[MatchStatus] = None,
    db: Session = Depends(get_db),
):
    return match_service.list_tournament_matches(db=db, tournament_id=tournament_id, status=status)

@router.get("/tournament/{tournament_id}/stats", response_model=Dict[MatchStatus, int])
async def get_tournament_match_stats_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return match_service.get_match_stats(db=db, tournament_id=tournament_id)

@router.get("/{match_id}", response_model=match_schemas.MatchRead)
async def get_match_details_endpoint(match_id: int, db: Session = Depends(get_db)):
    return match_service.get_match(db=db, match_id=match_id)

@router.patch("/{match_id}", response_model=match_schemas.MatchRead)
async def update_match_endpoint(
    match_id: int,
    match_in: match_schemas.MatchUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return match_service.update_match(db=db, match_id=match_id, match_update=match_in)

@router.post("/{match_id}/status", response_model=match_schemas.MatchRead)
async def update_match_status_endpoint(
    match_id: int,
    status_in: match_schemas.MatchStatusUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return match_service.transition_match(db=db, match_id=match_id, new_status=status_in.status)

@router.put("/{match_id}/room", response_model=match_schemas.MatchRead)
async def assign_room_endpoint(
    match_id: int,
    credentials: match_schemas.RoomCredentials,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return match_service.assign_room(db=db, match_id=match_id, credentials=credentials)

@router.put("/{match_id}/result", response_model=match_schemas.MatchRead)
async def record_match_result_endpoint(
    match_id: int,
    result_in: match_schemas.MatchResult,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return match_service.record_result(db=db, match_id=match_id, result=result_in)

@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match_endpoint(
    match_id: int,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    match_service.delete_match(db=db, match_id=match_id)

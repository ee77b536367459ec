from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.dependencies import get_db, require_admin
from arena.models.enums import TournamentStatus
from arena.schemas import tournament_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import tournament_service

router = APIRouter()

@router.post("", response_model=tournament_schemas.TournamentRead, status_code=status.HTTP_201_CREATED)
async def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return tournament_service.create_tournament(db=db, tournament=tournament_in, creator_id=admin.id)

@router.get("", response_model=List[tournament_schemas.TournamentRead])
async def list_tournaments_endpoint(
    status: Optional[TournamentStatus] = None,
    db: Session = Depends(get_db),
):
    return tournament_service.list_tournaments(db=db, status=status)

@router.get("/slug/{slug}", response_model=tournament_schemas.TournamentRead)
async def get_tournament_by_slug_endpoint(slug: str, db: Session = Depends(get_db)):
    return tournament_service.get_tournament_by_slug(db=db, slug=slug)

@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentRead)
async def get_tournament_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return tournament_service.get_tournament(db=db, tournament_id=tournament_id)

@router.patch("/{tournament_id}", response_model=tournament_schemas.TournamentRead)
async def update_tournament_endpoint(
    tournament_id: int,
    tournament_in: tournament_schemas.TournamentUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return tournament_service.update_tournament(db=db, tournament_id=tournament_id, tournament_update=tournament_in)

@router.patch("/{tournament_id}/status", response_model=tournament_schemas.TournamentRead)
async def update_tournament_status_endpoint(
    tournament_id: int,
    status_in: tournament_schemas.TournamentStatusUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return tournament_service.set_tournament_status(db=db, tournament_id=tournament_id, status=status_in.status)

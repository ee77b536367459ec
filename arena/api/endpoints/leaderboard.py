from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.dependencies import get_db, require_admin
from arena.schemas import leaderboard_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import leaderboard_service

router = APIRouter()

@router.post("", response_model=leaderboard_schemas.LeaderboardEntryRead, status_code=status.HTTP_201_CREATED)
async def create_entry_endpoint(
    entry_in: leaderboard_schemas.LeaderboardEntryCreate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return leaderboard_service.create_entry(db=db, entry_in=entry_in)

@router.get("/tournament/{tournament_id}", response_model=List[leaderboard_schemas.LeaderboardEntryRead])
async def get_leaderboard_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return leaderboard_service.list_leaderboard(db=db, tournament_id=tournament_id)

@router.get("/tournament/{tournament_id}/qualified", response_model=List[leaderboard_schemas.QualifiedRank])
async def get_qualified_ranking_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return leaderboard_service.get_qualified_ranking(db=db, tournament_id=tournament_id)

@router.get("/tournament/{tournament_id}/stats", response_model=leaderboard_schemas.LeaderboardSummary)
async def get_leaderboard_stats_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return leaderboard_service.get_leaderboard_stats(db=db, tournament_id=tournament_id)

@router.post("/tournament/{tournament_id}/recalculate", response_model=List[leaderboard_schemas.LeaderboardEntryRead])
async def recalculate_ranks_endpoint(
    tournament_id: int,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return leaderboard_service.recalculate_ranks(db=db, tournament_id=tournament_id)

@router.patch("/{entry_id}", response_model=leaderboard_schemas.LeaderboardEntryRead)
async def update_entry_endpoint(
    entry_id: int,
    entry_in: leaderboard_schemas.LeaderboardEntryUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return leaderboard_service.update_entry(db=db, entry_id=entry_id, entry_update=entry_in)

@router.post("/{entry_id}/disqualification", response_model=leaderboard_schemas.LeaderboardEntryRead)
async def set_disqualification_endpoint(
    entry_id: int,
    payload: leaderboard_schemas.DisqualificationUpdate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return leaderboard_service.set_disqualification(
        db=db, entry_id=entry_id, disqualified=payload.is_disqualified, reason=payload.reason
    )

@router.post("/{entry_id}/prize", response_model=leaderboard_schemas.LeaderboardEntryRead)
async def distribute_prize_endpoint(
    entry_id: int,
    payload: leaderboard_schemas.PrizeDistribution,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return leaderboard_service.distribute_prize(db=db, entry_id=entry_id, raw_amount=payload.amount)

@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry_endpoint(
    entry_id: int,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    leaderboard_service.delete_entry(db=db, entry_id=entry_id)

import datetime
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from arena.core.database import commit_or_raise
from arena.core.exceptions import NotFound, DuplicateSlug, InvalidTransition
from arena.core.logging_config import get_logger
from arena.models import tournament as tournament_model
from arena.models.enums import TournamentStatus
from arena.schemas import tournament_schemas

logger = get_logger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")

# Tournaments accepting new enrollments
OPEN_STATUSES = (TournamentStatus.UPCOMING, TournamentStatus.ONGOING)

def slugify(title: str) -> str:
    """'BGMI Pro League #3' -> 'bgmi-pro-league-3'"""
    return _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")

def _ensure_slug_available(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    if not slug:
        raise DuplicateSlug("Slug must contain at least one letter or digit")
    query = db.query(tournament_model.Tournament).filter(tournament_model.Tournament.slug == slug)
    if exclude_id is not None:
        query = query.filter(tournament_model.Tournament.id != exclude_id)
    if query.first():
        raise DuplicateSlug(f"Slug '{slug}' is already used by another tournament", {"slug": slug})

def _apply_prize_pool(db_tournament: tournament_model.Tournament, prize_pool: tournament_schemas.PrizePool) -> None:
    db_tournament.prize_winner = prize_pool.winner
    db_tournament.prize_runner_up = prize_pool.runner_up
    db_tournament.prize_third_place = prize_pool.third_place
    db_tournament.prize_total = prize_pool.total

def _apply_schedule(db_tournament: tournament_model.Tournament, schedule: tournament_schemas.Schedule) -> None:
    for key, value in schedule.model_dump().items():
        setattr(db_tournament, key, value)

def create_tournament(db: Session, tournament: tournament_schemas.TournamentCreate, creator_id: str) -> tournament_model.Tournament:
    slug = slugify(tournament.slug or tournament.title)
    _ensure_slug_available(db, slug)

    db_tournament = tournament_model.Tournament(
        **tournament.model_dump(exclude={"slug", "prize_pool", "schedule"}),
        slug=slug,
        created_by=creator_id,
        current_participants=0,
        status=TournamentStatus.UPCOMING,
    )
    _apply_prize_pool(db_tournament, tournament.prize_pool)
    _apply_schedule(db_tournament, tournament.schedule)

    db.add(db_tournament)
    commit_or_raise(db, "create_tournament")
    db.refresh(db_tournament)
    logger.info("tournament_created", tournament_id=db_tournament.id, slug=slug, created_by=creator_id)
    return db_tournament

def get_tournament(db: Session, tournament_id: int) -> tournament_model.Tournament:
    db_tournament = db.get(tournament_model.Tournament, tournament_id)
    if not db_tournament:
        raise NotFound("Tournament", tournament_id)
    return db_tournament

def get_tournament_by_slug(db: Session, slug: str) -> tournament_model.Tournament:
    db_tournament = db.query(tournament_model.Tournament).filter(tournament_model.Tournament.slug == slug).first()
    if not db_tournament:
        raise NotFound("Tournament", slug)
    return db_tournament

def list_tournaments(db: Session, status: Optional[TournamentStatus] = None) -> List[tournament_model.Tournament]:
    query = db.query(tournament_model.Tournament)
    if status is not None:
        query = query.filter(tournament_model.Tournament.status == status)
    return query.order_by(tournament_model.Tournament.created_at.desc(), tournament_model.Tournament.id.desc()).all()

def update_tournament(db: Session, tournament_id: int, tournament_update: tournament_schemas.TournamentUpdate) -> tournament_model.Tournament:
    db_tournament = get_tournament(db, tournament_id)

    # An explicit null for a required column leaves it unchanged
    update_data = {
        key: value
        for key, value in tournament_update.model_dump(exclude_unset=True, exclude={"prize_pool", "schedule"}).items()
        if value is not None or tournament_model.Tournament.__table__.c[key].nullable
    }

    if "slug" in update_data:
        update_data["slug"] = slugify(update_data["slug"])
        _ensure_slug_available(db, update_data["slug"], exclude_id=db_tournament.id)

    new_max = update_data.get("max_participants")
    if new_max is not None and new_max < db_tournament.current_participants:
        raise InvalidTransition(
            f"max_participants ({new_max}) cannot drop below the {db_tournament.current_participants} confirmed participants"
        )

    for key, value in update_data.items():
        setattr(db_tournament, key, value)
    if tournament_update.prize_pool is not None:
        _apply_prize_pool(db_tournament, tournament_update.prize_pool)
    if tournament_update.schedule is not None:
        _apply_schedule(db_tournament, tournament_update.schedule)

    commit_or_raise(db, "update_tournament")
    db.refresh(db_tournament)
    logger.info("tournament_updated", tournament_id=tournament_id, fields=sorted(tournament_update.model_dump(exclude_unset=True)))
    return db_tournament

def set_tournament_status(db: Session, tournament_id: int, status: TournamentStatus) -> tournament_model.Tournament:
    db_tournament = get_tournament(db, tournament_id)
    previous = db_tournament.status
    db_tournament.status = status
    db_tournament.updated_at = datetime.datetime.utcnow()
    commit_or_raise(db, "set_tournament_status")
    db.refresh(db_tournament)
    logger.info("tournament_status_changed", tournament_id=tournament_id, previous=previous.value, status=status.value)
    return db_tournament

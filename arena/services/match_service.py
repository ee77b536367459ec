import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from arena.core.database import commit_or_raise
from arena.core.exceptions import ConcurrentModification, InvalidTransition, NotFound
from arena.core.logging_config import get_logger
from arena.models import enrollment as enrollment_model
from arena.models import match as match_model
from arena.models.enums import MatchStatus, NotificationType, PaymentStatus
from arena.schemas import match_schemas
from arena.services import notification_service
from arena.services.tournament_service import get_tournament

logger = get_logger(__name__)

Match = match_model.Match

MATCH_TRANSITIONS = {
    MatchStatus.SCHEDULED: {MatchStatus.LIVE, MatchStatus.CANCELLED},
    MatchStatus.LIVE: {MatchStatus.COMPLETED, MatchStatus.CANCELLED},
    MatchStatus.COMPLETED: set(),
    MatchStatus.CANCELLED: set(),
}

# Fields that define which contest this is; frozen once the match leaves "scheduled"
IDENTITY_FIELDS = {"tournament_id", "team_a_id", "team_b_id"}


def ensure_transition(current: MatchStatus, target: MatchStatus) -> None:
    if target not in MATCH_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move match from {current.value} to {target.value}",
            {"from": current.value, "to": target.value},
        )


def get_match(db: Session, match_id: int) -> match_model.Match:
    match = db.get(Match, match_id)
    if not match:
        raise NotFound("Match", match_id)
    return match


def list_tournament_matches(db: Session, tournament_id: int, status: Optional[MatchStatus] = None) -> List[match_model.Match]:
    get_tournament(db, tournament_id)
    query = db.query(Match).filter(Match.tournament_id == tournament_id)
    if status is not None:
        query = query.filter(Match.status == status)
    # Unscheduled matches sort last
    return query.order_by(Match.scheduled_time.is_(None), Match.scheduled_time, Match.match_number, Match.id).all()


def get_match_stats(db: Session, tournament_id: int) -> Dict[MatchStatus, int]:
    counts = {status: 0 for status in MatchStatus}
    rows = db.query(Match.status, func.count(Match.id))\
        .filter(Match.tournament_id == tournament_id)\
        .group_by(Match.status)\
        .all()
    for status, count in rows:
        counts[MatchStatus(status)] = count
    return counts


def create_match(db: Session, match_in: match_schemas.MatchCreate) -> match_model.Match:
    get_tournament(db, match_in.tournament_id)
    match = Match(**match_in.model_dump(), status=MatchStatus.SCHEDULED)
    db.add(match)
    commit_or_raise(db, "create_match")
    db.refresh(match)
    logger.info("match_created", match_id=match.id, tournament_id=match.tournament_id, match_name=match.match_name)
    return match


def update_match(db: Session, match_id: int, match_update: match_schemas.MatchUpdate) -> match_model.Match:
    match = get_match(db, match_id)
    # An explicit null for a required column leaves it unchanged
    update_data = {
        key: value for key, value in match_update.model_dump(exclude_unset=True).items()
        if value is not None or Match.__table__.c[key].nullable
    }

    changed_identity = {
        key for key in IDENTITY_FIELDS & update_data.keys()
        if update_data[key] != getattr(match, key)
    }
    if changed_identity and match.status != MatchStatus.SCHEDULED:
        raise InvalidTransition(
            f"Cannot change {', '.join(sorted(changed_identity))} once the match is {match.status.value}",
            {"fields": sorted(changed_identity), "status": match.status.value},
        )
    if "tournament_id" in changed_identity:
        get_tournament(db, update_data["tournament_id"])

    for key, value in update_data.items():
        setattr(match, key, value)

    commit_or_raise(db, "update_match")
    db.refresh(match)
    logger.info("match_updated", match_id=match_id, fields=sorted(update_data))
    return match


def transition_match(db: Session, match_id: int, new_status: MatchStatus) -> match_model.Match:
    match = get_match(db, match_id)
    previous = match.status
    ensure_transition(previous, new_status)

    values = {Match.status: new_status}
    now = datetime.datetime.utcnow()
    if new_status == MatchStatus.LIVE:
        values[Match.actual_start_time] = now
    elif new_status == MatchStatus.COMPLETED:
        values[Match.actual_end_time] = now

    updated = db.query(Match).filter(
        Match.id == match_id,
        Match.status == previous,
    ).update(values, synchronize_session=False)
    if updated != 1:
        db.rollback()
        raise ConcurrentModification(f"Match {match_id} changed status while moving it to {new_status.value}")

    commit_or_raise(db, "transition_match")
    db.refresh(match)
    logger.info("match_status_changed", match_id=match_id, previous=previous.value, status=new_status.value)

    if new_status == MatchStatus.LIVE:
        _notify_teams_match_live(db, match)
    return match


def _notify_teams_match_live(db: Session, match: match_model.Match) -> None:
    team_ids = [team_id for team_id in (match.team_a_id, match.team_b_id) if team_id]
    if not team_ids:
        return

    user_ids = [
        row.user_id for row in db.query(enrollment_model.Enrollment.user_id).filter(
            enrollment_model.Enrollment.tournament_id == match.tournament_id,
            enrollment_model.Enrollment.team_id.in_(team_ids),
            enrollment_model.Enrollment.payment_status == PaymentStatus.COMPLETED,
        )
    ]
    message = f"{match.match_name} ({match.round_name}) is now live."
    if match.room_id:
        message += f" Room ID: {match.room_id}"
        if match.room_password:
            message += f", Password: {match.room_password}"

    for user_id in user_ids:
        notification_service.emit(
            db,
            user_id=user_id,
            title="Match Live",
            message=message,
            type=NotificationType.MATCH,
            related_tournament_id=match.tournament_id,
        )


def assign_room(db: Session, match_id: int, credentials: match_schemas.RoomCredentials) -> match_model.Match:
    # Rooms are usually handed out minutes before going live, so any status is accepted
    match = get_match(db, match_id)
    match.room_id = credentials.room_id
    match.room_password = credentials.room_password
    commit_or_raise(db, "assign_room")
    db.refresh(match)
    logger.info("match_room_assigned", match_id=match_id, status=match.status.value, room_id=credentials.room_id)
    return match


def record_result(db: Session, match_id: int, result: match_schemas.MatchResult) -> match_model.Match:
    match = get_match(db, match_id)
    if match.status != MatchStatus.COMPLETED:
        raise InvalidTransition(
            f"Results can only be recorded for completed matches (match is {match.status.value})"
        )
    match.match_result = result.model_dump()
    commit_or_raise(db, "record_result")
    db.refresh(match)
    logger.info("match_result_recorded", match_id=match_id, winner=result.winner, runner_up=result.runner_up)
    return match


def delete_match(db: Session, match_id: int) -> None:
    match = get_match(db, match_id)
    status = match.status
    db.delete(match)
    commit_or_raise(db, "delete_match")
    logger.info("match_deleted", match_id=match_id, status=status.value)

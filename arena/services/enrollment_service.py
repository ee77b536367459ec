"""Enrollment state machine.

An enrollment starts ``pending`` when a player submits registration and
proof of payment. An admin then approves it (``completed``, a team id is
assigned and the tournament's participant counter goes up by one) or
rejects it (``rejected``). Both decisions are final.

Every decision is written with a conditional UPDATE keyed on the status the
admin saw; if another admin decided first, no row matches and the call
fails with ConcurrentModification instead of double-counting.
"""

import datetime
import random
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from arena.core.config import settings
from arena.core.database import commit_or_raise
from arena.core.exceptions import (
    AlreadyDecided,
    ConcurrentModification,
    DuplicateEnrollment,
    IdGenerationExhausted,
    InvalidTransition,
    NotFound,
)
from arena.core.logging_config import get_logger
from arena.models import enrollment as enrollment_model
from arena.models import tournament as tournament_model
from arena.models.enums import NotificationType, PaymentStatus
from arena.schemas import enrollment_schemas
from arena.services import notification_service
from arena.services.tournament_service import OPEN_STATUSES, get_tournament

logger = get_logger(__name__)

Enrollment = enrollment_model.Enrollment
Tournament = tournament_model.Tournament

ENROLLMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.REJECTED},
    PaymentStatus.COMPLETED: set(),
    PaymentStatus.REJECTED: set(),
}

TEAM_ID_SUFFIX_RANGE = (100, 999)


def ensure_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    if target in ENROLLMENT_TRANSITIONS[current]:
        return
    if not ENROLLMENT_TRANSITIONS[current]:
        raise AlreadyDecided(
            f"Enrollment was already {current.value}",
            {"payment_status": current.value},
        )
    raise InvalidTransition(f"Cannot move enrollment from {current.value} to {target.value}")


def team_id_prefix(slug: str) -> str:
    """First three letters of the slug, uppercased ('pubg-mobile-cup' -> 'PUB').

    Digits and dashes are skipped; a slug with fewer than three letters is
    padded with 'X' so every team id has the same shape.
    """
    letters = "".join(ch for ch in slug if ch.isalpha())
    return letters[:3].upper().ljust(3, "X")


def generate_team_id(slug: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"{team_id_prefix(slug)}{rng.randint(*TEAM_ID_SUFFIX_RANGE)}"


def _allocate_team_id(
    db: Session,
    tournament: tournament_model.Tournament,
    requested: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    taken = {
        row.team_id for row in db.query(Enrollment.team_id).filter(
            Enrollment.tournament_id == tournament.id,
            Enrollment.team_id.isnot(None),
        )
    }

    if requested:
        requested = requested.strip().upper()
        if requested in taken:
            raise InvalidTransition(f"Team id {requested} is already assigned in this tournament")
        return requested

    for attempt in range(1, settings.TEAM_ID_MAX_ATTEMPTS + 1):
        candidate = generate_team_id(tournament.slug, rng)
        if candidate not in taken:
            return candidate
        logger.debug("team_id_collision", tournament_id=tournament.id, candidate=candidate, attempt=attempt)

    raise IdGenerationExhausted(
        f"Could not generate a free team id for tournament {tournament.id} "
        f"after {settings.TEAM_ID_MAX_ATTEMPTS} attempts",
        {"tournament_id": tournament.id, "prefix": team_id_prefix(tournament.slug)},
    )


def get_enrollment(db: Session, enrollment_id: int) -> enrollment_model.Enrollment:
    enrollment = db.get(Enrollment, enrollment_id)
    if not enrollment:
        raise NotFound("Enrollment", enrollment_id)
    return enrollment


def list_enrollments(db: Session, tournament_id: int, status: Optional[PaymentStatus] = None) -> List[enrollment_model.Enrollment]:
    get_tournament(db, tournament_id)
    query = db.query(Enrollment).filter(Enrollment.tournament_id == tournament_id)
    if status is not None:
        query = query.filter(Enrollment.payment_status == status)
    return query.order_by(Enrollment.created_at.desc(), Enrollment.id.desc()).all()


def get_enrollment_stats(db: Session, tournament_id: int) -> enrollment_schemas.EnrollmentStats:
    rows = db.query(Enrollment.payment_status, func.count(Enrollment.id))\
        .filter(Enrollment.tournament_id == tournament_id)\
        .group_by(Enrollment.payment_status)\
        .all()
    by_status: Dict[PaymentStatus, int] = {status: 0 for status in PaymentStatus}
    for status, count in rows:
        by_status[PaymentStatus(status)] = count
    return enrollment_schemas.EnrollmentStats(total=sum(by_status.values()), by_status=by_status)


def submit_enrollment(
    db: Session,
    tournament_id: int,
    user_id: str,
    enrollment_in: enrollment_schemas.EnrollmentCreate,
) -> enrollment_model.Enrollment:
    tournament = get_tournament(db, tournament_id)

    if tournament.status not in OPEN_STATUSES:
        raise InvalidTransition(
            f"Tournament is not open for registration. Current status: {tournament.status.value}"
        )
    if tournament.is_full:
        raise InvalidTransition("Tournament is full! Registration closed.")

    existing = db.query(Enrollment).filter(
        Enrollment.tournament_id == tournament_id,
        Enrollment.user_id == user_id,
    ).first()
    if existing:
        raise DuplicateEnrollment(
            f"User {user_id} is already enrolled in this tournament",
            {"enrollment_id": existing.id, "payment_status": existing.payment_status.value},
        )

    enrollment = Enrollment(
        **enrollment_in.model_dump(),
        tournament_id=tournament_id,
        user_id=user_id,
        payment_status=PaymentStatus.PENDING,
        team_id=None,
    )
    db.add(enrollment)
    commit_or_raise(db, "submit_enrollment")
    db.refresh(enrollment)
    logger.info("enrollment_submitted", enrollment_id=enrollment.id, tournament_id=tournament_id, user_id=user_id)

    notification_service.emit(
        db,
        user_id=user_id,
        title="Enrollment Submitted",
        message=(
            f"Your enrollment for {tournament.title} is under review. "
            "We will verify your payment and assign Team ID soon."
        ),
        type=NotificationType.INFO,
        related_tournament_id=tournament_id,
    )
    return enrollment


def approve_enrollment(
    db: Session,
    enrollment_id: int,
    actor_id: str,
    team_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> enrollment_model.Enrollment:
    enrollment = get_enrollment(db, enrollment_id)
    ensure_transition(enrollment.payment_status, PaymentStatus.COMPLETED)

    tournament = enrollment.tournament
    if tournament.is_full:
        raise InvalidTransition(
            f"Tournament is full ({tournament.current_participants}/{tournament.max_participants})"
        )

    final_team_id = _allocate_team_id(db, tournament, team_id, rng)

    # Status change and counter increment share one transaction so the
    # counter always equals the number of completed enrollments.
    updated = db.query(Enrollment).filter(
        Enrollment.id == enrollment_id,
        Enrollment.payment_status == PaymentStatus.PENDING,
    ).update({
        Enrollment.payment_status: PaymentStatus.COMPLETED,
        Enrollment.team_id: final_team_id,
        Enrollment.verified_at: datetime.datetime.utcnow(),
        Enrollment.verified_by: actor_id,
    }, synchronize_session=False)
    if updated != 1:
        db.rollback()
        raise ConcurrentModification(f"Enrollment {enrollment_id} was decided by someone else")

    incremented = db.query(Tournament).filter(
        Tournament.id == tournament.id,
        Tournament.current_participants < Tournament.max_participants,
    ).update({
        Tournament.current_participants: Tournament.current_participants + 1,
    }, synchronize_session=False)
    if incremented != 1:
        db.rollback()
        raise ConcurrentModification(f"Tournament {tournament.id} filled up while approving enrollment {enrollment_id}")

    commit_or_raise(db, "approve_enrollment")
    db.refresh(enrollment)
    logger.info(
        "enrollment_approved",
        enrollment_id=enrollment_id,
        tournament_id=enrollment.tournament_id,
        team_id=final_team_id,
        actor_id=actor_id,
    )

    notification_service.emit(
        db,
        user_id=enrollment.user_id,
        title="Enrollment Approved!",
        message=(
            f'Your enrollment for "{tournament.title}" has been approved. '
            f"Your Team ID: {final_team_id}. Get ready to compete!"
        ),
        type=NotificationType.SUCCESS,
        related_tournament_id=enrollment.tournament_id,
    )
    return enrollment


def reject_enrollment(
    db: Session,
    enrollment_id: int,
    actor_id: str,
    reason: str = "Payment verification failed",
) -> enrollment_model.Enrollment:
    enrollment = get_enrollment(db, enrollment_id)
    ensure_transition(enrollment.payment_status, PaymentStatus.REJECTED)

    updated = db.query(Enrollment).filter(
        Enrollment.id == enrollment_id,
        Enrollment.payment_status == PaymentStatus.PENDING,
    ).update({
        Enrollment.payment_status: PaymentStatus.REJECTED,
        Enrollment.rejection_reason: reason,
        Enrollment.rejected_at: datetime.datetime.utcnow(),
        Enrollment.rejected_by: actor_id,
    }, synchronize_session=False)
    if updated != 1:
        db.rollback()
        raise ConcurrentModification(f"Enrollment {enrollment_id} was decided by someone else")

    commit_or_raise(db, "reject_enrollment")
    db.refresh(enrollment)
    logger.info("enrollment_rejected", enrollment_id=enrollment_id, tournament_id=enrollment.tournament_id,
                reason=reason, actor_id=actor_id)

    notification_service.emit(
        db,
        user_id=enrollment.user_id,
        title="Enrollment Rejected",
        message=(
            f'Your enrollment for "{enrollment.tournament.title}" was rejected. Reason: {reason}. '
            "Contact support if you believe this is a mistake."
        ),
        type=NotificationType.WARNING,
        related_tournament_id=enrollment.tournament_id,
    )
    return enrollment


def delete_enrollment(db: Session, enrollment_id: int) -> None:
    enrollment = get_enrollment(db, enrollment_id)
    observed_status = enrollment.payment_status
    tournament_id = enrollment.tournament_id

    deleted = db.query(Enrollment).filter(
        Enrollment.id == enrollment_id,
        Enrollment.payment_status == observed_status,
    ).delete(synchronize_session=False)
    if deleted != 1:
        db.rollback()
        raise ConcurrentModification(f"Enrollment {enrollment_id} changed before it could be deleted")

    if observed_status == PaymentStatus.COMPLETED:
        db.query(Tournament).filter(
            Tournament.id == tournament_id,
            Tournament.current_participants > 0,
        ).update({
            Tournament.current_participants: Tournament.current_participants - 1,
        }, synchronize_session=False)

    # The instance loaded above no longer has a row behind it
    db.expunge(enrollment)
    commit_or_raise(db, "delete_enrollment")
    logger.info("enrollment_deleted", enrollment_id=enrollment_id, tournament_id=tournament_id,
                payment_status=observed_status.value)

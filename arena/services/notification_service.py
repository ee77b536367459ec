from typing import List, Optional

from sqlalchemy.orm import Session

from arena.core.database import commit_or_raise
from arena.core.exceptions import ArenaError, NotFound
from arena.core.logging_config import get_logger
from arena.models import notification as notification_model
from arena.models import enrollment as enrollment_model
from arena.models import tournament as tournament_model
from arena.models.enums import NotificationType, PaymentStatus
from arena.schemas import notification_schemas

logger = get_logger(__name__)

def create_notification(db: Session, notification_in: notification_schemas.NotificationCreate) -> notification_model.Notification:
    db_notification = notification_model.Notification(**notification_in.model_dump())
    db.add(db_notification)
    commit_or_raise(db, "create_notification")
    db.refresh(db_notification)
    return db_notification

def emit(
    db: Session,
    user_id: str,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    related_tournament_id: Optional[int] = None,
) -> Optional[notification_model.Notification]:
    """Best-effort notification write issued as a follow-up to a state change.

    The state change has already been committed by the caller, so a failure
    here is logged and swallowed rather than undoing it. Returns None when
    the write failed.
    """
    try:
        return create_notification(db, notification_schemas.NotificationCreate(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_tournament_id=related_tournament_id,
        ))
    except ArenaError:
        logger.exception("notification_emit_failed", user_id=user_id, title=title,
                         related_tournament_id=related_tournament_id)
        return None

def broadcast_to_tournament(db: Session, broadcast: notification_schemas.TournamentBroadcast) -> List[notification_model.Notification]:
    """One notification per user holding a confirmed enrollment in the tournament."""
    tournament = db.get(tournament_model.Tournament, broadcast.related_tournament_id)
    if not tournament:
        raise NotFound("Tournament", broadcast.related_tournament_id)

    user_ids = [
        row.user_id for row in db.query(enrollment_model.Enrollment.user_id).filter(
            enrollment_model.Enrollment.tournament_id == tournament.id,
            enrollment_model.Enrollment.payment_status == PaymentStatus.COMPLETED,
        ).order_by(enrollment_model.Enrollment.id)
    ]
    if not user_ids:
        logger.info("notification_broadcast_skipped", tournament_id=tournament.id, recipients=0)
        return []

    notifications = [
        notification_model.Notification(user_id=user_id, **broadcast.model_dump())
        for user_id in user_ids
    ]
    db.add_all(notifications)
    commit_or_raise(db, "broadcast_notification")
    for notification in notifications:
        db.refresh(notification)
    logger.info("notification_broadcast", tournament_id=tournament.id, recipients=len(notifications))
    return notifications

def get_user_notifications(db: Session, user_id: str, skip: int = 0, limit: int = 100) -> List[notification_model.Notification]:
    return db.query(notification_model.Notification)\
        .filter(notification_model.Notification.user_id == user_id)\
        .order_by(notification_model.Notification.created_at.desc(), notification_model.Notification.id.desc())\
        .offset(skip)\
        .limit(limit)\
        .all()

def mark_notification_as_read(db: Session, notification_id: int, current_user_id: str) -> notification_model.Notification:
    db_notification = db.get(notification_model.Notification, notification_id)

    # A notification addressed to someone else is reported as missing
    if not db_notification or db_notification.user_id != current_user_id:
        raise NotFound("Notification", notification_id)

    if not db_notification.read_status:
        db_notification.read_status = True
        commit_or_raise(db, "mark_notification_as_read")
        db.refresh(db_notification)

    return db_notification

def mark_all_user_notifications_as_read(db: Session, current_user_id: str) -> int:
    updated = db.query(notification_model.Notification)\
        .filter(notification_model.Notification.user_id == current_user_id,
                notification_model.Notification.read_status.is_(False))\
        .update({notification_model.Notification.read_status: True}, synchronize_session=False)
    commit_or_raise(db, "mark_all_notifications_as_read")
    return updated

from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.dependencies import get_current_actor, get_db, require_admin
from arena.schemas import notification_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import notification_service

router = APIRouter()

@router.get("", response_model=List[notification_schemas.NotificationRead])
async def get_my_notifications_endpoint(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return notification_service.get_user_notifications(db=db, user_id=actor.id, skip=skip, limit=limit)

@router.post("/{notification_id}/read", response_model=notification_schemas.NotificationRead)
async def mark_notification_read_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return notification_service.mark_notification_as_read(
        db=db, notification_id=notification_id, current_user_id=actor.id
    )

@router.post("/read-all", response_model=Dict[str, int])
async def mark_all_notifications_read_endpoint(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    updated = notification_service.mark_all_user_notifications_as_read(db=db, current_user_id=actor.id)
    return {"updated": updated}

@router.post(
    "/broadcast",
    response_model=List[notification_schemas.NotificationRead],
    status_code=status.HTTP_201_CREATED,
)
async def broadcast_notification_endpoint(
    broadcast: notification_schemas.TournamentBroadcast,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return notification_service.broadcast_to_tournament(db=db, broadcast=broadcast)

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.dependencies import get_current_actor, get_db, require_admin
from arena.models.enums import PaymentStatus
from arena.schemas import enrollment_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import enrollment_service

router = APIRouter()

@router.post(
    "/tournaments/{tournament_id}/enrollments",
    response_model=enrollment_schemas.EnrollmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_enrollment_endpoint(
    tournament_id: int,
    enrollment_in: enrollment_schemas.EnrollmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return enrollment_service.submit_enrollment(
        db=db, tournament_id=tournament_id, user_id=actor.id, enrollment_in=enrollment_in
    )

@router.get("/tournaments/{tournament_id}/enrollments", response_model=List[enrollment_schemas.EnrollmentRead])
async def list_enrollments_endpoint(
    tournament_id: int,
    status: Optional[PaymentStatus] = None,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return enrollment_service.list_enrollments(db=db, tournament_id=tournament_id, status=status)

@router.get("/tournaments/{tournament_id}/enrollments/stats", response_model=enrollment_schemas.EnrollmentStats)
async def enrollment_stats_endpoint(
    tournament_id: int,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return enrollment_service.get_enrollment_stats(db=db, tournament_id=tournament_id)

@router.post("/enrollments/{enrollment_id}/approve", response_model=enrollment_schemas.EnrollmentRead)
async def approve_enrollment_endpoint(
    enrollment_id: int,
    approval: Optional[enrollment_schemas.EnrollmentApprove] = None,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    return enrollment_service.approve_enrollment(
        db=db,
        enrollment_id=enrollment_id,
        actor_id=admin.id,
        team_id=approval.team_id if approval else None,
    )

@router.post("/enrollments/{enrollment_id}/reject", response_model=enrollment_schemas.EnrollmentRead)
async def reject_enrollment_endpoint(
    enrollment_id: int,
    rejection: Optional[enrollment_schemas.EnrollmentReject] = None,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    rejection = rejection or enrollment_schemas.EnrollmentReject()
    return enrollment_service.reject_enrollment(
        db=db, enrollment_id=enrollment_id, actor_id=admin.id, reason=rejection.reason
    )

@router.delete("/enrollments/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_enrollment_endpoint(
    enrollment_id: int,
    db: Session = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    enrollment_service.delete_enrollment(db=db, enrollment_id=enrollment_id)

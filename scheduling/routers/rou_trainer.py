from fastapi import APIRouter, HTTPException, Depends, Query
from datetime import date
from typing import List, Optional
from scheduling.configuration.config import Config
from scheduling.dependencies.dep_auth import get_current_user, get_current_trainer
from scheduling.dependencies.dep_stores import get_availability_store, get_booking_store
from scheduling.models.mod_auth import AuthUser, UserRole
from scheduling.models.mod_booking import BookingStatus
from scheduling.schemas.sch_booking import BookingResponse
from scheduling.schemas.sch_slot import DurationListResponse, SlotListResponse, SlotResponse
from scheduling.services.svc_booking import BookingService
from scheduling.services.svc_slots import SlotService

router = APIRouter(
    prefix="/trainers",
    tags=["Trainers"],
    responses={404: {"description": "Not found"}},
)

@router.get("/{trainer_id}/slots", response_model=SlotListResponse)
def list_slots(
    trainer_id: str,
    day: date = Query(..., alias="date", description="Session date"),
    duration: int = Query(..., gt=0, description="Session length in minutes"),
    granularity: Optional[int] = Query(None, gt=0, description="Minutes between slot start times"),
    availability_store=Depends(get_availability_store),
    booking_store=Depends(get_booking_store),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    List the slots a client can request from a trainer on a date.

    - Slots overlapping a confirmed session are left out
    - Slots that already have pending requests are still listed and flagged
    """
    granularity_minutes = granularity or Config.SLOT_GRANULARITY_MINUTES
    slots = SlotService.list_bookable_slots(
        availability_store, booking_store, trainer_id, day, duration, granularity_minutes
    )
    return SlotListResponse(
        trainer_id=trainer_id,
        date=day,
        duration_minutes=duration,
        granularity_minutes=granularity_minutes,
        slots=[SlotResponse.model_validate(slot) for slot in slots]
    )

@router.get("/{trainer_id}/durations", response_model=DurationListResponse)
def list_durations(
    trainer_id: str,
    day: date = Query(..., alias="date", description="Session date"),
    availability_store=Depends(get_availability_store),
    current_user: AuthUser = Depends(get_current_user)
):
    """Session lengths the trainer offers on a date"""
    return DurationListResponse(
        trainer_id=trainer_id,
        date=day,
        durations=SlotService.list_durations(availability_store, trainer_id, day)
    )

@router.get("/{trainer_id}/bookings", response_model=List[BookingResponse])
def list_trainer_bookings(
    trainer_id: str,
    day: Optional[date] = Query(None, alias="date", description="Only bookings on this date"),
    status: Optional[BookingStatus] = Query(None, description="Only bookings in this status"),
    booking_store=Depends(get_booking_store),
    current_user: AuthUser = Depends(get_current_trainer)
):
    """
    Get a trainer's bookings, e.g. the pending requests waiting for an answer.
    Trainers can only list their own bookings; admins can list any trainer's.
    """
    if current_user.role != UserRole.ADMIN and current_user.id != trainer_id:
        raise HTTPException(
            status_code=403,
            detail="You can only view your own bookings"
        )
    return BookingService.list_trainer_bookings(booking_store, trainer_id, day=day, status=status)

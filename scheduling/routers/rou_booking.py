from fastapi import APIRouter, HTTPException, Depends
from scheduling.dependencies.dep_auth import get_current_user, get_current_trainer
from scheduling.dependencies.dep_stores import get_availability_store, get_booking_store, get_notifier
from scheduling.models.mod_auth import AuthUser, UserRole
from scheduling.schemas.sch_booking import BookingRequestCreate, BookingResponse, ConfirmationResponse
from scheduling.services.svc_booking import BookingService
from scheduling.services.svc_confirmation import ConfirmationService

router = APIRouter(
    prefix="/bookings",
    tags=["Bookings"],
    responses={404: {"description": "Not found"}},
)

def _check_trainer_access(booking_store, booking_id: str, current_user: AuthUser):
    """Only the booked trainer (or an admin) answers a request"""
    booking = BookingService.get_booking(booking_store, booking_id)
    if current_user.role != UserRole.ADMIN and booking.trainer_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail="You can only manage bookings made with you"
        )

@router.post('/', response_model=BookingResponse, status_code=201)
def request_booking(
    request: BookingRequestCreate,
    availability_store=Depends(get_availability_store),
    booking_store=Depends(get_booking_store),
    notifier=Depends(get_notifier),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Request a session in one of the trainer's listed slots.

    - The start time and duration must match a generated slot
    - Several clients may request the same slot, the trainer picks one
    - Fails with 409 if the trainer already confirmed an overlapping session
    - Only the authenticated client can request bookings for themselves
    """
    if current_user.role != UserRole.ADMIN and request.client_id != current_user.id:
        raise HTTPException(
            status_code=403,
            detail="You can only request bookings for yourself"
        )
    return BookingService.request_booking(
        availability_store,
        booking_store,
        notifier,
        client_id=request.client_id,
        trainer_id=request.trainer_id,
        day=request.date,
        start_time=request.start_time,
        duration_minutes=request.duration_minutes,
        notes=request.notes
    )

@router.get('/{booking_id}', response_model=BookingResponse)
def get_booking(
    booking_id: str,
    booking_store=Depends(get_booking_store),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Get details of a specific booking by its ID.
    - Clients can only view their own bookings
    - Trainers can view bookings where they are the assigned trainer
    - Admins can view all bookings
    """
    booking = BookingService.get_booking(booking_store, booking_id)
    if current_user.role == UserRole.ADMIN:
        return booking
    if current_user.id in (booking.client_id, booking.trainer_id):
        return booking
    raise HTTPException(
        status_code=403,
        detail="You don't have permission to view this booking"
    )

@router.post('/{booking_id}/confirm', response_model=ConfirmationResponse)
def confirm_booking(
    booking_id: str,
    booking_store=Depends(get_booking_store),
    notifier=Depends(get_notifier),
    current_user: AuthUser = Depends(get_current_trainer)
):
    """
    Confirm a pending request.

    - Every other pending request overlapping it is cancelled and its client notified
    - partial_failure is true when some of those cancellations could not be saved
    """
    _check_trainer_access(booking_store, booking_id, current_user)
    result = ConfirmationService.confirm(booking_store, notifier, booking_id)
    return ConfirmationResponse.from_result(result)

@router.post('/{booking_id}/reject', response_model=BookingResponse)
def reject_booking(
    booking_id: str,
    booking_store=Depends(get_booking_store),
    notifier=Depends(get_notifier),
    current_user: AuthUser = Depends(get_current_trainer)
):
    """Decline a pending request"""
    _check_trainer_access(booking_store, booking_id, current_user)
    return ConfirmationService.reject(booking_store, notifier, booking_id)

@router.post('/{booking_id}/cancel', response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    booking_store=Depends(get_booking_store),
    notifier=Depends(get_notifier),
    current_user: AuthUser = Depends(get_current_trainer)
):
    """Cancel a confirmed session"""
    _check_trainer_access(booking_store, booking_id, current_user)
    return ConfirmationService.cancel(booking_store, notifier, booking_id)

@router.post('/{booking_id}/complete', response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    booking_store=Depends(get_booking_store),
    notifier=Depends(get_notifier),
    current_user: AuthUser = Depends(get_current_trainer)
):
    """Mark a confirmed session as completed"""
    _check_trainer_access(booking_store, booking_id, current_user)
    return ConfirmationService.complete(booking_store, notifier, booking_id)

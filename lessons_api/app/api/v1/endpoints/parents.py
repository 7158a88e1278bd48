"""
Parent endpoints for API v1.

All routes live under ``/parents/{parent_id}`` and act on behalf of
that parent: bookings and checkout, billing, messages with tutors,
announcements and children.  Records that belong to another parent
answer 404.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from lessons_api.app.api.deps import call, found, get_parent_service
from lessons_api.app.schemas.account import AccountUpdate
from lessons_api.app.schemas.announcement import ParentAnnouncement
from lessons_api.app.schemas.booking import Booking, BookingCreate, BookingUpdate, CheckoutRequest
from lessons_api.app.schemas.child import Child, ChildCreate, ChildUpdate
from lessons_api.app.schemas.messaging import ConversationSummary, Message, MessageCreate
from lessons_api.app.schemas.payment import CheckoutResult, MonthlyTotals, Payment
from lessons_api.app.services.parent_service import ParentService


router = APIRouter()


@router.get("/{parent_id}/profile", response_model=Dict[str, Any])
def get_profile(service: ParentService = Depends(get_parent_service)) -> Dict[str, Any]:
    return found(service.profile(), "Parent").public()


@router.patch("/{parent_id}/profile", response_model=Dict[str, Any])
def update_profile(payload: AccountUpdate, service: ParentService = Depends(get_parent_service)) -> Dict[str, Any]:
    account = call(service.update_profile, payload.model_dump(exclude_none=True))
    return found(account, "Parent").public()


# Bookings

@router.get("/{parent_id}/bookings", response_model=List[Booking])
def list_bookings(
    status_param: Optional[str] = Query(None, alias="status"),
    service: ParentService = Depends(get_parent_service),
) -> List[Booking]:
    """The parent's bookings, latest lesson date first."""
    return service.list_bookings(status_param)


@router.post("/{parent_id}/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
def book_lesson(payload: BookingCreate, service: ParentService = Depends(get_parent_service)) -> Booking:
    """Book a lesson.  The total is derived from lesson type and group size."""
    return call(service.book_lesson, payload.model_dump(exclude_none=True))


@router.get("/{parent_id}/bookings/{booking_id}", response_model=Booking)
def get_booking(booking_id: str, service: ParentService = Depends(get_parent_service)) -> Booking:
    return found(service.get_booking(booking_id), "Booking")


@router.post("/{parent_id}/bookings/{booking_id}/cancel", response_model=Booking)
def cancel_booking(booking_id: str, service: ParentService = Depends(get_parent_service)) -> Booking:
    return found(service.cancel_booking(booking_id), "Booking")


@router.post("/{parent_id}/bookings/{booking_id}/reschedule", response_model=Booking)
def reschedule_booking(
    booking_id: str,
    payload: BookingUpdate,
    service: ParentService = Depends(get_parent_service),
) -> Booking:
    booking = call(service.reschedule_booking, booking_id, payload.date, payload.slot)
    return found(booking, "Booking")


@router.post("/{parent_id}/bookings/{booking_id}/checkout", response_model=CheckoutResult)
def checkout(
    booking_id: str,
    payload: CheckoutRequest,
    service: ParentService = Depends(get_parent_service),
) -> CheckoutResult:
    """Pay for a booking and confirm it."""
    return found(call(service.checkout, booking_id, payload.payment_method), "Booking")


# Billing

@router.get("/{parent_id}/payments", response_model=List[Payment])
def list_payments(service: ParentService = Depends(get_parent_service)) -> List[Payment]:
    return service.list_payments()


@router.get("/{parent_id}/payments/monthly", response_model=MonthlyTotals)
def monthly_spend(service: ParentService = Depends(get_parent_service)) -> MonthlyTotals:
    """Total spent and completed payments per month, newest month first."""
    return service.billing_summary()


# Messages

@router.get("/{parent_id}/conversations", response_model=List[ConversationSummary])
def list_conversations(service: ParentService = Depends(get_parent_service)) -> List[ConversationSummary]:
    return service.conversations()


@router.get("/{parent_id}/messages/unread", response_model=Dict[str, int])
def unread_messages(service: ParentService = Depends(get_parent_service)) -> Dict[str, int]:
    return {"unread": service.unread_message_count()}


@router.get("/{parent_id}/messages/{tutor_id}", response_model=List[Message])
def conversation_messages(tutor_id: str, service: ParentService = Depends(get_parent_service)) -> List[Message]:
    return call(service.conversation_messages, tutor_id)


@router.post("/{parent_id}/messages/{tutor_id}", response_model=Message, status_code=status.HTTP_201_CREATED)
def send_message(
    tutor_id: str,
    payload: MessageCreate,
    service: ParentService = Depends(get_parent_service),
) -> Message:
    return call(service.send_message, tutor_id, payload.content)


@router.post("/{parent_id}/message-reads/{message_id}", response_model=Message)
def mark_message_read(message_id: str, service: ParentService = Depends(get_parent_service)) -> Message:
    return found(service.mark_message_read(message_id), "Message")


# Announcements

@router.get("/{parent_id}/announcements", response_model=List[ParentAnnouncement])
def list_announcements(
    source: Optional[str] = None,
    service: ParentService = Depends(get_parent_service),
) -> List[ParentAnnouncement]:
    """Announcements for the parent, newest first.

    Newly published announcements are copied into the parent's feed
    before listing.
    """
    service.sync_announcements()
    return service.list_announcements(source)


@router.get("/{parent_id}/announcements/unread", response_model=Dict[str, int])
def unread_announcements(service: ParentService = Depends(get_parent_service)) -> Dict[str, int]:
    return {"unread": service.unread_announcement_count()}


@router.post("/{parent_id}/announcements/{announcement_id}/read", response_model=ParentAnnouncement)
def mark_announcement_read(announcement_id: str, service: ParentService = Depends(get_parent_service)) -> ParentAnnouncement:
    return found(service.mark_announcement_read(announcement_id), "Announcement")


@router.delete("/{parent_id}/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(announcement_id: str, service: ParentService = Depends(get_parent_service)) -> None:
    found(service.delete_announcement(announcement_id), "Announcement")
    return None


# Children

@router.get("/{parent_id}/children", response_model=List[Child])
def list_children(service: ParentService = Depends(get_parent_service)) -> List[Child]:
    return service.list_children()


@router.post("/{parent_id}/children", response_model=Child, status_code=status.HTTP_201_CREATED)
def add_child(payload: ChildCreate, service: ParentService = Depends(get_parent_service)) -> Child:
    return call(service.add_child, payload.model_dump(exclude_none=True))


@router.patch("/{parent_id}/children/{child_id}", response_model=Child)
def update_child(child_id: str, payload: ChildUpdate, service: ParentService = Depends(get_parent_service)) -> Child:
    return found(call(service.update_child, child_id, payload.model_dump(exclude_none=True)), "Child")


@router.delete("/{parent_id}/children/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_child(child_id: str, service: ParentService = Depends(get_parent_service)) -> None:
    found(service.delete_child(child_id), "Child")
    return None

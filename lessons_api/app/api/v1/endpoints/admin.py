"""
Admin endpoints for API v1.

These routes expose the admin service: every account, booking,
payment and tutor earning, the global announcements and the reports.
Payment amounts cannot be edited; only their status.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from lessons_api.app.api.deps import call, found, get_admin_service
from lessons_api.app.schemas.account import AccountCreate, AccountUpdate
from lessons_api.app.schemas.announcement import Announcement, AnnouncementCreate, AnnouncementUpdate
from lessons_api.app.schemas.booking import Booking, BookingUpdate
from lessons_api.app.schemas.payment import Payment, PaymentCreate, PaymentStatusUpdate, PaymentWithBooking
from lessons_api.app.schemas.report import Metrics
from lessons_api.app.schemas.tutoring import Earning
from lessons_api.app.services.admin_service import AdminService


router = APIRouter()


# Accounts

@router.get("/accounts", response_model=List[Dict[str, Any]])
def list_accounts(role: Optional[str] = None, service: AdminService = Depends(get_admin_service)) -> List[Dict[str, Any]]:
    """List accounts, optionally only those with ``role``."""
    return [account.public() for account in service.list_accounts(role)]


@router.post("/accounts", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
def create_account(payload: AccountCreate, service: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    account = call(service.create_account, payload.model_dump(exclude_none=True))
    return account.public()


@router.patch("/accounts/{account_id}", response_model=Dict[str, Any])
def update_account(
    payload: AccountUpdate,
    account_id: str = Path(..., description="Account id"),
    service: AdminService = Depends(get_admin_service),
) -> Dict[str, Any]:
    account = call(service.update_account, account_id, payload.model_dump(exclude_none=True))
    return found(account, "Account").public()


@router.post("/accounts/{account_id}/toggle-active", response_model=Dict[str, Any])
def toggle_account(account_id: str, service: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return found(service.toggle_active(account_id), "Account").public()


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, service: AdminService = Depends(get_admin_service)) -> None:
    found(service.delete_account(account_id), "Account")
    return None


# Bookings

@router.get("/bookings", response_model=List[Booking])
def list_bookings(status_param: Optional[str] = Query(None, alias="status"), service: AdminService = Depends(get_admin_service)) -> List[Booking]:
    """All bookings, latest lesson date first."""
    return service.list_bookings(status_param)


@router.patch("/bookings/{booking_id}", response_model=Booking)
def update_booking(booking_id: str, payload: BookingUpdate, service: AdminService = Depends(get_admin_service)) -> Booking:
    booking = call(service.update_booking, booking_id, payload.model_dump(exclude_none=True))
    return found(booking, "Booking")


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: str, service: AdminService = Depends(get_admin_service)) -> None:
    found(service.delete_booking(booking_id), "Booking")
    return None


# Payments

@router.get("/payments", response_model=List[Payment])
def list_payments(status_param: Optional[str] = Query(None, alias="status"), service: AdminService = Depends(get_admin_service)) -> List[Payment]:
    return service.list_payments(status_param)


@router.get("/payments/with-bookings", response_model=List[PaymentWithBooking])
def list_payments_with_bookings(service: AdminService = Depends(get_admin_service)) -> List[PaymentWithBooking]:
    """Payments joined with their booking; ``booking`` is null once deleted."""
    return service.list_payments_with_bookings()


@router.post("/payments", response_model=Payment, status_code=status.HTTP_201_CREATED)
def record_payment(payload: PaymentCreate, service: AdminService = Depends(get_admin_service)) -> Payment:
    return call(service.record_payment, payload.model_dump(exclude_none=True))


@router.patch("/payments/{payment_id}", response_model=Payment)
def update_payment_status(
    payment_id: str,
    payload: PaymentStatusUpdate,
    service: AdminService = Depends(get_admin_service),
) -> Payment:
    return found(call(service.update_payment_status, payment_id, payload.status), "Payment")


# Tutor earnings

@router.get("/earnings", response_model=List[Earning])
def list_earnings(
    status_param: Optional[str] = Query(None, alias="status"),
    service: AdminService = Depends(get_admin_service),
) -> List[Earning]:
    return service.list_earnings(status_param)


@router.post("/earnings/{earning_id}/paid", response_model=Earning)
def mark_earning_paid(earning_id: str, service: AdminService = Depends(get_admin_service)) -> Earning:
    return found(service.mark_earning_paid(earning_id), "Earning")


# Announcements

@router.get("/announcements", response_model=List[Announcement])
def list_announcements(audience: Optional[str] = None, service: AdminService = Depends(get_admin_service)) -> List[Announcement]:
    return service.list_announcements(audience)


@router.post("/announcements", response_model=Announcement, status_code=status.HTTP_201_CREATED)
def create_announcement(payload: AnnouncementCreate, service: AdminService = Depends(get_admin_service)) -> Announcement:
    return call(service.create_announcement, payload.model_dump(exclude_none=True))


@router.patch("/announcements/{announcement_id}", response_model=Announcement)
def update_announcement(
    announcement_id: str,
    payload: AnnouncementUpdate,
    service: AdminService = Depends(get_admin_service),
) -> Announcement:
    announcement = call(service.update_announcement, announcement_id, payload.model_dump(exclude_none=True))
    return found(announcement, "Announcement")


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(announcement_id: str, service: AdminService = Depends(get_admin_service)) -> None:
    found(service.delete_announcement(announcement_id), "Announcement")
    return None


# Reports

@router.get("/metrics", response_model=Metrics)
def metrics(service: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    """Revenue, bookings per month and subject, accounts per role."""
    return service.metrics()

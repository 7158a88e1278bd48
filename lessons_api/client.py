"""Lessons API client.

A thin wrapper around the HTTP API served by ``lessons_api.app.main``
for scripts and other services that talk to a running instance.  It
uses the ``requests`` library internally.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` (or an empty list for
listing calls) and ``error`` is a dictionary with keys ``status_code``
and ``message``.  Transport failures have ``status_code`` set to
``None``.

Payloads use the same camelCase field names as the API, e.g.::

    client = LessonsAPI(base_url="http://localhost:8000")
    parent, error = client.login("parent@example.com", "secret")
    booking, error = client.book_lesson(parent["id"], {
        "studentName": "Tom", "subject": "Math", "lessonType": "group",
        "pupilsCount": 3, "date": "2024-09-01", "slot": "16:00-18:00",
    })
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Optional[Dict[str, Any]]


class LessonsAPI:
    """Client for the v1 Lessons API."""

    def __init__(
        self,
        *,
        base_url: str,
        prefix: str = "/api/v1",
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Server address, e.g. ``http://localhost:8000``.
            prefix: Path the versioned routes are mounted under.
            timeout: Per-request timeout in seconds.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helper
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Error]:
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            response = exc.response
            status = response.status_code if response is not None else None
            message = ""
            if response is not None:
                try:
                    message = response.json().get("detail") or ""
                except ValueError:
                    message = response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _list(self, path: str, params: Dict[str, Any] | None = None) -> Tuple[List[Dict[str, Any]], Error]:
        data, error = self._request("GET", path, params=params)
        if error:
            return [], error
        return data if isinstance(data, list) else [], None

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def signup(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", "/auth/signup", json_body=payload)

    def login(self, email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", "/auth/login", json_body={"email": email, "password": password})

    # ------------------------------------------------------------------
    # Parent operations
    # ------------------------------------------------------------------
    def list_bookings(self, parent_id: str, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Error]:
        params = {"status": status} if status else None
        return self._list(f"/parents/{parent_id}/bookings", params)

    def book_lesson(self, parent_id: str, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", f"/parents/{parent_id}/bookings", json_body=payload)

    def cancel_booking(self, parent_id: str, booking_id: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", f"/parents/{parent_id}/bookings/{booking_id}/cancel")

    def checkout(
        self, parent_id: str, booking_id: str, payment_method: str = "card"
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        """Pay for a booking.  The result holds the confirmed booking and the payment."""
        return self._request(
            "POST",
            f"/parents/{parent_id}/bookings/{booking_id}/checkout",
            json_body={"paymentMethod": payment_method},
        )

    def billing_summary(self, parent_id: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", f"/parents/{parent_id}/payments/monthly")

    def send_message_to_tutor(
        self, parent_id: str, tutor_id: str, content: str
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", f"/parents/{parent_id}/messages/{tutor_id}", json_body={"content": content})

    def parent_announcements(self, parent_id: str) -> Tuple[List[Dict[str, Any]], Error]:
        return self._list(f"/parents/{parent_id}/announcements")

    # ------------------------------------------------------------------
    # Tutor operations
    # ------------------------------------------------------------------
    def list_lessons(self, tutor_id: str, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Error]:
        params = {"status": status} if status else None
        return self._list(f"/tutors/{tutor_id}/lessons", params)

    def update_lesson(
        self, tutor_id: str, booking_id: str, payload: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("PATCH", f"/tutors/{tutor_id}/lessons/{booking_id}", json_body=payload)

    def add_availability(self, tutor_id: str, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", f"/tutors/{tutor_id}/availability", json_body=payload)

    def assign_homework(
        self, tutor_id: str, student_id: str, payload: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", f"/tutors/{tutor_id}/students/{student_id}/homework", json_body=payload)

    # ------------------------------------------------------------------
    # Student operations
    # ------------------------------------------------------------------
    def student_homework(self, student_id: str, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Error]:
        params = {"status": status} if status else None
        return self._list(f"/students/{student_id}/homework", params)

    def submit_homework(
        self, student_id: str, homework_id: str, submission_url: str
    ) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request(
            "POST",
            f"/students/{student_id}/homework/{homework_id}/submit",
            json_body={"submissionUrl": submission_url},
        )

    def attendance_stats(self, student_id: str) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", f"/students/{student_id}/attendance/stats")

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------
    def create_announcement(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("POST", "/admin/announcements", json_body=payload)

    def metrics(self) -> Tuple[Optional[Dict[str, Any]], Error]:
        return self._request("GET", "/admin/metrics")

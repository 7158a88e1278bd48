"""HTTP tests for the v1 routers."""

import pytest

from lessons_api.app.services.admin_service import AdminService


API = "/api/v1"

LESSON = {
    "studentName": "Tom",
    "subject": "Math",
    "lessonType": "group",
    "pupilsCount": 3,
    "date": "2024-09-01",
    "slot": "16:00-18:00",
}


@pytest.fixture
def parent_id(client):
    response = client.post(
        f"{API}/auth/signup",
        json={"email": "jane@example.com", "password": "secret", "name": "Jane", "childName": "Tom"},
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def tutor_id(client):
    response = client.post(
        f"{API}/auth/signup",
        json={"email": "tom@example.com", "password": "secret", "name": "Tom", "role": "tutor"},
    )
    return response.json()["id"]


@pytest.fixture
def student_id(client):
    response = client.post(
        f"{API}/auth/signup",
        json={"email": "sam@example.com", "password": "secret", "name": "Sam", "role": "student"},
    )
    return response.json()["id"]


def test_signup_and_login(client, parent_id):
    response = client.post(f"{API}/auth/login", json={"email": "JANE@example.com", "password": "secret"})
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == parent_id
    assert body["childName"] == "Tom"
    assert "password" not in body

    response = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": "wrong"})
    assert response.status_code == 401


def test_signup_errors(client, parent_id):
    duplicate = client.post(
        f"{API}/auth/signup", json={"email": "Jane@Example.com", "password": "x", "name": "Again"}
    )
    assert duplicate.status_code == 409
    missing = client.post(f"{API}/auth/signup", json={"email": "new@example.com"})
    assert missing.status_code == 400
    admin = client.post(
        f"{API}/auth/signup", json={"email": "a@example.com", "password": "x", "name": "A", "role": "admin"}
    )
    assert admin.status_code == 403


def test_booking_and_checkout(client, parent_id):
    response = client.post(f"{API}/parents/{parent_id}/bookings", json=LESSON)
    assert response.status_code == 201
    booking = response.json()
    assert booking["total"] == 120
    assert booking["ratePerHour"] == 20
    assert booking["status"] == "pending"

    response = client.post(
        f"{API}/parents/{parent_id}/bookings/{booking['id']}/checkout", json={"paymentMethod": "card"}
    )
    assert response.status_code == 200
    result = response.json()
    assert result["booking"]["status"] == "confirmed"
    assert result["payment"]["amount"] == 120
    assert result["payment"]["bookingId"] == booking["id"]

    again = client.post(f"{API}/parents/{parent_id}/bookings/{booking['id']}/checkout", json={})
    assert again.status_code == 400
    assert len(client.get(f"{API}/parents/{parent_id}/payments").json()) == 1

    summary = client.get(f"{API}/parents/{parent_id}/payments/monthly").json()
    assert summary["total"] == 120
    assert list(summary["months"].values()) == [120]

    listed = client.get(f"{API}/parents/{parent_id}/bookings", params={"status": "confirmed"}).json()
    assert [item["id"] for item in listed] == [booking["id"]]


def test_booking_validation_and_absence(client, parent_id):
    response = client.post(f"{API}/parents/{parent_id}/bookings", json={"studentName": "Tom"})
    assert response.status_code == 400
    assert client.get(f"{API}/parents/{parent_id}/bookings/bk_missing").status_code == 404
    assert client.post(f"{API}/parents/{parent_id}/bookings/bk_missing/cancel").status_code == 404
    assert client.post(f"{API}/parents/{parent_id}/bookings/bk_missing/checkout", json={}).status_code == 404


def test_other_parents_booking_is_not_found(client, parent_id):
    booking = client.post(f"{API}/parents/{parent_id}/bookings", json=LESSON).json()
    assert client.get(f"{API}/parents/par_other/bookings/{booking['id']}").status_code == 404


def test_messaging_between_parent_and_tutor(client, parent_id, tutor_id):
    sent = client.post(f"{API}/parents/{parent_id}/messages/{tutor_id}", json={"content": "Hello"})
    assert sent.status_code == 201
    conversation_id = sent.json()["conversationId"]
    assert conversation_id == f"conv_{parent_id}:{tutor_id}"

    assert client.get(f"{API}/tutors/{tutor_id}/messages/unread").json() == {"unread": 1}
    conversations = client.get(f"{API}/tutors/{tutor_id}/conversations").json()
    assert conversations[0]["lastMessage"] == "Hello"
    assert conversations[0]["unreadCount"] == 1

    reply = client.post(
        f"{API}/tutors/{tutor_id}/conversations/{conversation_id}/messages", json={"content": "Hi"}
    ).json()
    assert client.get(f"{API}/parents/{parent_id}/messages/unread").json() == {"unread": 1}
    read = client.post(f"{API}/parents/{parent_id}/message-reads/{reply['id']}")
    assert read.status_code == 200
    assert read.json()["readAt"]
    assert client.get(f"{API}/parents/{parent_id}/messages/unread").json() == {"unread": 0}

    summaries = client.get(f"{API}/parents/{parent_id}/conversations").json()
    assert summaries[0]["participantId"] == tutor_id
    assert summaries[0]["lastMessage"] == "Hi"

    empty = client.post(f"{API}/parents/{parent_id}/messages/{tutor_id}", json={"content": ""})
    assert empty.status_code == 400


def test_announcements_reach_parents(client, store, parent_id):
    created = client.post(
        f"{API}/admin/announcements", json={"title": "Half term", "content": "No lessons", "audience": "parents"}
    )
    assert created.status_code == 201

    feed = client.get(f"{API}/parents/{parent_id}/announcements").json()
    assert [item["title"] for item in feed] == ["Half term"]
    assert feed[0]["sourceName"] == "Admin"
    assert client.get(f"{API}/parents/{parent_id}/announcements/unread").json() == {"unread": 1}

    client.post(f"{API}/parents/{parent_id}/announcements/{feed[0]['id']}/read")
    assert client.get(f"{API}/parents/{parent_id}/announcements/unread").json() == {"unread": 0}

    assert client.delete(f"{API}/parents/{parent_id}/announcements/{feed[0]['id']}").status_code == 204
    assert client.get(f"{API}/parents/{parent_id}/announcements").json() == []
    assert client.get(f"{API}/parents/{parent_id}/announcements/unread").json() == {"unread": 0}
    assert client.delete(f"{API}/parents/{parent_id}/announcements/{feed[0]['id']}").status_code == 404
    assert len(AdminService(store).list_announcements()) == 1


def test_tutor_availability_and_lessons(client, parent_id, tutor_id):
    slot = client.post(
        f"{API}/tutors/{tutor_id}/availability",
        json={"dayOfWeek": "Monday", "startTime": "16:00", "endTime": "18:00"},
    )
    assert slot.status_code == 201
    assert slot.json()["tutorId"] == tutor_id
    assert client.post(f"{API}/tutors/{tutor_id}/availability", json={"dayOfWeek": "Funday"}).status_code == 422

    booking = client.post(f"{API}/parents/{parent_id}/bookings", json=dict(LESSON, tutorId=tutor_id)).json()
    lessons = client.get(f"{API}/tutors/{tutor_id}/lessons").json()
    assert [lesson["id"] for lesson in lessons] == [booking["id"]]

    done = client.patch(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}", json={"status": "completed"})
    assert done.json()["status"] == "completed"
    bad = client.patch(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}", json={"status": "pending"})
    assert bad.status_code == 400
    assert client.get(f"{API}/tutors/{tutor_id}/earnings").json() == {"2024-09": 120}


def test_admin_payments_and_metrics(client, parent_id):
    booking = client.post(f"{API}/parents/{parent_id}/bookings", json=LESSON).json()
    client.post(f"{API}/parents/{parent_id}/bookings/{booking['id']}/checkout", json={})

    payments = client.get(f"{API}/admin/payments/with-bookings").json()
    assert payments[0]["booking"]["id"] == booking["id"]

    patched = client.patch(f"{API}/admin/payments/{payments[0]['payment']['id']}", json={"status": "failed"})
    assert patched.json()["status"] == "failed"
    assert patched.json()["amount"] == 120

    assert client.delete(f"{API}/admin/bookings/{booking['id']}").status_code == 204
    payments = client.get(f"{API}/admin/payments/with-bookings").json()
    assert payments[0]["booking"] is None

    metrics = client.get(f"{API}/admin/metrics").json()
    assert metrics["bookings"] == 0
    assert metrics["accounts"] == {"parent": 1}
    assert metrics["paymentsTotal"] == 0
    assert metrics["bySubject"] == {}


def test_children_routes(client, parent_id):
    child = client.post(f"{API}/parents/{parent_id}/children", json={"name": "Tom", "schoolYear": "Year 5"})
    assert child.status_code == 201
    child_id = child.json()["id"]
    updated = client.patch(f"{API}/parents/{parent_id}/children/{child_id}", json={"age": 10})
    assert updated.json()["age"] == 10
    assert updated.json()["schoolYear"] == "Year 5"
    assert client.delete(f"{API}/parents/{parent_id}/children/{child_id}").status_code == 204
    assert client.get(f"{API}/parents/{parent_id}/children").json() == []


def test_tutor_records_reach_the_student(client, tutor_id, student_id):
    lesson = client.post(
        f"{API}/tutors/{tutor_id}/students/{student_id}/lessons",
        json={"subject": "Math", "date": "2024-09-01", "slot": "16:00-17:00"},
    )
    assert lesson.status_code == 201
    lesson_id = lesson.json()["id"]
    assert lesson.json()["tutorName"] == "Tom"
    assert client.get(f"{API}/students/{student_id}/lessons").json()[0]["id"] == lesson_id

    attended = client.put(f"{API}/tutors/{tutor_id}/student-lessons/{lesson_id}/attendance", json={"status": "present"})
    assert attended.status_code == 200
    assert client.get(f"{API}/students/{student_id}/attendance/stats").json() == {
        "total": 1, "present": 1, "absent": 0, "excused": 0, "percentage": 100,
    }
    assert client.get(f"{API}/students/{student_id}/lessons/{lesson_id}").json()["attendance"] == "present"

    homework = client.post(
        f"{API}/tutors/{tutor_id}/students/{student_id}/homework",
        json={"title": "Fractions", "subject": "Math", "dueDate": "2024-09-08"},
    ).json()
    submitted = client.post(
        f"{API}/students/{student_id}/homework/{homework['id']}/submit",
        json={"submissionUrl": "https://example.com/answers.pdf"},
    )
    assert submitted.json()["status"] == "submitted"
    assert client.post(f"{API}/students/stu_other/homework/{homework['id']}/submit", json={"submissionUrl": "x"}).status_code == 404
    reviewed = client.patch(
        f"{API}/tutors/{tutor_id}/homework/{homework['id']}", json={"status": "completed", "tutorFeedback": "Good"}
    )
    assert reviewed.json()["tutorFeedback"] == "Good"

    client.post(
        f"{API}/tutors/{tutor_id}/students/{student_id}/materials",
        json={"name": "Sheet", "fileUrl": "https://example.com/s.pdf", "subject": "Math", "category": "worksheet"},
    )
    assert len(client.get(f"{API}/students/{student_id}/materials", params={"subject": "Math"}).json()) == 1
    assert client.get(f"{API}/students/{student_id}/materials", params={"subject": "Art"}).json() == []

    client.post(
        f"{API}/tutors/{tutor_id}/students/{student_id}/progress",
        json={"subject": "Math", "lessonDate": "2024-09-01", "topicsCovered": ["Fractions"]},
    )
    assert client.get(f"{API}/students/{student_id}/progress").json()[0]["topicsCovered"] == ["Fractions"]


def test_student_messages_tutor(client, tutor_id, student_id):
    sent = client.post(f"{API}/students/{student_id}/messages/{tutor_id}", json={"content": "Question 3?"})
    assert sent.status_code == 201
    assert sent.json()["conversationId"] == f"conv_{student_id}:{tutor_id}"
    conversations = client.get(f"{API}/tutors/{tutor_id}/conversations").json()
    assert conversations[0]["participantRole"] == "student"
    assert client.get(f"{API}/students/{student_id}/messages/{tutor_id}").json()[0]["content"] == "Question 3?"
    assert client.get(f"{API}/students/{student_id}/messages/bad:id").status_code == 400


def test_tutor_notes_materials_and_payouts(client, parent_id, tutor_id):
    booking = client.post(f"{API}/parents/{parent_id}/bookings", json=dict(LESSON, tutorId=tutor_id)).json()
    assert client.get(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}/notes").status_code == 404
    note = client.put(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}/notes", json={"content": "Fractions"})
    assert note.status_code == 200
    assert client.get(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}/notes").json()["content"] == "Fractions"

    material = client.post(
        f"{API}/tutors/{tutor_id}/materials", json={"title": "Algebra", "fileUrl": "https://example.com/a.pdf"}
    )
    assert material.status_code == 201
    assert client.delete(f"{API}/tutors/{tutor_id}/materials/{material.json()['id']}").status_code == 204
    assert client.post(f"{API}/tutors/{tutor_id}/materials", json={"title": "No file"}).status_code == 400

    assert client.get(f"{API}/tutors/{tutor_id}/payout-settings").json()["payoutSchedule"] == "monthly"
    weekly = client.patch(f"{API}/tutors/{tutor_id}/payout-settings", json={"payoutSchedule": "weekly"})
    assert weekly.json()["payoutSchedule"] == "weekly"

    client.patch(f"{API}/tutors/{tutor_id}/lessons/{booking['id']}", json={"status": "completed"})
    records = client.get(f"{API}/tutors/{tutor_id}/earnings/records").json()
    assert [record["bookingId"] for record in records] == [booking["id"]]
    paid = client.post(f"{API}/admin/earnings/{records[0]['id']}/paid")
    assert paid.json()["status"] == "paid"
    assert client.get(f"{API}/admin/earnings", params={"status": "pending"}).json() == []

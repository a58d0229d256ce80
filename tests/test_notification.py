"""
Unit tests — confirmation emails (notification_service.py).

Coverage:
  - one message per participant, team members addressed individually
  - every recipient attempted even after a failure
  - HTML content lists event details and escapes user input
  - workshop confirmation subject from configuration
"""
from __future__ import annotations

import pytest

from conftest import FailingMailer, FakeMailer, person
from techelons.models.models import Event, Registration, WorkshopRegistration
from techelons.services.notification_service import (
    notify_registration_confirmed,
    notify_workshop_registration,
    render_registration_email,
)


def _event(**overrides) -> Event:
    data = dict(
        id="hackathon", name="Hackathon", team_min=2, team_max=4,
        tagline="Build it", date="March 27", time="10:00", venue="Lab 3",
        rules=["No plagiarism"], coordinators=[{"name": "Ravi", "phone": "9876500000", "email": "ravi@du.ac.in"}],
        competition_structure=["Round 1", "Finale"], evaluation_criteria=["Innovation"],
        whatsapp_group="https://chat.whatsapp.com/abc", instructions="Bring laptops",
    )
    data.update(overrides)
    return Event(**data)


def _registration(members: list, team: bool = True) -> Registration:
    return Registration(
        id=1, event_id="hackathon", event_name="Hackathon", is_team_event=team,
        team_name="<Null Pointers>" if team else None, main_email="student1@du.ac.in",
        main_participant=person(1), team_members=members,
        college_id_url="https://files.example.org/1.png",
    )


class TestRender:

    def test_lists_event_details(self) -> None:
        html = render_registration_email(_registration([person(2)]), _event(), person(1))
        for expected in ("Lab 3", "No plagiarism", "Round 1", "Innovation", "Ravi",
                         "https://chat.whatsapp.com/abc", "Bring laptops", "Team Size:</strong> 2"):
            assert expected in html

    def test_escapes_team_name(self) -> None:
        html = render_registration_email(_registration([person(2)]), _event(), person(1))
        assert "&lt;Null Pointers&gt;" in html
        assert "<Null Pointers>" not in html

    def test_member_copy_names_team(self) -> None:
        html = render_registration_email(
            _registration([person(2)]), _event(), person(2), is_team_member=True
        )
        assert "registered as a team member" in html
        assert "Team Size" not in html

    def test_missing_details_say_tba(self) -> None:
        html = render_registration_email(
            _registration([], team=False), _event(date=None, time=None, venue=None), person(1)
        )
        assert html.count("TBA") == 3


class TestNotify:

    async def test_individual_gets_one_message(self) -> None:
        mailer = FakeMailer()
        ok = await notify_registration_confirmed(mailer, _registration([], team=False), _event(team_max=1))
        assert ok is True
        assert [m["to"] for m in mailer.sent] == ["student1@du.ac.in"]
        assert mailer.sent[0]["subject"] == "Registration Confirmation: Hackathon - Techelons"

    async def test_each_member_addressed(self) -> None:
        mailer = FakeMailer()
        ok = await notify_registration_confirmed(mailer, _registration([person(2), person(3)]), _event())
        assert ok is True
        assert [m["to"] for m in mailer.sent] == [
            "student1@du.ac.in", "student2@du.ac.in", "student3@du.ac.in",
        ]
        assert "Dear Student 3" in mailer.sent[2]["html"]

    async def test_failure_does_not_stop_others(self) -> None:
        mailer = FakeMailer(fail_for={"student1@du.ac.in"})
        ok = await notify_registration_confirmed(mailer, _registration([person(2)]), _event())
        assert ok is False
        assert [m["to"] for m in mailer.sent] == ["student2@du.ac.in"]

    async def test_transport_down(self) -> None:
        ok = await notify_registration_confirmed(FailingMailer(), _registration([person(2)]), _event())
        assert ok is False

    async def test_unexpected_mailer_error_propagates(self) -> None:
        class BrokenMailer:
            async def send(self, to_email, subject, html_content, text_content=None):
                raise RuntimeError("template engine exploded")

        with pytest.raises(RuntimeError):
            await notify_registration_confirmed(BrokenMailer(), _registration([]), _event())


class TestWorkshopNotify:

    async def test_subject_and_details(self) -> None:
        mailer = FakeMailer()
        registration = WorkshopRegistration(
            email="bob@du.ac.in", phone="9876543210", name="Bob", roll_no="12",
            course="BSc", year="1st Year",
        )
        workshop = {
            "title": "Git Basics",
            "details": [{"label": "Date", "value": "April 2"}],
            "whatsappGroupLink": "https://chat.whatsapp.com/ws",
            "emailNotification": {"subject": "See you at Git Basics"},
        }
        assert await notify_workshop_registration(mailer, registration, workshop) is True
        sent = mailer.sent[0]
        assert sent["subject"] == "See you at Git Basics"
        assert "April 2" in sent["html"]
        assert "https://chat.whatsapp.com/ws" in sent["html"]

"""
Unit tests — capacity and duplicate policy (registration_service).

Coverage:
  - event / fest open checks
  - team size bounds recomputed from submitted members
  - intra-team uniqueness by email and phone, first collision reported
  - team members already registered elsewhere for the same event
"""
from __future__ import annotations

import pytest

from conftest import make_event, make_fest, person, registration_payload
from techelons.errors import PolicyViolationError, RegistrationClosedError
from techelons.models.models import Event, FestInfo, Registration, RegistrationStatus
from techelons.services.registration_service import (
    check_event_open,
    check_internal_duplicates,
    check_members_already_registered,
    check_team_size,
    find_registration,
)
from techelons.validators import validate_registration


def _event(team_min: int = 2, team_max: int = 4, status: str = RegistrationStatus.OPEN) -> Event:
    return Event(
        id="hackathon", name="Hackathon",
        team_min=team_min, team_max=team_max, registration_status=status,
    )


def _team(size: int):
    members = [person(n) for n in range(2, size + 1)]
    return validate_registration(registration_payload(members=members))


# ─────────────────────────── Open checks ──────────────────────────────────────

class TestEventOpen:

    def test_open_event_passes(self) -> None:
        check_event_open(FestInfo(registration_enabled=True), _event())

    @pytest.mark.parametrize("status", [RegistrationStatus.CLOSED, RegistrationStatus.COMING_SOON])
    def test_non_open_status_rejected(self, status: str) -> None:
        with pytest.raises(RegistrationClosedError) as exc_info:
            check_event_open(FestInfo(registration_enabled=True), _event(status=status))
        assert status in exc_info.value.message
        assert exc_info.value.status_code == 403

    def test_fest_switch_off_rejected(self) -> None:
        with pytest.raises(RegistrationClosedError):
            check_event_open(FestInfo(registration_enabled=False), _event())


# ─────────────────────────── Team size ────────────────────────────────────────

class TestTeamSize:

    @pytest.mark.parametrize("size", [2, 3, 4])
    def test_within_bounds(self, size: int) -> None:
        check_team_size(_event(2, 4), _team(size))

    def test_too_small(self) -> None:
        with pytest.raises(PolicyViolationError, match="Team must have at least 2 members"):
            check_team_size(_event(2, 4), _team(1))

    def test_too_large(self) -> None:
        with pytest.raises(PolicyViolationError, match="Team cannot have more than 4 members"):
            check_team_size(_event(2, 4), _team(5))

    def test_individual_event_rejects_members(self) -> None:
        with pytest.raises(PolicyViolationError, match="only accepts individual"):
            check_team_size(_event(1, 1), _team(2))

    def test_individual_event_alone(self) -> None:
        check_team_size(_event(1, 1), _team(1))

    def test_client_team_flag_ignored(self) -> None:
        data = validate_registration(registration_payload(isTeamEvent=True))
        with pytest.raises(PolicyViolationError):
            check_team_size(_event(2, 4), data)


# ─────────────────────────── Internal duplicates ──────────────────────────────

class TestInternalDuplicates:

    def test_unique_team_passes(self) -> None:
        check_internal_duplicates(_team(4))

    def test_member_reuses_leader_email(self) -> None:
        data = validate_registration(registration_payload(
            members=[person(2, email="Student1@du.ac.in")]
        ))
        with pytest.raises(PolicyViolationError, match="student1@du.ac.in") as exc_info:
            check_internal_duplicates(data)
        assert exc_info.value.code == "DUPLICATE_EMAIL"

    def test_two_members_share_phone(self) -> None:
        data = validate_registration(registration_payload(
            members=[person(2), person(3, phone=person(2)["phone"])]
        ))
        with pytest.raises(PolicyViolationError, match=person(2)["phone"]) as exc_info:
            check_internal_duplicates(data)
        assert exc_info.value.code == "DUPLICATE_PHONE"

    def test_email_checked_before_phone(self) -> None:
        clone = person(2)
        data = validate_registration(registration_payload(members=[clone, dict(clone)]))
        with pytest.raises(PolicyViolationError) as exc_info:
            check_internal_duplicates(data)
        assert exc_info.value.code == "DUPLICATE_EMAIL"

    def test_first_collision_in_order_reported(self) -> None:
        data = validate_registration(registration_payload(members=[
            person(2),
            person(3, phone=person(2)["phone"]),
            person(4, email=person(2)["email"]),
        ]))
        with pytest.raises(PolicyViolationError) as exc_info:
            check_internal_duplicates(data)
        assert exc_info.value.code == "DUPLICATE_PHONE"


# ─────────────────────────── Store-backed checks ──────────────────────────────

class TestStoreChecks:

    async def _store(self, session, main: dict, members: list) -> Registration:
        reg = Registration(
            event_id="hackathon", event_name="Hackathon", is_team_event=True,
            team_name="First Team", main_email=main["email"],
            main_participant=main, team_members=members,
            college_id_url="https://files.example.org/1.png",
        )
        session.add(reg)
        await session.commit()
        return reg

    async def test_find_registration_case_insensitive(self, async_session) -> None:
        await make_fest(async_session)
        await make_event(async_session, team_min=2, team_max=4)
        await self._store(async_session, person(1), [person(2)])
        found = await find_registration(async_session, "hackathon", "STUDENT1@du.ac.in")
        assert found is not None
        assert await find_registration(async_session, "other-event", "student1@du.ac.in") is None

    async def test_member_already_in_other_team(self, async_session) -> None:
        event = await make_event(async_session, team_min=2, team_max=4)
        await self._store(async_session, person(1), [person(2)])
        data = validate_registration(registration_payload(main=person(7), members=[person(2)]))
        with pytest.raises(PolicyViolationError, match="student2@du.ac.in") as exc_info:
            await check_members_already_registered(async_session, event, data)
        assert "First Team" in exc_info.value.message

    async def test_member_was_a_leader(self, async_session) -> None:
        event = await make_event(async_session, team_min=2, team_max=4)
        await self._store(async_session, person(1), [person(2)])
        data = validate_registration(registration_payload(
            main=person(7), members=[person(8, phone=person(1)["phone"])]
        ))
        with pytest.raises(PolicyViolationError, match=person(1)["phone"]):
            await check_members_already_registered(async_session, event, data)

    async def test_fresh_team_passes(self, async_session) -> None:
        event = await make_event(async_session, team_min=2, team_max=4)
        await self._store(async_session, person(1), [person(2)])
        data = validate_registration(registration_payload(main=person(7), members=[person(8)]))
        await check_members_already_registered(async_session, event, data)

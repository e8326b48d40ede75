from __future__ import annotations

from datetime import datetime

import pytest

from rollcall import create_app, db
from rollcall.models import (
    AttendanceEvent,
    AttendanceSchedule,
    Organization,
    OrgMembership,
    Person,
    SmallGroup,
    User,
)
from rollcall.services.access import Caller


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Small helpers for building rows in tests."""

    def __init__(self):
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def org(self, name="Anthem Students", timezone="America/Chicago", overrides=None) -> Organization:
        n = self._next()
        org = Organization(name=name, slug=f"org-{n}", timezone=timezone, permission_overrides=overrides)
        db.session.add(org)
        db.session.commit()
        return org

    def user(self, org: Organization, role="leader", status="approved", name=None) -> User:
        n = self._next()
        user = User(email=f"user{n}@example.com", name=name or f"User {n}")
        db.session.add(user)
        db.session.flush()
        db.session.add(OrgMembership(organization_id=org.id, user_id=user.id, role=role, status=status))
        db.session.commit()
        return user

    def group(self, org: Organization, name: str, leaders=(), active=True) -> SmallGroup:
        group = SmallGroup(organization_id=org.id, name=name, active=active)
        group.leaders = list(leaders)
        db.session.add(group)
        db.session.commit()
        return group

    def person(self, org: Organization, name: str, group: SmallGroup | None = None, active=True) -> Person:
        person = Person(organization_id=org.id, name=name, group_id=group.id if group else None, active=active)
        db.session.add(person)
        db.session.commit()
        return person

    def schedule(self, org: Organization, weekday=3, start="19:00", timezone="America/Chicago",
                 active=True) -> AttendanceSchedule:
        schedule = AttendanceSchedule(organization_id=org.id, weekday=weekday, start_time_local=start,
                                      timezone=timezone, active=active)
        db.session.add(schedule)
        db.session.commit()
        return schedule

    def event(self, org: Organization, event_date_local="2026-10-21", opened_at=None, status="open",
              schedule: AttendanceSchedule | None = None) -> AttendanceEvent:
        event = AttendanceEvent(
            organization_id=org.id,
            schedule_id=schedule.id if schedule else None,
            event_date_local=event_date_local,
            status=status,
            opened_at=opened_at or datetime(2026, 10, 22, 0, 5),
            created_by_system=schedule is not None,
        )
        db.session.add(event)
        db.session.commit()
        return event

    def caller(self, user: User, org: Organization) -> Caller:
        membership = OrgMembership.query.filter_by(organization_id=org.id, user_id=user.id).first()
        return Caller(
            user_id=user.id,
            email=user.email,
            name=user.name,
            organization_id=org.id,
            role=membership.role,
            status=membership.status,
        )

    def login(self, client, user: User, org: Organization) -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user.id
            sess["org_id"] = org.id


@pytest.fixture
def make(app):
    return Factory()

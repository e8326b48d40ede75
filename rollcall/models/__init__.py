# Import all models here so they're registered with SQLAlchemy
from rollcall.models.organization import Organization
from rollcall.models.user import User, OrgMembership
from rollcall.models.small_group import SmallGroup, small_group_leaders
from rollcall.models.person import Person
from rollcall.models.schedule import AttendanceSchedule
from rollcall.models.event import AttendanceEvent
from rollcall.models.record import AttendanceRecord
from rollcall.models.guest import AttendanceGuest
from rollcall.models.notification import Notification
from rollcall.models.email_log import EmailLog

__all__ = [
    'Organization', 'User', 'OrgMembership', 'SmallGroup', 'small_group_leaders', 'Person',
    'AttendanceSchedule', 'AttendanceEvent', 'AttendanceRecord', 'AttendanceGuest',
    'Notification', 'EmailLog',
]

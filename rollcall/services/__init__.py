# Business logic services
from rollcall.services.email_service import email_service
from rollcall.services.scheduler import open_due_events
from rollcall.services.notifications import dispatch_event_opened
from rollcall.services.checkin import build_view, save_records, add_guest

__all__ = [
    'email_service',
    'open_due_events',
    'dispatch_event_opened',
    'build_view',
    'save_records',
    'add_guest',
]

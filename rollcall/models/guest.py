from rollcall import db
from rollcall.timezones import utc_now


class AttendanceGuest(db.Model):
    """Non-roster attendee logged against an event."""
    __tablename__ = 'attendance_guests'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('attendance_events.id', ondelete='CASCADE'), nullable=False, index=True)
    group_id = db.Column(db.Integer, db.ForeignKey('small_groups.id'), nullable=True)
    guest_name = db.Column(db.String(120), nullable=False)
    note = db.Column(db.String(500), nullable=True)
    added_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'group_id': self.group_id,
            'guest_name': self.guest_name,
            'note': self.note or '',
            'added_by': self.added_by_user_id,
            'created_at': self.created_at.isoformat() + 'Z' if self.created_at else None,
        }

    def __repr__(self):
        return f'<AttendanceGuest {self.guest_name} event={self.event_id}>'

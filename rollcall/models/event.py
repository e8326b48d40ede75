from rollcall import db
from rollcall.timezones import utc_now


class AttendanceEvent(db.Model):
    """One concrete check-in session."""
    __tablename__ = 'attendance_events'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organizations.id'), nullable=False, index=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey('attendance_schedules.id'), nullable=True)  # NULL for manual events
    event_date_local = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD in the schedule's timezone
    starts_at = db.Column(db.DateTime, nullable=True)  # UTC
    status = db.Column(db.String(20), nullable=False, default='open')
    opened_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    created_by_system = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utc_now)

    # Relationships
    records = db.relationship('AttendanceRecord', backref='event', lazy='dynamic',
                              cascade='all, delete-orphan')
    guests = db.relationship('AttendanceGuest', backref='event', lazy='dynamic',
                             cascade='all, delete-orphan')

    # One event per schedule per local date
    __table_args__ = (
        db.UniqueConstraint('schedule_id', 'event_date_local', name='unique_schedule_event_date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organization_id': self.organization_id,
            'schedule_id': self.schedule_id,
            'event_date_local': self.event_date_local,
            'starts_at_utc': self.starts_at.isoformat() + 'Z' if self.starts_at else None,
            'status': self.status,
            'opened_at': self.opened_at.isoformat() + 'Z' if self.opened_at else None,
            'created_by_system': self.created_by_system,
        }

    def __repr__(self):
        return f'<AttendanceEvent {self.event_date_local} schedule={self.schedule_id}>'

from rollcall import db
from rollcall.timezones import utc_now


class AttendanceSchedule(db.Model):
    """Recurring weekly rule for opening a check-in session."""
    __tablename__ = 'attendance_schedules'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organizations.id'), nullable=False, index=True)
    weekday = db.Column(db.Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time_local = db.Column(db.String(8), nullable=False)  # HH:MM or HH:MM:SS
    timezone = db.Column(db.String(64), nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    events = db.relationship('AttendanceEvent', backref='schedule', lazy='dynamic')

    __table_args__ = (
        db.CheckConstraint('weekday >= 0 AND weekday <= 6', name='check_schedule_weekday'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organization_id': self.organization_id,
            'weekday': self.weekday,
            'start_time_local': self.start_time_local,
            'timezone': self.timezone,
            'active': self.active,
        }

    def __repr__(self):
        return f'<AttendanceSchedule org={self.organization_id} weekday={self.weekday} {self.start_time_local}>'

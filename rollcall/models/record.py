from rollcall import db
from rollcall.timezones import utc_now


class AttendanceRecord(db.Model):
    """One person's presence mark for one event."""
    __tablename__ = 'attendance_records'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('attendance_events.id', ondelete='CASCADE'), nullable=False)
    person_id = db.Column(db.Integer, db.ForeignKey('people.id'), nullable=False)
    present = db.Column(db.Boolean, nullable=False, default=False)
    note = db.Column(db.String(500), nullable=True)
    marked_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    marked_at = db.Column(db.DateTime, default=utc_now)

    person = db.relationship('Person')

    # Unique constraint: one record per person per event
    __table_args__ = (
        db.UniqueConstraint('event_id', 'person_id', name='unique_attendance_record'),
    )

    def __repr__(self):
        return f'<AttendanceRecord event={self.event_id} person={self.person_id} present={self.present}>'

from rollcall import db
from rollcall.timezones import utc_now


class EmailLog(db.Model):
    """Track all sent emails."""
    __tablename__ = 'email_logs'

    id = db.Column(db.Integer, primary_key=True)
    email_type = db.Column(db.String(50), nullable=False)  # attendance_open
    recipient_email = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(255), nullable=False)

    # Link to event if applicable
    event_id = db.Column(db.Integer, db.ForeignKey('attendance_events.id', ondelete='SET NULL'), nullable=True)

    # Brevo tracking
    brevo_message_id = db.Column(db.String(100), nullable=True)

    # Status tracking
    status = db.Column(db.String(20), default='pending')  # pending, sent, failed, dry_run
    error_message = db.Column(db.Text, nullable=True)

    # Timestamps
    sent_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f'<EmailLog {self.email_type} to {self.recipient_email}>'

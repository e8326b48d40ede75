from rollcall import db
from rollcall.timezones import utc_now


class Notification(db.Model):
    """In-app alert for a single user."""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organizations.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(50), nullable=False)  # attendance_open
    title = db.Column(db.String(200), nullable=False)
    body = db.Column(db.Text, nullable=True)
    action_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now)
    read_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.Index('ix_notifications_org_user', 'organization_id', 'user_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'body': self.body,
            'action_url': self.action_url,
            'created_at': self.created_at.isoformat() + 'Z' if self.created_at else None,
            'read_at': self.read_at.isoformat() + 'Z' if self.read_at else None,
        }

    def __repr__(self):
        return f'<Notification {self.type} to user={self.user_id}>'

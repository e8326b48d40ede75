from rollcall import db
from rollcall.timezones import utc_now


class Organization(db.Model):
    """A tenant running its own recurring meetings."""
    __tablename__ = 'organizations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(64), unique=True, nullable=False)
    timezone = db.Column(db.String(64), nullable=False, default='America/Chicago')
    # {module: {role: level}} layered over the default permission table
    permission_overrides = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    # Relationships
    memberships = db.relationship('OrgMembership', backref='organization', lazy='dynamic',
                                  cascade='all, delete-orphan')
    groups = db.relationship('SmallGroup', backref='organization', lazy='dynamic')
    schedules = db.relationship('AttendanceSchedule', backref='organization', lazy='dynamic')

    def __repr__(self):
        return f'<Organization {self.slug}>'

from rollcall import db
from rollcall.timezones import utc_now


class User(db.Model):
    """A person who can sign in (leader, admin, etc)."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)

    memberships = db.relationship('OrgMembership', backref='user', lazy='dynamic')

    def __repr__(self):
        return f'<User {self.email}>'


class OrgMembership(db.Model):
    """A user's role inside one organization."""
    __tablename__ = 'org_memberships'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organizations.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='pending')  # pending, approved, leader, admin, viewer, demo
    status = db.Column(db.String(20), nullable=False, default='pending')  # pending, approved, suspended
    joined_at = db.Column(db.DateTime, default=utc_now)

    __table_args__ = (
        db.UniqueConstraint('organization_id', 'user_id', name='unique_org_membership'),
    )

    def __repr__(self):
        return f'<OrgMembership org={self.organization_id} user={self.user_id} role={self.role}>'

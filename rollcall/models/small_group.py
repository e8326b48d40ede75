from rollcall import db
from rollcall.timezones import utc_now


small_group_leaders = db.Table(
    'small_group_leaders',
    db.Column('group_id', db.Integer, db.ForeignKey('small_groups.id'), primary_key=True),
    db.Column('user_id', db.Integer, db.ForeignKey('users.id'), primary_key=True),
)


class SmallGroup(db.Model):
    """Scoping unit for roster visibility and attendance notifications."""
    __tablename__ = 'small_groups'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organizations.id'), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    sk = db.Column(db.String(20), nullable=False, default='hs')  # track: hs, ms
    section = db.Column(db.String(20), nullable=False, default='core')  # core, loose, fringe
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    # Relationships
    leaders = db.relationship('User', secondary=small_group_leaders, lazy='subquery',
                              backref=db.backref('led_groups', lazy='dynamic'))
    people = db.relationship('Person', backref='group', lazy='dynamic')

    def __repr__(self):
        return f'<SmallGroup {self.name}>'

from flask_login import UserMixin

from signup import db
from signup.services.games.clock import local_now


def _now():
    # Every stored timestamp is naive service-zone time
    return local_now()


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    # Stable subject identifier issued by the identity provider
    id = db.Column(db.String(255), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=True)
    first_name = db.Column(db.String(255), nullable=True)
    last_name = db.Column(db.String(255), nullable=True)
    profile_image_url = db.Column(db.String(1024), nullable=True)
    created_at = db.Column(db.DateTime, default=_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=_now, nullable=False)

    registrations = db.relationship('PlayerRegistration', back_populates='user', passive_deletes=True)

    @property
    def display_name(self):
        full = ' '.join(p for p in (self.first_name, self.last_name) if p)
        return full or self.email or self.id

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'profile_image_url': self.profile_image_url,
            'display_name': self.display_name,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class WeeklyGame(db.Model):
    __tablename__ = 'weekly_games'
    id = db.Column(db.Integer, primary_key=True)
    game_date = db.Column(db.DateTime, nullable=False, index=True)
    # Sunday opening the game's week; one game per week
    week_start = db.Column(db.Date, nullable=False, unique=True)
    is_frozen = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=_now, nullable=False)

    registrations = db.relationship(
        'PlayerRegistration',
        back_populates='game',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'game_date': _iso(self.game_date),
            'week_start': self.week_start.isoformat() if self.week_start else None,
            'is_frozen': bool(self.is_frozen),
            'created_at': _iso(self.created_at),
        }


class PlayerRegistration(db.Model):
    __tablename__ = 'player_registrations'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'game_id', name='uq_player_registrations_user_game'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    game_id = db.Column(db.Integer, db.ForeignKey('weekly_games.id', ondelete='CASCADE'), nullable=False, index=True)
    registered_at = db.Column(db.DateTime, default=_now, nullable=False)

    user = db.relationship('User', back_populates='registrations')
    game = db.relationship('WeeklyGame', back_populates='registrations')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'game_id': self.game_id,
            'registered_at': _iso(self.registered_at),
        }


def _iso(value):
    return value.isoformat() if value else None

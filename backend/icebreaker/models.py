from icebreaker import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo so every column stays naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class Admin(UserMixin, db.Model):
    __tablename__ = 'admin'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not password or not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class GameRoom(db.Model):
    __tablename__ = 'game_room'
    __table_args__ = (
        # Codes are only reserved while the room is active
        db.Index(
            'uq_game_room_active_code', 'code', unique=True,
            postgresql_where=db.text('is_active'),
            sqlite_where=db.text('is_active = 1'),
        ),
    )
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    total_participants = db.Column(db.Integer, nullable=False, default=12)
    team_config = db.Column(db.JSON, nullable=True)  # {"team label": [seat, ...]}
    partner_config = db.Column(db.JSON, nullable=True)  # {"seat": partner seat}
    users = db.relationship('User', back_populates='game_room', lazy='dynamic')
    sessions = db.relationship('GameSession', back_populates='game_room', lazy='dynamic')

    def is_open(self, now=None):
        return bool(self.is_active) and self.expires_at > (now or utcnow())

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
            'expires_at': _iso(self.expires_at),
            'total_participants': self.total_participants,
            'team_config': self.team_config or {},
            'partner_config': self.partner_config or {},
        }


class User(db.Model):
    """A named participant occupying one seat of one room."""
    __tablename__ = 'user'
    __table_args__ = (
        db.UniqueConstraint('game_room_id', 'seat_number', name='uq_user_room_seat'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_room_id = db.Column(db.Integer, db.ForeignKey('game_room.id'), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    seat_number = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    game_room = db.relationship('GameRoom', back_populates='users')

    def to_dict(self):
        return {
            'id': self.id,
            'game_room_id': self.game_room_id,
            'name': self.name,
            'seat_number': self.seat_number,
        }


class GameSession(db.Model):
    """Pairing of two participants for one round of questions.

    The pair is stored normalised (user1_id < user2_id), so a lookup for
    (A, B) and (B, A) hits the same row.
    """
    __tablename__ = 'game_session'
    __table_args__ = (
        db.CheckConstraint('user1_id < user2_id', name='ck_game_session_pair_order'),
        # One open session per pair; finished ones may be followed by a new round
        db.Index(
            'uq_game_session_open_pair', 'game_room_id', 'user1_id', 'user2_id', unique=True,
            postgresql_where=db.text('NOT is_complete'),
            sqlite_where=db.text('is_complete = 0'),
        ),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_room_id = db.Column(db.Integer, db.ForeignKey('game_room.id'), nullable=False, index=True)
    user1_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    user2_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    is_complete = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    game_room = db.relationship('GameRoom', back_populates='sessions')
    user1 = db.relationship('User', foreign_keys=[user1_id])
    user2 = db.relationship('User', foreign_keys=[user2_id])
    answers = db.relationship('Answer', back_populates='game_session', lazy='dynamic')

    def has_participant(self, user_id):
        return user_id in (self.user1_id, self.user2_id)

    def partner_of(self, user_id):
        return self.user2_id if user_id == self.user1_id else self.user1_id

    def to_dict(self):
        return {
            'id': self.id,
            'game_room_id': self.game_room_id,
            'user1_id': self.user1_id,
            'user2_id': self.user2_id,
            'is_complete': self.is_complete,
            'created_at': _iso(self.created_at),
        }


class Answer(db.Model):
    __tablename__ = 'answer'
    __table_args__ = (
        db.UniqueConstraint('game_session_id', 'user_id', 'question_number', name='uq_answer_session_user_question'),
        db.CheckConstraint('question_number >= 1', name='ck_answer_question_number'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    question_number = db.Column(db.Integer, nullable=False)
    my_answer = db.Column(db.Text, nullable=False)
    partner_guess = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    game_session = db.relationship('GameSession', back_populates='answers')

    def to_dict(self):
        return {
            'id': self.id,
            'game_session_id': self.game_session_id,
            'user_id': self.user_id,
            'question_number': self.question_number,
            'my_answer': self.my_answer,
            'partner_guess': self.partner_guess,
        }

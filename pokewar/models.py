from sqlalchemy import text
from pokewar.app import db
from pokewar.services.storage import create_id
from pokewar.time_utils import utcnow_naive, isoformat_or_none

REQUEST_STATUSES = ('pending', 'accepted', 'declined')
AUTH_PROVIDERS = ('email', 'google')


def friend_pair_key(first_id, second_id):
    """Direction-free key for a pair of trainers."""
    low, high = sorted([str(first_id), str(second_id)])
    return f'{low}:{high}'


# Every collection keeps an integer ``seq`` primary key so listings come back
# in insertion order; ``id`` is the opaque identifier the API exposes.

class User(db.Model):
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    name = db.Column(db.String(120), default='')
    email = db.Column(db.String(254), unique=True, nullable=False)
    provider = db.Column(db.String(20), nullable=False, default='email')
    password_hash = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'email': self.email,
            'provider': self.provider,
            'createdAt': isoformat_or_none(self.created_at),
        }


class FriendRequest(db.Model):
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    from_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    to_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    pair_key = db.Column(db.String(140), nullable=False)
    status = db.Column(db.String(20), default='pending')  # pending, accepted, declined
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    __table_args__ = (
        db.Index('ix_friend_request_pair', 'from_id', 'to_id'),
        # Declined requests drop out so the pair can try again.
        db.Index(
            'uq_friend_request_open_pair', 'pair_key', unique=True,
            sqlite_where=text("status != 'declined'"),
            postgresql_where=text("status != 'declined'"),
        ),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.pair_key and self.from_id and self.to_id:
            self.pair_key = friend_pair_key(self.from_id, self.to_id)

    def to_dict(self):
        return {
            'id': self.id, 'fromId': self.from_id, 'toId': self.to_id,
            'status': self.status,
            'createdAt': isoformat_or_none(self.created_at),
        }


class Server(db.Model):
    """A private two-trainer room for arranging duels."""
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    name = db.Column(db.String(120), nullable=False)
    owner_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    member_count = db.Column(db.Integer, nullable=False, default=0)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    members = db.relationship('ServerMember', backref='server', lazy='joined',
                              order_by='ServerMember.seq',
                              cascade='all, delete-orphan')

    __mapper_args__ = {'version_id_col': version}

    MAX_MEMBERS = 2

    @property
    def member_ids(self):
        return [member.user_id for member in self.members]

    def has_member(self, user_id):
        return user_id in self.member_ids

    @property
    def is_full(self):
        return len(self.members) >= self.MAX_MEMBERS

    def add_member(self, user_id):
        """Join ``user_id`` to the room; bumps ``version`` via ``member_count``."""
        if self.has_member(user_id):
            return False
        self.members.append(ServerMember(user_id=user_id))
        self.member_count = len(self.members)
        return True

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'ownerId': self.owner_id,
            'memberIds': self.member_ids,
            'createdAt': isoformat_or_none(self.created_at),
        }


class ServerMember(db.Model):
    """A trainer who belongs to a server."""
    seq = db.Column(db.Integer, primary_key=True)
    server_id = db.Column(db.String(64), db.ForeignKey('server.id'), nullable=False)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    joined_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    __table_args__ = (
        db.UniqueConstraint('server_id', 'user_id', name='uq_server_member_server_user'),
        db.Index('ix_server_member_user', 'user_id'),
    )


class ServerInvite(db.Model):
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    server_id = db.Column(db.String(64), db.ForeignKey('server.id'), nullable=False)
    from_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    to_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.String(20), default='pending')  # pending, accepted, declined
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    __table_args__ = (
        db.Index('ix_server_invite_server_to_status', 'server_id', 'to_id', 'status'),
        db.Index(
            'uq_server_invite_pending', 'server_id', 'to_id', unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def to_dict(self):
        return {
            'id': self.id, 'serverId': self.server_id,
            'fromId': self.from_id, 'toId': self.to_id,
            'status': self.status,
            'createdAt': isoformat_or_none(self.created_at),
        }


class ServerSelection(db.Model):
    """The champion a trainer has locked in for the next duel in a room."""
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    server_id = db.Column(db.String(64), db.ForeignKey('server.id'), nullable=False)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    pokemon_id = db.Column(db.String(32), nullable=False)
    pokemon_name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    __table_args__ = (
        db.UniqueConstraint('server_id', 'user_id', name='uq_server_selection_server_user'),
    )

    def to_dict(self):
        return {
            'id': self.id, 'serverId': self.server_id, 'userId': self.user_id,
            'pokemonId': self.pokemon_id, 'pokemonName': self.pokemon_name,
            'createdAt': isoformat_or_none(self.created_at),
        }


class MatchRecord(db.Model):
    seq = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(64), unique=True, nullable=False, default=create_id)
    server_id = db.Column(db.String(64), db.ForeignKey('server.id'), nullable=False)
    player1_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    player2_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    player1_pokemon_id = db.Column(db.String(32), nullable=False)
    player1_pokemon_name = db.Column(db.String(120), nullable=False)
    player2_pokemon_id = db.Column(db.String(32), nullable=False)
    player2_pokemon_name = db.Column(db.String(120), nullable=False)
    winner_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    __table_args__ = (
        db.Index('ix_match_record_server', 'server_id'),
    )

    def to_dict(self):
        return {
            'id': self.id, 'serverId': self.server_id,
            'player1Id': self.player1_id, 'player2Id': self.player2_id,
            'player1PokemonId': self.player1_pokemon_id,
            'player1PokemonName': self.player1_pokemon_name,
            'player2PokemonId': self.player2_pokemon_id,
            'player2PokemonName': self.player2_pokemon_name,
            'winnerId': self.winner_id,
            'createdAt': isoformat_or_none(self.created_at),
        }


class StorageEntry(db.Model):
    """JSON document stored under a string key (session pointers, caches)."""
    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime, default=lambda: utcnow_naive(),
                           onupdate=lambda: utcnow_naive())

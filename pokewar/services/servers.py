"""Two-trainer private rooms and the invites that fill them."""
from sqlalchemy.exc import IntegrityError
from pokewar.app import db
from pokewar.errors import (
    AlreadyMember, AlreadyPending, AlreadyResolved, Forbidden, NotFound,
    ServerFull, ValidationFailed,
)
from pokewar.models import Server, ServerInvite, ServerMember
from pokewar.services.identity import get_user

DEFAULT_SERVER_NAME = 'Private Arena'
RESPONSE_STATUSES = {'accepted', 'declined'}


def create_server(name, owner_id):
    if not get_user(owner_id):
        raise NotFound('Trainer not found.')
    server = Server(
        name=str(name or '').strip()[:120] or DEFAULT_SERVER_NAME,
        owner_id=owner_id,
    )
    server.add_member(owner_id)
    db.session.add(server)
    db.session.commit()
    return server


def get_server(server_id):
    if not server_id:
        return None
    return Server.query.filter_by(id=str(server_id)).first()


def get_servers_for_user(user_id):
    return Server.query.join(
        ServerMember, ServerMember.server_id == Server.id,
    ).filter(
        ServerMember.user_id == user_id,
    ).order_by(Server.seq.asc()).all()


def get_opponent_id(server, user_id):
    """The other member of the room, or None while the owner waits alone."""
    others = [member_id for member_id in server.member_ids if member_id != user_id]
    return others[0] if others else None


def _pending_invite(server_id, to_id):
    return ServerInvite.query.filter_by(
        server_id=server_id, to_id=to_id, status='pending',
    ).first()


def invite_to_server(server_id, from_id, to_id):
    server = get_server(server_id)
    if not server:
        raise NotFound('Server not found.')
    # A full room rejects every invite, whoever sends it.
    if server.is_full:
        raise ServerFull()
    if server.owner_id != from_id:
        raise Forbidden('Only the server owner can send invites.')
    if server.has_member(to_id):
        raise AlreadyMember()
    if not get_user(to_id):
        raise NotFound('Trainer not found.')
    if _pending_invite(server.id, to_id):
        raise AlreadyPending('An invite is already pending for this trainer.')

    invite = ServerInvite(
        server_id=server.id, from_id=from_id, to_id=to_id, status='pending',
    )
    db.session.add(invite)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request inserted the same pending invite first.
        db.session.rollback()
        raise AlreadyPending('An invite is already pending for this trainer.')
    return invite


def respond_to_server_invite(invite_id, status, responder_id=None):
    """Resolve a pending invite; accepting also joins the room."""
    new_status = str(status or '').strip().lower()
    if new_status not in RESPONSE_STATUSES:
        raise ValidationFailed('Status must be "accepted" or "declined".')

    invite = ServerInvite.query.filter_by(id=str(invite_id or '')).first()
    if not invite:
        raise NotFound('Invite not found.')
    if responder_id is not None and invite.to_id != responder_id:
        raise NotFound('Invite not found.')
    if invite.status != 'pending':
        raise AlreadyResolved()

    if new_status == 'accepted':
        server = get_server(invite.server_id)
        if not server:
            raise NotFound('Server not found.')
        if not server.has_member(invite.to_id):
            if server.is_full:
                raise ServerFull()
            server.add_member(invite.to_id)

    invite.status = new_status
    db.session.commit()
    return invite


def get_server_invites_for_user(user_id):
    return ServerInvite.query.filter_by(to_id=user_id).order_by(ServerInvite.seq.asc()).all()

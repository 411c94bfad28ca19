"""Friend requests and the friend lists derived from them."""
from sqlalchemy.exc import IntegrityError
from pokewar.app import db
from pokewar.errors import (
    AlreadyFriends, AlreadyPending, AlreadyResolved, NotFound, SelfRequest,
    ValidationFailed,
)
from pokewar.models import FriendRequest, User, friend_pair_key
from pokewar.services.identity import find_user_by_email, get_user

RESPONSE_STATUSES = {'accepted', 'declined'}


def _parse_response_status(status):
    cleaned = str(status or '').strip().lower()
    if cleaned not in RESPONSE_STATUSES:
        raise ValidationFailed('Status must be "accepted" or "declined".')
    return cleaned


def _open_request_between(first_id, second_id):
    return FriendRequest.query.filter(
        FriendRequest.pair_key == friend_pair_key(first_id, second_id),
        FriendRequest.status != 'declined',
    ).order_by(FriendRequest.seq.asc()).first()


def _raise_for_open_request(existing):
    if existing and existing.status == 'accepted':
        raise AlreadyFriends()
    if existing:
        raise AlreadyPending()


def send_friend_request(from_id, to_email):
    if not get_user(from_id):
        raise NotFound('Trainer not found.')
    recipient = find_user_by_email(to_email)
    if not recipient:
        raise NotFound('No trainer was found with that email.')
    if recipient.id == from_id:
        raise SelfRequest()
    _raise_for_open_request(_open_request_between(from_id, recipient.id))

    friend_request = FriendRequest(from_id=from_id, to_id=recipient.id, status='pending')
    db.session.add(friend_request)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost the race to a request for the same pair in either direction.
        db.session.rollback()
        _raise_for_open_request(_open_request_between(from_id, recipient.id))
        raise AlreadyPending()
    return friend_request


def respond_to_friend_request(request_id, status, responder_id=None):
    """Resolve a pending request.

    ``responder_id``, when given, must be the recipient; anyone else gets the
    same NotFound as an unknown id.
    """
    new_status = _parse_response_status(status)
    friend_request = FriendRequest.query.filter_by(id=str(request_id or '')).first()
    if not friend_request:
        raise NotFound('Friend request not found.')
    if responder_id is not None and friend_request.to_id != responder_id:
        raise NotFound('Friend request not found.')
    if friend_request.status != 'pending':
        raise AlreadyResolved()

    friend_request.status = new_status
    db.session.commit()
    return friend_request


def get_friend_requests_for_user(user_id):
    return FriendRequest.query.filter(
        (FriendRequest.from_id == user_id) | (FriendRequest.to_id == user_id)
    ).order_by(FriendRequest.seq.asc()).all()


def get_friends_for_user(user_id):
    accepted = FriendRequest.query.filter(
        ((FriendRequest.from_id == user_id) | (FriendRequest.to_id == user_id))
        & (FriendRequest.status == 'accepted')
    ).order_by(FriendRequest.seq.asc()).all()

    friend_ids = []
    for friend_request in accepted:
        other_id = friend_request.to_id if friend_request.from_id == user_id else friend_request.from_id
        if other_id not in friend_ids:
            friend_ids.append(other_id)
    if not friend_ids:
        return []

    users_by_id = {
        user.id: user
        for user in User.query.filter(User.id.in_(friend_ids)).all()
    }
    return [users_by_id[fid] for fid in friend_ids if fid in users_by_id]

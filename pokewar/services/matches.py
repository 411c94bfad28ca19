"""Champion picks per room and coin-flip match resolution."""
import random

from pokewar.app import db
from pokewar.errors import (
    InsufficientSelections, NotFound, SameUser, SelectionsConsumed, ValidationFailed,
)
from pokewar.models import MatchRecord, ServerSelection
from pokewar.services.servers import get_server
from pokewar.time_utils import utcnow_naive


def set_server_selection(server_id, user_id, pokemon_id, pokemon_name):
    """Record a trainer's pick, replacing any earlier pick in the same room.

    Membership is not checked here; the API layer does that.
    """
    pokemon_id = str(pokemon_id or '').strip()
    pokemon_name = str(pokemon_name or '').strip()
    if not pokemon_id or not pokemon_name:
        raise ValidationFailed('Pokemon id and name are required.')

    selection = ServerSelection.query.filter_by(server_id=server_id, user_id=user_id).first()
    if selection:
        selection.pokemon_id = pokemon_id
        selection.pokemon_name = pokemon_name
        selection.created_at = utcnow_naive()
    else:
        selection = ServerSelection(
            server_id=server_id, user_id=user_id,
            pokemon_id=pokemon_id, pokemon_name=pokemon_name,
        )
        db.session.add(selection)
    db.session.commit()
    return selection


def get_selections_for_server(server_id):
    return ServerSelection.query.filter_by(
        server_id=server_id,
    ).order_by(ServerSelection.seq.asc()).all()


def clear_selections_for_server(server_id, commit=True):
    ServerSelection.query.filter_by(server_id=server_id).delete(synchronize_session=False)
    if commit:
        db.session.commit()


def pick_winner(first, second, rng=None):
    """Coin flip between two selections; each side wins half the time."""
    rng = rng or random
    return first if rng.random() > 0.5 else second


def create_match_from_selections(server_id, rng=None):
    server = get_server(server_id)
    if not server:
        raise NotFound('Server not found.')
    selections = get_selections_for_server(server.id)
    if len(selections) < 2:
        raise InsufficientSelections()

    first, second = selections[:2]
    if first.user_id == second.user_id:
        raise SameUser()

    winner = pick_winner(first, second, rng)

    # Claim both picks before recording the duel; a concurrent resolver that
    # already consumed them leaves fewer than two rows to delete.
    claimed = ServerSelection.query.filter(
        ServerSelection.id.in_([first.id, second.id]),
    ).delete(synchronize_session=False)
    if claimed != 2:
        db.session.rollback()
        raise SelectionsConsumed()

    match = MatchRecord(
        server_id=server.id,
        player1_id=first.user_id,
        player2_id=second.user_id,
        player1_pokemon_id=first.pokemon_id,
        player1_pokemon_name=first.pokemon_name,
        player2_pokemon_id=second.pokemon_id,
        player2_pokemon_name=second.pokemon_name,
        winner_id=winner.user_id,
    )
    db.session.add(match)
    clear_selections_for_server(server.id, commit=False)
    db.session.commit()
    return match


def get_matches_for_user(user_id):
    return MatchRecord.query.filter(
        (MatchRecord.player1_id == user_id) | (MatchRecord.player2_id == user_id)
    ).order_by(MatchRecord.seq.asc()).all()


def get_match_history_for_server(server_id):
    return MatchRecord.query.filter_by(
        server_id=server_id,
    ).order_by(MatchRecord.seq.asc()).all()

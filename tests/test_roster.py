"""Tests for the PokeAPI roster provider."""
import json

import pytest
import requests

from pokewar.errors import RosterUnavailable
from pokewar.services import roster, storage

_PAGE = {
    'count': 1302,
    'results': [
        {'name': 'bulbasaur', 'url': 'https://pokeapi.co/api/v2/pokemon/1/'},
        {'name': 'pikachu', 'url': 'https://pokeapi.co/api/v2/pokemon/25/'},
    ],
}


class _FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


@pytest.fixture
def pokeapi(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=0):
        calls.append((url, params))
        return _FakeResponse(200, _PAGE)

    monkeypatch.setattr('pokewar.services.roster.requests.get', fake_get)
    return calls


@pytest.fixture
def pokeapi_down(monkeypatch):
    def fake_get(url, params=None, timeout=0):
        raise requests.ConnectionError('offline')

    monkeypatch.setattr('pokewar.services.roster.requests.get', fake_get)


def test_pokemon_id_and_image_helpers():
    assert roster.pokemon_id_from_url('https://pokeapi.co/api/v2/pokemon/25/') == '25'
    assert roster.pokemon_id_from_url('https://pokeapi.co/api/v2/pokemon/151') == '151'
    assert roster.pokemon_id_from_url('not a url') is None
    assert roster.pokemon_image_url(25).endswith('/official-artwork/25.png')


def test_fetch_pokemons_caches_pages(app, pokeapi):
    first = roster.fetch_pokemons(limit=2, offset=0)
    second = roster.fetch_pokemons(limit=2, offset=0)
    assert [p['name'] for p in first] == ['bulbasaur', 'pikachu']
    assert second == first
    assert len(pokeapi) == 1
    assert pokeapi[0] == ('https://pokeapi.co/api/v2/pokemon', {'limit': 2, 'offset': 0})
    assert storage.read('pokewar_roster_v1:2:0', None) == first


def test_refresh_falls_back_to_cache_when_api_is_down(app, pokeapi_down):
    storage.write('pokewar_roster_v1:2:0', _PAGE['results'])
    assert roster.fetch_pokemons(limit=2, offset=0, refresh=True) == _PAGE['results']


def test_fetch_pokemons_without_cache_raises(app, pokeapi_down):
    with pytest.raises(RosterUnavailable):
        roster.fetch_pokemons(limit=2)


def test_roster_api(client, pokeapi):
    res = client.get('/api/pokemon?limit=2&q=pika')
    assert res.status_code == 200
    assert json.loads(res.data)['pokemon'] == [{
        'id': '25',
        'name': 'pikachu',
        'url': 'https://pokeapi.co/api/v2/pokemon/25/',
        'image': roster.pokemon_image_url('25'),
    }]


def test_roster_api_validates_paging(client, pokeapi):
    assert client.get('/api/pokemon?limit=0').status_code == 400
    assert client.get('/api/pokemon?offset=-1').status_code == 400


def test_roster_api_reports_outage(client, pokeapi_down):
    res = client.get('/api/pokemon?limit=5')
    assert res.status_code == 502
    assert 'roster' in json.loads(res.data)['error']

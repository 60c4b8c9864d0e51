import re

import pytest

from impostor.game.errors import ValidationError
from impostor.realtime.session import SessionClient
from impostor.utils.nickname import FileNicknameCache, MemoryNicknameCache


def named(client, name):
    return [payload for ev, payload in client.received if ev == name]


def test_scenario_a_create_room(make_client, store):
    ann = make_client()
    ack = ann.create_room('Ann', {'maxPlayers': 5})
    assert ack['ok'] is True

    created = named(ann, 'roomCreated')
    assert len(created) == 1
    code = created[0]['roomCode']
    assert re.fullmatch(r'[A-Z0-9]{6}', code)
    assert created[0]['players'] == [{'id': ann.player_id, 'nickname': 'Ann', 'isHost': True}]
    assert store.get_room(code).settings.max_players == 5


def test_scenario_b_duplicate_nickname(make_client, store):
    ann = make_client()
    ann.create_room('Ann')
    code = ann.room_code

    other = make_client()
    ack = other.join_room(code, 'Ann')
    assert ack == {'ok': False, 'error': 'nickname_taken'}
    assert named(other, 'joinError')[0]['error'] == 'nickname_taken'
    assert named(other, 'roomJoined') == []
    assert other.room_code is None
    assert len(store.get_room(code).players) == 1


def test_join_unknown_room_reports_error(make_client):
    bob = make_client()
    bob.join_room('QWERTY', 'Bob')
    assert named(bob, 'joinError') == [{'error': 'room_not_found', 'message': 'Room does not exist'}]


def test_failed_join_keeps_current_room(make_client, store):
    ann = make_client()
    ann.create_room('Ann')
    bob = make_client()
    bob.join_room(ann.room_code, 'Bob')
    code = bob.room_code

    ack = bob.join_room('ZZZZZZ', 'Bob')
    assert ack == {'ok': False, 'error': 'room_not_found'}
    assert named(bob, 'joinError')[0]['error'] == 'room_not_found'
    assert bob.room_code == code
    assert bob.channel.active
    assert [p.id for p in store.get_room(code).players] == [ann.player_id, bob.player_id]

    ack = bob.emit('createRoom', {'nickname': 'B'})
    assert ack['ok'] is False
    assert bob.room_code == code
    assert len(store) == 1


def test_synchronous_validation(make_client, store):
    bob = make_client()
    with pytest.raises(ValidationError):
        bob.create_room('B')
    with pytest.raises(ValidationError):
        bob.join_room('AB', 'Bob')
    assert len(store) == 0
    assert bob.received == []


def test_joined_client_converges_on_tick(make_client):
    ann, bob = make_client(), make_client()
    ann.create_room('Ann', {'minPlayers': 2})
    bob.join_room(ann.room_code.lower(), 'Bob')

    joined = named(bob, 'roomJoined')[0]
    assert joined['success'] is True
    assert [p['nickname'] for p in joined['players']] == ['Ann', 'Bob']

    ann.channel.tick()
    assert [p['nickname'] for p in named(ann, 'playersUpdate')[-1]['players']] == ['Ann', 'Bob']


def test_full_game_through_sessions(make_client, store):
    clients = [make_client() for _ in range(3)]
    host = clients[0]
    host.create_room('Ann')
    for c, name in zip(clients[1:], ['Bob', 'Cid']):
        c.join_room(host.room_code, name)

    assert clients[1].emit('startGame')['error'] == 'only_host'
    assert named(clients[1], 'commandError')[-1]['command'] == 'startGame'

    assert host.emit('startGame')['ok'] is True
    for c in clients:
        c.acknowledge_role()
        c.channel.tick()
        assert named(c, 'gameStateUpdate')[-1]['gameState']['phase'] == 'hints'

    room = store.get_room(host.room_code)
    by_id = {c.player_id: c for c in clients}
    for _ in range(3):
        current = room.players[room.game_state.current_turn].id
        assert by_id[current].emit('submitHint', {'text': 'clue'})['ok'] is True
    assert room.game_state.phase == 'roundEnd'

    host.emit('roundAction', {'phase': 'voting'})
    for c in clients:
        c.emit('submitVote', {'nickname': 'Bob'})
    assert room.game_state.phase == 'results'

    clients[2].channel.tick()
    state = named(clients[2], 'gameStateUpdate')[-1]['gameState']
    assert state['results']['counts'] == {'Ann': 0, 'Bob': 3, 'Cid': 0}

    host.emit('roundAction', {'phase': 'lobby'})
    assert room.game_state.phase == 'lobby'


def test_scenario_e_last_player_leaves(make_client, store):
    ann, watcher = make_client(), make_client()
    ann.create_room('Ann')
    code = ann.room_code

    watcher.channel.subscribe(code)
    watcher.channel.tick()
    assert named(watcher, 'playersUpdate')

    ann.leave_room()
    assert code not in store
    assert ann.channel.active is False

    watcher.channel.tick()
    assert named(watcher, 'roomClosed') == [{'roomCode': code}]


def test_host_leave_transfers_host(make_client, store):
    ann, bob, cid = make_client(), make_client(), make_client()
    ann.create_room('Ann')
    bob.join_room(ann.room_code, 'Bob')
    cid.join_room(ann.room_code, 'Cid')
    code = ann.room_code

    ann.disconnect()
    room = store.get_room(code)
    assert room.host == bob.player_id
    assert ann.emit('startGame') == {'ok': False, 'error': 'disconnected'}


def test_update_settings_host_only(make_client, store):
    ann, bob = make_client(), make_client()
    ann.create_room('Ann')
    bob.join_room(ann.room_code, 'Bob')

    bob.emit('updateSettings', {'settings': {'impostorCount': 2}})
    assert named(bob, 'commandError')[-1]['error'] == 'only_host'

    ann.emit('updateSettings', {'settings': {'impostorCount': 2, 'customWords': ['lighthouse']}})
    settings = store.get_room(ann.room_code).settings
    assert settings.impostor_count == 2
    assert settings.custom_words == ['lighthouse']

    ann.emit('updateSettings', {'settings': {'maxPlayers': 1, 'minPlayers': 1}})
    assert named(ann, 'commandError')[-1]['error'] == 'invalid_payload'


def test_commands_without_room(make_client):
    bob = make_client()
    assert bob.emit('submitHint', {'text': 'x'}) == {'ok': False, 'error': 'not_in_room'}
    assert bob.emit('nonsense') == {'ok': False, 'error': 'unknown_command'}


def test_nickname_cache_roundtrip(store, machine, tmp_path):
    path = tmp_path / 'settings.json'
    first = SessionClient(store, machine, nickname_cache=FileNicknameCache(path))
    assert first.nickname == ''
    first.create_room('Ann')
    assert path.exists()

    second = SessionClient(store, machine, nickname_cache=FileNicknameCache(path))
    assert second.nickname == 'Ann'


def test_memory_cache_only_saves_changes(store, machine):
    cache = MemoryNicknameCache('Ann')
    client = SessionClient(store, machine, nickname_cache=cache)
    assert client.nickname == 'Ann'
    client.nickname = 'Bob'
    assert cache.load() == 'Bob'


class DeferredSocketIO:
    def __init__(self):
        self.tasks = []
        self.sleeps = []

    def start_background_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        self.sleeps.append(seconds)


def test_commands_apply_after_latency(store, machine):
    sio = DeferredSocketIO()
    client = SessionClient(store, machine, socketio=sio, latency=0.1)
    created = []
    client.on('roomCreated', created.append)

    ack = client.create_room('Ann')
    assert ack == {'ok': True, 'queued': True}
    assert created == [] and len(store) == 0

    target, args = sio.tasks.pop(0)
    target(*args)
    assert sio.sleeps == [0.1]
    assert len(created) == 1
    assert created[0]['roomCode'] in store

import threading
import time
import unittest
from unittest.mock import MagicMock

import requests
from socketio.exceptions import ConnectionError as SocketConnectionError

from wordle_party.client.factory import build_remote_session
from wordle_party.client.http_store import HttpGameStore
from wordle_party.client.socketio_transport import SocketIOTransport
from wordle_party.errors import (
    ConnectionDegradedError, GameNotFoundError, GameOverError, PersistenceError, ValidationError
)
from wordle_party.models.events import GameStatusChanged, GuessAdded
from wordle_party.config import TestingConfig
from wordle_party.models.game import GameStatus
from wordle_party.services.session import ConnectionStatus


def make_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


GAME = {
    'id': 'game-1', 'word': 'CRANE', 'max_attempts': 6, 'is_multiplayer': True,
    'status': 'active', 'language': 'en', 'creator_id': 'alice', 'winner_id': None,
    'created_at': '2026-01-01T10:00:00+00:00', 'updated_at': '2026-01-01T10:00:00+00:00',
}

GUESS = {'id': 'g1', 'game_id': 'game-1', 'player_id': 'bob', 'guess': 'HOUSE', 'created_at': None}


class TestHttpGameStore(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock()
        self.session.headers = {}
        self.store = HttpGameStore('http://server:5000/', timeout=2, session=self.session)

    def respond(self, status_code: int, body) -> None:
        self.session.request.return_value = make_response(status_code, body)

    def test_create_game(self) -> None:
        self.respond(201, {'success': True, 'game': GAME})

        game = self.store.create_game('CRANE', 6, True, 'alice', 'en')

        self.assertEqual(game.id, 'game-1')
        self.assertIs(game.status, GameStatus.ACTIVE)
        self.session.request.assert_called_once_with(
            'POST', 'http://server:5000/api/games',
            json={'word': 'CRANE', 'max_attempts': 6, 'is_multiplayer': True,
                  'creator_id': 'alice', 'language': 'en'},
            timeout=2
        )

    def test_insert_guess(self) -> None:
        self.respond(201, {'success': True, 'guess': GUESS})
        self.assertEqual(self.store.insert_guess('game-1', 'bob', 'HOUSE').id, 'g1')

    def test_snapshot(self) -> None:
        self.respond(200, {'success': True, 'snapshot': {'game': GAME, 'players': [], 'guesses': [GUESS]}})
        snapshot = self.store.get_snapshot('game-1')
        self.assertEqual(snapshot.guesses[0].guess, 'HOUSE')

    def test_list_active_games(self) -> None:
        self.respond(200, {'success': True, 'games': [GAME]})

        games = self.store.list_active_games('alice')

        self.assertEqual([game.id for game in games], ['game-1'])
        self.session.request.assert_called_once_with(
            'GET', 'http://server:5000/api/players/alice/games', json=None, timeout=2
        )

    def test_get_game_reads_snapshot(self) -> None:
        self.respond(200, {'success': True, 'snapshot': {'game': GAME, 'players': [], 'guesses': []}})
        self.assertEqual(self.store.get_game('game-1').word, 'CRANE')

    def test_validation_error(self) -> None:
        self.respond(400, {'success': False, 'error': 'Word not in word list', 'reason': 'not_in_word_list'})
        with self.assertRaises(ValidationError) as ctx:
            self.store.insert_guess('game-1', 'bob', 'ZZZZZ')
        self.assertEqual(ctx.exception.reason, 'not_in_word_list')

    def test_not_found(self) -> None:
        self.respond(404, {'success': False, 'error': 'Game not found'})
        with self.assertRaises(GameNotFoundError):
            self.store.get_snapshot('missing')

    def test_game_over(self) -> None:
        self.respond(409, {'success': False, 'error': 'Game is already over'})
        with self.assertRaises(GameOverError):
            self.store.insert_guess('game-1', 'bob', 'CRANE')

    def test_server_error(self) -> None:
        self.respond(500, {'success': False, 'error': 'boom'})
        with self.assertRaises(PersistenceError) as ctx:
            self.store.update_game_status('game-1', GameStatus.COMPLETED, 'bob')
        self.assertEqual(ctx.exception.status_code, 500)

    def test_non_json_error(self) -> None:
        response = make_response(502, None)
        response.json.side_effect = ValueError("no json")
        self.session.request.return_value = response
        with self.assertRaises(PersistenceError):
            self.store.get_player('alice')

    def test_network_failure(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(PersistenceError):
            self.store.create_player('Alice')


class FakeSocketClient:
    """Stands in for socketio.Client, recording calls."""

    def __init__(self, ack=None, connect_error=None, **kwargs):
        self.kwargs = kwargs
        self.handlers = {}
        self.ack = ack if ack is not None else {'success': True}
        self.connect_error = connect_error
        self.connected = False
        self.emitted = []
        self.calls = []

    def on(self, event, handler):
        self.handlers[event] = handler

    def connect(self, url, wait_timeout=None):
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    def call(self, event, data, timeout=None):
        self.calls.append((event, data))
        return self.ack

    def emit(self, event, data):
        self.emitted.append((event, data))

    def disconnect(self):
        was_connected = self.connected
        self.connected = False
        if was_connected:
            self.handlers['disconnect']()


class TestSocketIOTransport(unittest.TestCase):
    def setUp(self) -> None:
        self.clients = []
        self.events = []
        self.errors = []

    def transport(self, **client_options) -> SocketIOTransport:
        def factory(**kwargs):
            client = FakeSocketClient(**client_options, **kwargs)
            self.clients.append(client)
            return client

        return SocketIOTransport('http://server:5000', timeout=1, client_factory=factory)

    def subscribe(self, transport: SocketIOTransport, on_event=None):
        subscription = transport.subscribe('game-1', on_event or self.events.append, self.errors.append)
        self.addCleanup(subscription.close)
        return subscription

    def wait_until(self, predicate, timeout: float = 2.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                self.fail("Timed out waiting for delivery")
            time.sleep(0.01)

    def test_subscribe_opens_fresh_channel(self) -> None:
        transport = self.transport()
        first = self.subscribe(transport)
        second = self.subscribe(transport)

        self.assertNotEqual(first.channel_id, second.channel_id)
        self.assertEqual(len(self.clients), 2)
        self.assertFalse(self.clients[0].kwargs['reconnection'])
        event, data = self.clients[0].calls[0]
        self.assertEqual(event, 'subscribe_game')
        self.assertEqual(data, {'game_id': 'game-1', 'channel_id': first.channel_id})

    def test_events_are_decoded(self) -> None:
        self.subscribe(self.transport())
        handlers = self.clients[0].handlers

        handlers['guess_added']({'game_id': 'game-1', 'guess': GUESS})
        handlers['guess_added']({'game_id': 'game-1'})
        handlers['game_status_changed']({'game_id': 'game-1', 'status': 'completed', 'winner_id': 'bob'})

        self.wait_until(lambda: len(self.events) == 2)
        self.assertIsInstance(self.events[0], GuessAdded)
        self.assertIsInstance(self.events[1], GameStatusChanged)

    def test_events_delivered_one_at_a_time_in_arrival_order(self) -> None:
        delivered = []
        running = []
        overlaps = []
        lock = threading.Lock()

        def slow_handler(event):
            with lock:
                running.append(event)
                if len(running) > 1:
                    overlaps.append(event)
            time.sleep(0.02)
            with lock:
                running.remove(event)
                delivered.append(event.guess.id)

        self.subscribe(self.transport(), on_event=slow_handler)
        handler = self.clients[0].handlers['guess_added']

        # The socket client runs each handler on its own thread
        ids = [f"g{index}" for index in range(5)]
        for guess_id in ids:
            thread = threading.Thread(target=handler, args=({'game_id': 'game-1', 'guess': dict(GUESS, id=guess_id)},))
            thread.start()
            thread.join()

        self.wait_until(lambda: len(delivered) == len(ids))
        self.assertEqual(delivered, ids)
        self.assertEqual(overlaps, [])

    def test_no_delivery_after_close(self) -> None:
        subscription = self.subscribe(self.transport())
        handler = self.clients[0].handlers['guess_added']

        subscription.close()
        handler({'game_id': 'game-1', 'guess': GUESS})
        time.sleep(0.05)

        self.assertEqual(self.events, [])

    def test_close_is_quiet_and_idempotent(self) -> None:
        subscription = self.subscribe(self.transport())

        subscription.close()
        subscription.close()

        client = self.clients[0]
        self.assertFalse(subscription.active)
        self.assertFalse(client.connected)
        self.assertEqual([event for event, _ in client.emitted], ['unsubscribe_game'])
        self.assertEqual(self.errors, [])

    def test_unexpected_disconnect_reports_error(self) -> None:
        self.subscribe(self.transport())
        self.clients[0].disconnect()

        self.wait_until(lambda: len(self.errors) == 1)
        self.assertIsInstance(self.errors[0], ConnectionDegradedError)

    def test_refused_subscription(self) -> None:
        transport = self.transport(ack={'success': False, 'error': 'Game not found'})

        with self.assertRaises(ConnectionDegradedError):
            transport.subscribe('game-1', self.events.append, self.errors.append)
        self.assertFalse(self.clients[0].connected)
        self.assertEqual(self.errors, [])

    def test_connection_failure(self) -> None:
        transport = self.transport(connect_error=SocketConnectionError("refused"))
        with self.assertRaises(ConnectionDegradedError):
            transport.subscribe('game-1', self.events.append, self.errors.append)


class TestBuildRemoteSession(unittest.TestCase):
    def test_wires_server_collaborators(self) -> None:
        session = build_remote_session(TestingConfig, identity_file="player.json")

        self.assertIsInstance(session.transport, SocketIOTransport)
        self.assertTrue(session.service.persistence.is_remote)
        self.assertIsInstance(session.context.store, HttpGameStore)
        self.assertEqual(session.context.store.base_url, TestingConfig.SERVER_URL)
        self.assertEqual(str(session.context.identity_file), "player.json")
        self.assertIs(session.connection_status, ConnectionStatus.IDLE)


if __name__ == "__main__":
    unittest.main()

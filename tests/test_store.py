import unittest
from unittest.mock import patch

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from wordle_party.errors import GameNotFoundError, GameOverError, PersistenceError, ValidationError
from wordle_party.models.events import GameStatusChanged, GuessAdded, PlayerJoined
from wordle_party.models.game import GameStatus
from wordle_party.services.mongo_store import MongoGameStore
from wordle_party.services.store import InMemoryGameStore, initialize_game_store
from wordle_party.config import TestingConfig


class TestInMemoryGameStore(unittest.TestCase):
    def setUp(self) -> None:
        self.events = []
        self.store = InMemoryGameStore(publisher=self.events.append)
        self.alice = self.store.create_player("Alice")
        self.bob = self.store.create_player("Bob")
        self.game = self.store.create_game("CRANE", 2, True, self.alice.id)
        self.store.add_player(self.game.id, self.alice.id)
        self.store.add_player(self.game.id, self.bob.id)
        del self.events[:]

    def test_create_player_random_nickname(self) -> None:
        player = self.store.create_player()
        self.assertTrue(player.nickname.startswith("Player"))
        self.assertTrue(player.session_id)

    def test_update_nickname(self) -> None:
        self.assertEqual(self.store.update_nickname(self.alice.id, " Ally ").nickname, "Ally")
        self.assertEqual(self.store.get_player(self.alice.id).nickname, "Ally")

    def test_update_nickname_rejects_blank(self) -> None:
        with self.assertRaises(ValidationError):
            self.store.update_nickname(self.alice.id, "   ")

    def test_unknown_player(self) -> None:
        with self.assertRaises(GameNotFoundError):
            self.store.get_player("nobody")

    def test_add_player_is_idempotent(self) -> None:
        carol = self.store.create_player("Carol")
        first = self.store.add_player(self.game.id, carol.id)
        second = self.store.add_player(self.game.id, carol.id)

        self.assertEqual(first, second)
        self.assertEqual(first.nickname, "Carol")
        self.assertEqual(len(self.store.get_snapshot(self.game.id).players), 3)
        self.assertEqual([type(event) for event in self.events], [PlayerJoined])

    def test_insert_guess_publishes(self) -> None:
        guess = self.store.insert_guess(self.game.id, self.bob.id, "HOUSE")
        self.assertEqual(self.events, [GuessAdded(self.game.id, guess)])

    def test_non_member_cannot_guess(self) -> None:
        carol = self.store.create_player("Carol")

        for player_id in (carol.id, "nobody-at-all"):
            with self.assertRaises(ValidationError) as ctx:
                self.store.insert_guess(self.game.id, player_id, "CRANE")
            self.assertEqual(ctx.exception.reason, "not_a_member")

        self.assertEqual(self.store.get_snapshot(self.game.id).guesses, [])
        self.assertEqual(self.events, [])

    def test_attempt_limit_per_player(self) -> None:
        self.store.insert_guess(self.game.id, self.bob.id, "HOUSE")
        self.store.insert_guess(self.game.id, self.bob.id, "WATER")

        with self.assertRaises(GameOverError):
            self.store.insert_guess(self.game.id, self.bob.id, "APPLE")

        # Other players keep their own budget
        self.store.insert_guess(self.game.id, self.alice.id, "APPLE")
        self.assertEqual(len(self.store.get_snapshot(self.game.id).guesses), 3)

    def test_no_guesses_after_completion(self) -> None:
        self.store.update_game_status(self.game.id, GameStatus.COMPLETED, self.alice.id)
        with self.assertRaises(GameOverError):
            self.store.insert_guess(self.game.id, self.bob.id, "CRANE")

    def test_first_completion_wins(self) -> None:
        first = self.store.update_game_status(self.game.id, GameStatus.COMPLETED, self.alice.id)
        second = self.store.update_game_status(self.game.id, GameStatus.COMPLETED, self.bob.id)

        self.assertEqual(first.winner_id, self.alice.id)
        self.assertEqual(second.winner_id, self.alice.id)
        status_events = [event for event in self.events if isinstance(event, GameStatusChanged)]
        self.assertEqual(len(status_events), 1)

    def test_unknown_game(self) -> None:
        with self.assertRaises(GameNotFoundError):
            self.store.get_snapshot("missing")
        with self.assertRaises(GameNotFoundError):
            self.store.get_game("missing")
        with self.assertRaises(GameNotFoundError):
            self.store.insert_guess("missing", self.bob.id, "CRANE")

    def test_get_game(self) -> None:
        self.assertEqual(self.store.get_game(self.game.id), self.game)

    def test_snapshot_in_creation_order(self) -> None:
        ids = [self.store.insert_guess(self.game.id, player.id, "HOUSE").id
               for player in (self.alice, self.bob)]
        snapshot = self.store.get_snapshot(self.game.id)
        self.assertEqual([guess.id for guess in snapshot.guesses], ids)

    def test_list_active_games(self) -> None:
        second = self.store.create_game("WATER", 6, True, self.bob.id)
        self.store.add_player(second.id, self.bob.id)
        finished = self.store.create_game("HOUSE", 6, False, self.bob.id)
        self.store.add_player(finished.id, self.bob.id)
        self.store.update_game_status(finished.id, GameStatus.COMPLETED, None)
        self.store.create_game("APPLE", 6, True, self.alice.id)

        self.assertEqual([game.id for game in self.store.list_active_games(self.bob.id)],
                         [second.id, self.game.id])
        self.assertEqual([game.id for game in self.store.list_active_games(self.alice.id)], [self.game.id])
        self.assertEqual(self.store.list_active_games("nobody"), [])

    def test_publisher_failure_does_not_fail_write(self) -> None:
        def broken(event):
            raise RuntimeError("socket gone")

        self.store.set_publisher(broken)
        guess = self.store.insert_guess(self.game.id, self.bob.id, "HOUSE")
        self.assertIn(guess, self.store.get_snapshot(self.game.id).guesses)


class TestInitializeGameStore(unittest.TestCase):
    def test_memory_backend(self) -> None:
        self.assertIsInstance(initialize_game_store(TestingConfig), InMemoryGameStore)

    def test_mongo_backend_requires_uri(self) -> None:
        class MongoConfig(TestingConfig):
            STORE_BACKEND = 'mongo'
            MONGO_URI = None

        with self.assertRaises(PersistenceError):
            initialize_game_store(MongoConfig)

    def test_unknown_backend(self) -> None:
        class BadConfig(TestingConfig):
            STORE_BACKEND = 'sqlite'

        with self.assertRaises(ValueError):
            initialize_game_store(BadConfig)


def game_doc(**overrides):
    doc = {
        "_id": "game-1",
        "word": "CRANE",
        "max_attempts": 2,
        "is_multiplayer": True,
        "status": "active",
        "language": "en",
        "creator_id": "alice",
        "winner_id": None,
        "attempts": {},
    }
    doc.update(overrides)
    return doc


class TestMongoGameStore(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch('wordle_party.services.mongo_store.MongoClient')
        self.mongo_client = patcher.start()
        self.addCleanup(patcher.stop)

        self.events = []
        self.store = MongoGameStore("mongodb://localhost", "test_db", publisher=self.events.append)
        self.games = self.store.games_collection
        self.guesses = self.store.guesses_collection
        self.game_players = self.store.game_players_collection

    def test_connection_failure(self) -> None:
        self.mongo_client.return_value.admin.command.side_effect = PyMongoError("unreachable")
        with self.assertRaises(PersistenceError):
            MongoGameStore("mongodb://localhost", "test_db")

    def test_insert_guess_reserves_attempt(self) -> None:
        self.games.find_one.return_value = game_doc()
        self.games.find_one_and_update.return_value = game_doc()

        guess = self.store.insert_guess("game-1", "bob", "HOUSE")

        query, update = self.games.find_one_and_update.call_args[0]
        self.assertEqual(query["attempts.bob"], {"$not": {"$gte": 2}})
        self.assertEqual(update, {"$inc": {"attempts.bob": 1}})
        self.guesses.insert_one.assert_called_once()
        self.assertEqual(self.events, [GuessAdded("game-1", guess)])

    def test_insert_guess_releases_attempt_when_write_fails(self) -> None:
        self.games.find_one.return_value = game_doc()
        self.games.find_one_and_update.return_value = game_doc()
        self.guesses.insert_one.side_effect = PyMongoError("write concern timeout")

        with self.assertRaises(PersistenceError):
            self.store.insert_guess("game-1", "bob", "HOUSE")

        self.games.update_one.assert_called_once_with({"_id": "game-1"}, {"$inc": {"attempts.bob": -1}})
        self.assertEqual(self.events, [])

    def test_insert_guess_rejects_non_member(self) -> None:
        self.games.find_one.return_value = game_doc()
        self.game_players.find_one.return_value = None

        with self.assertRaises(ValidationError) as ctx:
            self.store.insert_guess("game-1", "nobody", "CRANE")

        self.assertEqual(ctx.exception.reason, "not_a_member")
        self.games.find_one_and_update.assert_not_called()
        self.guesses.insert_one.assert_not_called()

    def test_list_active_games(self) -> None:
        self.game_players.find.return_value = [{"game_id": "game-2"}, {"game_id": "game-1"}]
        cursor = self.games.find.return_value
        cursor.sort.return_value = [game_doc(_id="game-2"), game_doc()]

        games = self.store.list_active_games("bob")

        self.assertEqual([game.id for game in games], ["game-2", "game-1"])
        self.game_players.find.assert_called_once_with({"player_id": "bob"})
        query = self.games.find.call_args[0][0]
        self.assertEqual(query, {"_id": {"$in": ["game-2", "game-1"]}, "status": {"$ne": "completed"}})
        cursor.sort.assert_called_once_with("created_at", DESCENDING)

    def test_list_active_games_without_memberships(self) -> None:
        self.game_players.find.return_value = []
        self.assertEqual(self.store.list_active_games("bob"), [])
        self.games.find.assert_not_called()

    def test_insert_guess_rejected_when_completed(self) -> None:
        self.games.find_one.return_value = game_doc(status="completed", winner_id="alice")
        self.games.find_one_and_update.return_value = None

        with self.assertRaises(GameOverError):
            self.store.insert_guess("game-1", "bob", "CRANE")
        self.guesses.insert_one.assert_not_called()
        self.assertEqual(self.events, [])

    def test_insert_guess_rejected_when_out_of_attempts(self) -> None:
        self.games.find_one.return_value = game_doc(attempts={"bob": 2})
        self.games.find_one_and_update.return_value = None

        with self.assertRaises(GameOverError):
            self.store.insert_guess("game-1", "bob", "CRANE")

    def test_completion_keeps_first_winner(self) -> None:
        self.games.find_one_and_update.return_value = None
        self.games.find_one.return_value = game_doc(status="completed", winner_id="alice")

        game = self.store.update_game_status("game-1", GameStatus.COMPLETED, "bob")

        self.assertEqual(game.winner_id, "alice")
        self.assertEqual(self.events, [])

    def test_completion_publishes_status(self) -> None:
        self.games.find_one_and_update.return_value = game_doc(status="completed", winner_id="bob")

        game = self.store.update_game_status("game-1", GameStatus.COMPLETED, "bob")

        self.assertTrue(game.is_completed)
        self.assertEqual(self.events[0].winner_id, "bob")

    def test_database_errors_become_persistence_errors(self) -> None:
        self.games.find_one.side_effect = PyMongoError("down")
        with self.assertRaises(PersistenceError):
            self.store.insert_guess("game-1", "bob", "HOUSE")
        with self.assertRaises(PersistenceError):
            self.store.get_snapshot("game-1")

    def test_unknown_game(self) -> None:
        self.games.find_one.return_value = None
        with self.assertRaises(GameNotFoundError):
            self.store.get_snapshot("missing")


if __name__ == "__main__":
    unittest.main()

import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock

from wordle_party.errors import PersistenceError
from wordle_party.services.player_service import SessionContext
from wordle_party.services.store import GameStore, InMemoryGameStore


class TestSessionContext(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.identity_file = os.path.join(tmp.name, "nested", "player.json")
        self.store = InMemoryGameStore()

    def test_creates_player_once(self) -> None:
        context = SessionContext(self.store, self.identity_file)

        player = context.get_or_create_local_player()

        self.assertIs(context.get_or_create_local_player(), player)
        self.assertTrue(player.nickname.startswith("Player"))
        self.assertEqual(self.store.get_player(player.id), player)

    def test_identity_persisted_between_contexts(self) -> None:
        first = SessionContext(self.store, self.identity_file).get_or_create_local_player()
        second = SessionContext(self.store, self.identity_file).get_or_create_local_player()

        self.assertEqual(second.id, first.id)
        with open(self.identity_file, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["id"], first.id)

    def test_unknown_stored_player_is_replaced(self) -> None:
        stale = SessionContext(self.store, self.identity_file).get_or_create_local_player()

        fresh = SessionContext(InMemoryGameStore(), self.identity_file).get_or_create_local_player()

        self.assertNotEqual(fresh.id, stale.id)

    def test_offline_keeps_stored_identity(self) -> None:
        stored = SessionContext(self.store, self.identity_file).get_or_create_local_player()

        offline = MagicMock(spec=GameStore)
        offline.get_player.side_effect = PersistenceError("unreachable")
        player = SessionContext(offline, self.identity_file).get_or_create_local_player()

        self.assertEqual(player.id, stored.id)
        offline.create_player.assert_not_called()

    def test_corrupt_identity_file(self) -> None:
        os.makedirs(os.path.dirname(self.identity_file))
        with open(self.identity_file, "w", encoding="utf-8") as f:
            f.write("{not json")

        player = SessionContext(self.store, self.identity_file).get_or_create_local_player()
        self.assertEqual(self.store.get_player(player.id), player)

    def test_update_nickname(self) -> None:
        context = SessionContext(self.store, self.identity_file)
        player = context.get_or_create_local_player()

        updated = context.update_nickname("  Wordsmith ")

        self.assertEqual(updated.id, player.id)
        self.assertEqual(updated.nickname, "Wordsmith")
        self.assertEqual(context.player, updated)
        reloaded = SessionContext(self.store, self.identity_file).get_or_create_local_player()
        self.assertEqual(reloaded.nickname, "Wordsmith")

    def test_blank_nickname_ignored(self) -> None:
        context = SessionContext(self.store, self.identity_file)
        player = context.get_or_create_local_player()

        self.assertIsNone(context.update_nickname("   "))
        self.assertEqual(context.get_or_create_local_player(), player)

    def test_refresh_reloads_from_store(self) -> None:
        context = SessionContext(self.store)
        player = context.get_or_create_local_player()
        self.store.update_nickname(player.id, "Renamed")

        self.assertEqual(context.player.nickname, player.nickname)
        self.assertEqual(context.refresh().nickname, "Renamed")

    def test_without_identity_file(self) -> None:
        context = SessionContext(self.store)
        self.assertEqual(context.get_or_create_local_player(), context.player)


if __name__ == "__main__":
    unittest.main()

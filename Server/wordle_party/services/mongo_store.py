"""
MongoDB Game Store

Record store backed by MongoDB. Attempt budgets and game completion are
enforced with conditional updates so concurrent writers cannot exceed the
attempt limit or overwrite the first winner.
"""

from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..errors import GameNotFoundError, GameOverError, PersistenceError, ValidationError
from ..models.events import GameStatusChanged, GuessAdded, PlayerJoined
from ..models.game import Game, GamePlayer, GameSnapshot, GameStatus, Guess
from ..models.player import Player
from ..utils.game_logger import game_logger
from ..utils.helpers import new_id, utc_now
from .store import GameStore, Publisher, random_nickname


def _game_from_doc(doc: Dict[str, Any]) -> Game:
    return Game(
        id=doc["_id"],
        word=doc["word"],
        max_attempts=doc["max_attempts"],
        is_multiplayer=doc["is_multiplayer"],
        status=GameStatus(doc["status"]),
        language=doc.get("language", "en"),
        creator_id=doc.get("creator_id"),
        winner_id=doc.get("winner_id"),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at")
    )


def _player_from_doc(doc: Dict[str, Any]) -> Player:
    return Player(
        id=doc["_id"],
        nickname=doc["nickname"],
        session_id=doc.get("session_id", ""),
        created_at=doc.get("created_at")
    )


def _membership_from_doc(doc: Dict[str, Any]) -> GamePlayer:
    return GamePlayer(
        id=doc["_id"],
        game_id=doc["game_id"],
        player_id=doc["player_id"],
        nickname=doc.get("nickname", ""),
        joined_at=doc.get("joined_at")
    )


def _guess_from_doc(doc: Dict[str, Any]) -> Guess:
    return Guess(
        id=doc["_id"],
        game_id=doc["game_id"],
        player_id=doc["player_id"],
        guess=doc["guess"],
        created_at=doc.get("created_at")
    )


class MongoGameStore(GameStore):
    """
    Record store using one collection per record type:
    players, games, game_players and guesses.
    """

    def __init__(self, mongo_uri: str, db_name: str = "wordle_party", publisher: Optional[Publisher] = None):
        """
        Initialize the store with a MongoDB connection.

        Args:
            mongo_uri: MongoDB connection string
            db_name: Database holding the game collections
            publisher: Callback receiving change events after each write
        """
        super().__init__(publisher)
        self.mongo_uri = mongo_uri

        self.client = MongoClient(mongo_uri, server_api=ServerApi('1'), tz_aware=True)
        self.db = self.client[db_name]
        self.players_collection = self.db.players
        self.games_collection = self.db.games
        self.game_players_collection = self.db.game_players
        self.guesses_collection = self.db.guesses

        try:
            self.client.admin.command('ping')
            game_logger.logger.info("Successfully connected to MongoDB")

            # One membership per player and game; guesses read back in creation order
            self.game_players_collection.create_index(
                [("game_id", ASCENDING), ("player_id", ASCENDING)], unique=True
            )
            self.game_players_collection.create_index([("player_id", ASCENDING)])
            self.guesses_collection.create_index([("game_id", ASCENDING), ("created_at", ASCENDING)])
        except PyMongoError as e:
            game_logger.logger.error(f"MongoDB connection error: {e}")
            raise PersistenceError(f"MongoDB connection error: {e}")

    def _find_game(self, game_id: str) -> Game:
        doc = self.games_collection.find_one({"_id": game_id})
        if not doc:
            raise GameNotFoundError("Game not found")
        return _game_from_doc(doc)

    # Players

    def create_player(self, nickname: Optional[str] = None, session_id: Optional[str] = None) -> Player:
        player = Player(
            id=new_id(),
            nickname=(nickname or "").strip() or random_nickname(),
            session_id=session_id or new_id(),
            created_at=utc_now()
        )
        try:
            self.players_collection.insert_one({
                "_id": player.id,
                "nickname": player.nickname,
                "session_id": player.session_id,
                "created_at": player.created_at
            })
        except PyMongoError as e:
            raise PersistenceError(f"Failed to create player: {e}")
        return player

    def get_player(self, player_id: str) -> Player:
        try:
            doc = self.players_collection.find_one({"_id": player_id})
        except PyMongoError as e:
            raise PersistenceError(f"Failed to fetch player: {e}")
        if not doc:
            raise GameNotFoundError("Player not found")
        return _player_from_doc(doc)

    def update_nickname(self, player_id: str, nickname: str) -> Player:
        nickname = (nickname or "").strip()
        if not nickname:
            raise ValidationError("Nickname cannot be empty", reason="empty_nickname")
        try:
            doc = self.players_collection.find_one_and_update(
                {"_id": player_id},
                {"$set": {"nickname": nickname}},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to update nickname: {e}")
        if not doc:
            raise GameNotFoundError("Player not found")
        return _player_from_doc(doc)

    # Games

    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator_id: Optional[str] = None, language: str = "en") -> Game:
        now = utc_now()
        game = Game(
            id=new_id(),
            word=word,
            max_attempts=max_attempts,
            is_multiplayer=is_multiplayer,
            status=GameStatus.ACTIVE,
            language=language,
            creator_id=creator_id,
            created_at=now,
            updated_at=now
        )
        try:
            self.games_collection.insert_one({
                "_id": game.id,
                "word": game.word,
                "max_attempts": game.max_attempts,
                "is_multiplayer": game.is_multiplayer,
                "status": game.status.value,
                "language": game.language,
                "creator_id": game.creator_id,
                "winner_id": None,
                "attempts": {},
                "created_at": now,
                "updated_at": now
            })
        except PyMongoError as e:
            raise PersistenceError(f"Failed to create game: {e}")
        return game

    def add_player(self, game_id: str, player_id: str) -> GamePlayer:
        try:
            self._find_game(game_id)
            existing = self.game_players_collection.find_one({"game_id": game_id, "player_id": player_id})
            if existing:
                return _membership_from_doc(existing)

            player_doc = self.players_collection.find_one({"_id": player_id})
            membership = GamePlayer(
                id=new_id(),
                game_id=game_id,
                player_id=player_id,
                nickname=player_doc["nickname"] if player_doc else "",
                joined_at=utc_now()
            )
            try:
                self.game_players_collection.insert_one({
                    "_id": membership.id,
                    "game_id": game_id,
                    "player_id": player_id,
                    "nickname": membership.nickname,
                    "joined_at": membership.joined_at
                })
            except DuplicateKeyError:
                # Joined concurrently from another connection
                existing = self.game_players_collection.find_one({"game_id": game_id, "player_id": player_id})
                return _membership_from_doc(existing)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to add player: {e}")

        self._publish(PlayerJoined(game_id, membership))
        return membership

    def insert_guess(self, game_id: str, player_id: str, guess: str) -> Guess:
        attempts_field = f"attempts.{player_id}"
        try:
            game = self._find_game(game_id)
            if game.is_completed:
                raise GameOverError("Game is already over")
            if not self.game_players_collection.find_one({"game_id": game_id, "player_id": player_id}):
                raise ValidationError("Player is not a member of this game", reason="not_a_member")

            # Reserve one attempt slot atomically; fails once completed or exhausted
            reserved = self.games_collection.find_one_and_update(
                {
                    "_id": game_id,
                    "status": {"$ne": GameStatus.COMPLETED.value},
                    attempts_field: {"$not": {"$gte": game.max_attempts}}
                },
                {"$inc": {attempts_field: 1}}
            )
            if reserved is None:
                game = self._find_game(game_id)
                if game.is_completed:
                    raise GameOverError("Game is already over")
                raise GameOverError("No attempts left")

            record = Guess(
                id=new_id(),
                game_id=game_id,
                player_id=player_id,
                guess=guess,
                created_at=utc_now()
            )
            try:
                self.guesses_collection.insert_one({
                    "_id": record.id,
                    "game_id": game_id,
                    "player_id": player_id,
                    "guess": guess,
                    "created_at": record.created_at
                })
            except PyMongoError:
                self._release_attempt(game_id, attempts_field)
                raise
        except PyMongoError as e:
            raise PersistenceError(f"Failed to insert guess: {e}")

        self._publish(GuessAdded(game_id, record))
        return record

    def _release_attempt(self, game_id: str, attempts_field: str) -> None:
        """Give back a reserved attempt slot whose guess was never stored."""
        try:
            self.games_collection.update_one({"_id": game_id}, {"$inc": {attempts_field: -1}})
        except PyMongoError as e:
            game_logger.logger.error(f"Failed to release {attempts_field} on game {game_id}: {e}")

    def update_game_status(self, game_id: str, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        try:
            doc = self.games_collection.find_one_and_update(
                {"_id": game_id, "status": {"$ne": GameStatus.COMPLETED.value}},
                {"$set": {"status": status.value, "winner_id": winner_id, "updated_at": utc_now()}},
                return_document=ReturnDocument.AFTER
            )
            if doc is None:
                # Unknown game, or completed by an earlier writer
                return self._find_game(game_id)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to update game status: {e}")

        game = _game_from_doc(doc)
        self._publish(GameStatusChanged(game_id, game.status, game.winner_id, game.updated_at))
        return game

    def get_snapshot(self, game_id: str) -> GameSnapshot:
        try:
            game = self._find_game(game_id)
            players = [
                _membership_from_doc(doc)
                for doc in self.game_players_collection.find({"game_id": game_id}).sort("joined_at", ASCENDING)
            ]
            guesses = [
                _guess_from_doc(doc)
                for doc in self.guesses_collection.find({"game_id": game_id}).sort("created_at", ASCENDING)
            ]
        except PyMongoError as e:
            raise PersistenceError(f"Failed to fetch game snapshot: {e}")

        return GameSnapshot(game=game, players=players, guesses=guesses)

    def get_game(self, game_id: str) -> Game:
        try:
            return self._find_game(game_id)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to fetch game: {e}")

    def list_active_games(self, player_id: str) -> List[Game]:
        try:
            game_ids = [doc["game_id"] for doc in self.game_players_collection.find({"player_id": player_id})]
            if not game_ids:
                return []
            cursor = self.games_collection.find(
                {"_id": {"$in": game_ids}, "status": {"$ne": GameStatus.COMPLETED.value}}
            ).sort("created_at", DESCENDING)
            return [_game_from_doc(doc) for doc in cursor]
        except PyMongoError as e:
            raise PersistenceError(f"Failed to list active games: {e}")

"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.helpers import parse_iso, to_iso


class LetterState(Enum):
    """Outcome of scoring one letter position of a guess."""
    ABSENT = "absent"
    PRESENT = "present"
    CORRECT = "correct"

    @property
    def rank(self) -> int:
        """Strength ordering: absent < present < correct."""
        return _LETTER_RANK[self]


_LETTER_RANK = {
    LetterState.ABSENT: 0,
    LetterState.PRESENT: 1,
    LetterState.CORRECT: 2,
}


class GameStatus(Enum):
    """Lifecycle of a game. ``completed`` is terminal."""
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Game:
    """Game record as stored by the record store."""
    id: str
    word: str
    max_attempts: int
    is_multiplayer: bool
    status: GameStatus = GameStatus.ACTIVE
    language: str = "en"
    creator_id: Optional[str] = None
    winner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status is GameStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "max_attempts": self.max_attempts,
            "is_multiplayer": self.is_multiplayer,
            "status": self.status.value,
            "language": self.language,
            "creator_id": self.creator_id,
            "winner_id": self.winner_id,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        return cls(
            id=data["id"],
            word=data["word"],
            max_attempts=int(data["max_attempts"]),
            is_multiplayer=bool(data["is_multiplayer"]),
            status=GameStatus(data.get("status", GameStatus.ACTIVE.value)),
            language=data.get("language", "en"),
            creator_id=data.get("creator_id"),
            winner_id=data.get("winner_id"),
            created_at=parse_iso(data.get("created_at")),
            updated_at=parse_iso(data.get("updated_at")),
        )


@dataclass(frozen=True)
class Guess:
    """One submitted attempt. Immutable once created."""
    id: str
    game_id: str
    player_id: str
    guess: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "player_id": self.player_id,
            "guess": self.guess,
            "created_at": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Guess":
        return cls(
            id=data["id"],
            game_id=data["game_id"],
            player_id=data["player_id"],
            guess=data["guess"],
            created_at=parse_iso(data.get("created_at")),
        )


@dataclass(frozen=True)
class GamePlayer:
    """Membership of a player in a game. Never mutated, never deleted."""
    id: str
    game_id: str
    player_id: str
    nickname: str = ""
    joined_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "player_id": self.player_id,
            "nickname": self.nickname,
            "joined_at": to_iso(self.joined_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GamePlayer":
        return cls(
            id=data["id"],
            game_id=data["game_id"],
            player_id=data["player_id"],
            nickname=data.get("nickname") or "",
            joined_at=parse_iso(data.get("joined_at")),
        )


@dataclass(frozen=True)
class GameSnapshot:
    """Game with its members and guesses (creation order), fetched once at session start."""
    game: Game
    players: List[GamePlayer] = field(default_factory=list)
    guesses: List[Guess] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game.to_dict(),
            "players": [player.to_dict() for player in self.players],
            "guesses": [guess.to_dict() for guess in self.guesses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSnapshot":
        return cls(
            game=Game.from_dict(data["game"]),
            players=[GamePlayer.from_dict(item) for item in data.get("players", [])],
            guesses=[Guess.from_dict(item) for item in data.get("guesses", [])],
        )


@dataclass(frozen=True)
class GuessResult:
    """Outcome of an accepted guess submission."""
    guess: Guess
    evaluation: List[LetterState]
    status: GameStatus
    winner_id: Optional[str]
    attempts_used: int
    attempts_remaining: int

    @property
    def won(self) -> bool:
        return self.winner_id is not None and self.winner_id == self.guess.player_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guess": self.guess.to_dict(),
            "evaluation": [state.value for state in self.evaluation],
            "status": self.status.value,
            "winner_id": self.winner_id,
            "attempts_used": self.attempts_used,
            "attempts_remaining": self.attempts_remaining,
            "won": self.won,
        }

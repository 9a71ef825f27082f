"""
Remote Event Models

Tagged union of the change events carried by the per-game realtime stream.
Every event knows its wire name (``kind``) and its identity, which is what
reconciliation de-duplicates on.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Union

from .game import GamePlayer, GameStatus, Guess
from ..utils.helpers import parse_iso, to_iso


@dataclass(frozen=True)
class GuessAdded:
    game_id: str
    guess: Guess

    kind: ClassVar[str] = "guess_added"

    @property
    def identity(self) -> str:
        return self.guess.id

    def to_dict(self) -> Dict[str, Any]:
        return {"game_id": self.game_id, "guess": self.guess.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuessAdded":
        return cls(game_id=data["game_id"], guess=Guess.from_dict(data["guess"]))


@dataclass(frozen=True)
class PlayerJoined:
    game_id: str
    membership: GamePlayer

    kind: ClassVar[str] = "player_joined"

    @property
    def identity(self) -> str:
        return self.membership.id

    def to_dict(self) -> Dict[str, Any]:
        return {"game_id": self.game_id, "membership": self.membership.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerJoined":
        return cls(game_id=data["game_id"], membership=GamePlayer.from_dict(data["membership"]))


@dataclass(frozen=True)
class GameStatusChanged:
    game_id: str
    status: GameStatus
    winner_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    kind: ClassVar[str] = "game_status_changed"

    @property
    def identity(self) -> str:
        return f"{self.game_id}:{self.status.value}:{self.winner_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "status": self.status.value,
            "winner_id": self.winner_id,
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameStatusChanged":
        return cls(
            game_id=data["game_id"],
            status=GameStatus(data["status"]),
            winner_id=data.get("winner_id"),
            updated_at=parse_iso(data.get("updated_at")),
        )


RemoteEvent = Union[GuessAdded, PlayerJoined, GameStatusChanged]

EVENT_TYPES = {
    GuessAdded.kind: GuessAdded,
    PlayerJoined.kind: PlayerJoined,
    GameStatusChanged.kind: GameStatusChanged,
}


def event_from_dict(kind: str, payload: Dict[str, Any]) -> RemoteEvent:
    """Rebuild an event received from the wire."""
    if kind not in EVENT_TYPES:
        raise ValueError(f"Unknown event kind: {kind}")
    return EVENT_TYPES[kind].from_dict(payload)

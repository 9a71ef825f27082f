"""
Player Data Models

Contains player-related data structures.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..utils.helpers import parse_iso, to_iso


@dataclass(frozen=True)
class Player:
    """Player identity with a display nickname."""
    id: str
    nickname: str
    session_id: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nickname": self.nickname,
            "session_id": self.session_id,
            "created_at": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            id=data["id"],
            nickname=data["nickname"],
            session_id=data.get("session_id") or "",
            created_at=parse_iso(data.get("created_at")),
        )

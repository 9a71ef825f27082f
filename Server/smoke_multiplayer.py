"""
Smoke test for the multiplayer flow against a running server.

Usage:
  python main.py &
  SERVER_URL=http://127.0.0.1:5000 python smoke_multiplayer.py
"""

import os
import sys
import tempfile
import time

from wordle_party.client import build_remote_session
from wordle_party.config import Config


class SmokeFailure(RuntimeError):
    pass


def wait_for(predicate, description: str, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.05)
    raise SmokeFailure(f"Timed out waiting for {description}")


def main() -> int:
    try:
        with tempfile.TemporaryDirectory() as identity_dir:
            print(f"Starting multiplayer smoke test against {Config.SERVER_URL}...")
            with build_remote_session(Config, os.path.join(identity_dir, "host.json")) as host, \
                    build_remote_session(Config, os.path.join(identity_dir, "guest.json")) as guest:
                state = host.create_multiplayer(target_word="CRANE")
                game_id = state.game.id
                print(f"[ok] Game created ({game_id}), host connection: {host.connection_status.value}")

                guest.open(game_id)
                wait_for(lambda: len(host.game_state.players) == 2, "the guest to appear on the host")
                print("[ok] Guest joined and the host saw it")

                result = host.submit_guess("HOUSE")
                wait_for(lambda: guest.game_state.has_guess(result.guess.id), "the host guess to reach the guest")
                print(f"[ok] Host guess delivered ({[s.value for s in result.evaluation]})")

                result = guest.submit_guess("crane")
                if not result.won:
                    raise SmokeFailure("Guest should have won with the target word")
                wait_for(lambda: host.game_state.is_completed, "the host to see the game end")
                print(f"[ok] Game completed, winner {host.game_state.game.winner_id}")

        print("Smoke test finished successfully!")
        return 0
    except SmokeFailure as failure:
        print(f"[error] {failure}", file=sys.stderr)
    except Exception as exc:
        print(f"[unexpected error] {type(exc).__name__}: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

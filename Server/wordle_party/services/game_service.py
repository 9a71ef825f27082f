"""
Game Service

Contains the game state machine: game creation, membership, guess
submission, attempt budgets and win/loss determination. Where records are
kept is decided by the injected PersistenceMode, so solo and multiplayer
games run through the same rules.
"""

from dataclasses import replace
from typing import Dict, Optional, Tuple

from ..config.game_settings import DEFAULT_LANGUAGE, MAX_ATTEMPTS, SUPPORTED_LANGUAGES, get_random_word
from ..errors import CompletionPendingError, GameOverError, PersistenceError, ValidationError
from ..models.game import GameStatus, GuessResult
from ..models.player import Player
from ..utils.game_logger import game_logger
from .evaluator import evaluate_guess, is_winning_evaluation
from .persistence import PersistenceMode
from .reconciliation import LocalGameState, append_guess, append_player
from .validator import WordValidator


class GameService:
    """
    Core game service.

    This class handles:
    - Game creation with a secret target word per language
    - Idempotent membership for multiplayer games
    - Guess validation, evaluation and attempt accounting
    - The active -> completed transition (at most once)
    """

    def __init__(self, persistence: PersistenceMode, validators: Optional[Dict[str, WordValidator]] = None):
        self.persistence = persistence
        self._validators: Dict[str, WordValidator] = dict(validators or {})

    def validator_for(self, language: str) -> WordValidator:
        if language not in self._validators:
            self._validators[language] = WordValidator(language)
        return self._validators[language]

    def create_game(self,
                    creator: Player,
                    is_multiplayer: bool = False,
                    language: str = DEFAULT_LANGUAGE,
                    target_word: Optional[str] = None,
                    max_attempts: int = MAX_ATTEMPTS) -> LocalGameState:
        """
        Creates a new game and adds the creator as its first member.

        Args:
            creator: Player starting the game
            is_multiplayer: Whether other players may join
            language: Word list used for the target and for guess validation
            target_word: Fixed target (random word of the language when omitted)
            max_attempts: Attempt budget per player

        Returns:
            LocalGameState seen by the creator
        """
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Unsupported language: {language}", reason="unsupported_language")
        if max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1", reason="invalid_max_attempts")

        validator = self.validator_for(language)
        word = validator.check(target_word) if target_word is not None else get_random_word(language)

        game = self.persistence.create_game(word, max_attempts, is_multiplayer, creator, language)
        membership = self.persistence.add_player(game, creator)

        game_logger.log_game_event(
            game.id, 'game_created', creator.id,
            is_multiplayer=is_multiplayer, language=language, max_attempts=max_attempts
        )

        state = LocalGameState(game=game, viewer_id=creator.id)
        return append_player(state, membership)

    def load_game(self, game_id: str, viewer_id: Optional[str]) -> LocalGameState:
        """Fetch a game snapshot once and build the viewer's local state."""
        snapshot = self.persistence.load_snapshot(game_id)
        return self.settle_game(LocalGameState.from_snapshot(snapshot, viewer_id))

    def settle_game(self, state: LocalGameState) -> LocalGameState:
        """
        Re-issue a completion the store never recorded: an active game that
        already holds a winning guess, or a solo game whose player used every
        attempt. Returns the state unchanged when nothing is pending.
        """
        game = state.game
        if game.is_completed:
            return state

        winning = next((guess for guess in state.guesses if guess.guess == game.word), None)
        if winning is not None:
            game = self.persistence.update_game_status(game, GameStatus.COMPLETED, winning.player_id)
        elif not game.is_multiplayer and any(
                state.attempts_used(player.player_id) >= game.max_attempts for player in state.players):
            game = self.persistence.update_game_status(game, GameStatus.COMPLETED, None)
        else:
            return state

        game_logger.log_game_event(
            game.id, 'completion_resumed', winning.player_id if winning else None, winner_id=game.winner_id
        )
        return replace(state, game=game)

    def join_game(self, state: LocalGameState, player: Player) -> LocalGameState:
        """
        Adds a player to a game. Joining twice returns the state unchanged.

        Raises:
            ValidationError: the game is somebody else's solo game
            GameOverError: the game already ended
        """
        if state.is_member(player.id):
            return state

        if not state.game.is_multiplayer:
            raise ValidationError("This is not a multiplayer game", reason="not_multiplayer")

        if state.is_completed:
            raise GameOverError("This game has already ended")

        membership = self.persistence.add_player(state.game, player)
        game_logger.log_game_event(state.game.id, 'player_joined', player.id, nickname=player.nickname)
        return append_player(state, membership)

    def submit_guess(self, state: LocalGameState, player_id: str, raw_input) -> Tuple[LocalGameState, GuessResult]:
        """
        Processes a guess and updates game state.

        Args:
            state: Current local state of the game
            player_id: Submitting player
            raw_input: Guess as typed

        Returns:
            Tuple of (updated state, GuessResult)

        Raises:
            GameOverError: the game is completed or the player has no attempts left
            ValidationError: the input is not a valid word, or the player is not
                a member of the game (no attempt consumed)
            CompletionPendingError: the guess was recorded but ending the game failed
            PersistenceError: the record store rejected the write (state not advanced)
        """
        state = self.settle_game(state)
        game = state.game

        if game.is_completed:
            raise GameOverError("Game is already over")

        if not state.is_member(player_id):
            raise ValidationError("Player is not a member of this game", reason="not_a_member")

        attempts_used = state.attempts_used(player_id)
        if attempts_used >= game.max_attempts:
            raise GameOverError("No attempts left")

        word = self.validator_for(game.language).check(raw_input)

        try:
            guess = self.persistence.record_guess(game, player_id, word)
        except GameOverError:
            # Local view is behind the store; finish a completion it may be missing
            self.load_game(game.id, state.viewer_id)
            raise

        evaluation = evaluate_guess(guess.guess, game.word)
        attempts_used += 1

        game_logger.log_game_event(
            game.id, 'guess_recorded', player_id,
            guess_id=guess.id, attempt=attempts_used, evaluation=[s.value for s in evaluation]
        )

        state = append_guess(state, guess)
        try:
            if is_winning_evaluation(evaluation):
                game = self.persistence.update_game_status(game, GameStatus.COMPLETED, player_id)
                if game.winner_id == player_id:
                    game_logger.log_game_event(game.id, 'game_won', player_id, attempts=attempts_used)
                else:
                    game_logger.log_game_event(game.id, 'late_solve', player_id, winner_id=game.winner_id)
            elif not game.is_multiplayer and attempts_used >= game.max_attempts:
                game = self.persistence.update_game_status(game, GameStatus.COMPLETED, None)
                game_logger.log_game_event(game.id, 'game_lost', player_id, attempts=attempts_used)
        except PersistenceError as e:
            game_logger.log_game_event(game.id, 'completion_pending', player_id, guess_id=guess.id)
            raise CompletionPendingError(
                f"Guess recorded but the game could not be completed: {e.message}", state=state, guess=guess
            ) from e

        if game is not state.game:
            state = replace(state, game=game)

        result = GuessResult(
            guess=guess,
            evaluation=evaluation,
            status=game.status,
            winner_id=game.winner_id,
            attempts_used=attempts_used,
            attempts_remaining=max(game.max_attempts - attempts_used, 0)
        )
        return state, result

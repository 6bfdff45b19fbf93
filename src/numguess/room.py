"""Authoritative per-room state for the number-guessing game.

The model here is:
- A room holds at most two players, identified by their connection id.
- A room is in one of four phases: 'waiting', 'setup', 'playing' or
  'finished'.
- While 'playing', the turn holder either asks a question or guesses, and the
  other player answers.  Answering passes the turn to the answerer.
- Secrets are kept as commitments; guesses are checked against the digest.

Every mutation goes through one of the transition methods on Room.  Each method
checks its input and guard completely before touching any state, so a rejected
intent never leaves a room half-updated.

"""
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from .commitment import commit, matches

MAX_PLAYERS = 2


class RoomError(Exception):
    """Base class for rejected room intents."""


class ValidationError(RoomError):
    """Malformed or out-of-policy intent; the sender is told why."""


class PreconditionError(RoomError):
    """Well-formed intent that arrived in the wrong phase or turn.

    These are treated as stale or duplicate client messages and dropped.
    """


class Phase(str, Enum):
    WAITING = 'waiting'
    SETUP = 'setup'
    PLAYING = 'playing'
    FINISHED = 'finished'


class TurnStep(str, Enum):
    ASKING = 'asking'
    ANSWERING = 'answering'


class EndReason(str, Enum):
    GUESSED = 'guessed'
    SURRENDER = 'surrender'
    DISCONNECT = 'disconnect'


class Departure(Enum):
    """What happened to a room when one of its players went away."""
    FORFEIT = 'forfeit'
    RESET = 'reset'
    EMPTY = 'empty'
    DETACHED = 'detached'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Player(object):
    """A seated player.

    Attributes
    ----------
    id : str
        Connection id of the player; stable for the connection's lifetime
    name : str
        Display name
    ready : bool
        True once a secret has been committed
    secret_digest : str, optional
        Commitment to the secret
    secret_raw : str, optional
        The secret itself; only revealed after the game
    """
    id: str
    name: str
    ready: bool = False
    secret_digest: Optional[str] = None
    secret_raw: Optional[str] = None

    def commit_secret(self, secret: str):
        self.secret_digest = commit(secret)
        self.secret_raw = secret
        self.ready = True

    def clear_secret(self):
        self.secret_digest = None
        self.secret_raw = None
        self.ready = False


@dataclass(frozen=True)
class HistoryEntry(object):
    """One line of a room's turn history.

    ``kind`` is one of 'question', 'answer', 'guess' or 'system'.  System
    entries have no author.
    """
    kind: str
    text: str
    author: Optional[str] = None

    def to_dict(self):
        return {'type': self.kind, 'author': self.author, 'text': self.text}


# Guards.  These only read the room, so they can be checked in isolation.

def can_join(room: 'Room') -> bool:
    return room.phase is Phase.WAITING and len(room.players) < MAX_PLAYERS


def can_submit_secret(room: 'Room', player_id: str) -> bool:
    return room.phase is Phase.SETUP and room.is_member(player_id)


def can_ask(room: 'Room', player_id: str) -> bool:
    return (room.phase is Phase.PLAYING
            and room.turn == player_id
            and room.step is TurnStep.ASKING)


def can_answer(room: 'Room', player_id: str) -> bool:
    return (room.phase is Phase.PLAYING
            and room.step is TurnStep.ANSWERING
            and room.is_member(player_id)
            and room.turn != player_id)


def can_guess(room: 'Room', player_id: str) -> bool:
    # Guessing replaces asking, so it shares the asking guard.
    return can_ask(room, player_id)


def can_surrender(room: 'Room', player_id: str) -> bool:
    return room.phase is Phase.PLAYING and room.is_member(player_id)


class Room(object):
    """One isolated two-player match.

    Parameters
    ----------
    room_id : str
        Short numeric identifier shared between players
    digits : int
        Exact length every secret and guess must have
    rng : random.Random, optional
        Source of randomness for picking who starts.  Defaults to a fresh
        ``random.Random``.
    """

    def __init__(self, room_id: str, digits: int, rng: Optional[random.Random] = None):
        if digits < 1:
            raise ValueError("Number of digits must be at least 1")

        self.id = room_id
        self.digits = digits
        self.players: List[Player] = []
        self.host: Optional[str] = None
        self.phase = Phase.WAITING
        self.turn: Optional[str] = None
        self.step: Optional[TurnStep] = None
        self.history: List[HistoryEntry] = []
        self.winner: Optional[str] = None
        self.end_reason: Optional[EndReason] = None
        self.created_at = _now()
        self.finished_at: Optional[str] = None
        self._rng = rng or random.Random()

    def __repr__(self):
        return f"Room(id={self.id!r}, phase={self.phase.value!r}, players={len(self.players)})"

    # Lookups

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def is_member(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def opponent_of(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id != player_id:
                return player
        return None

    @property
    def is_finished(self) -> bool:
        return self.phase is Phase.FINISHED

    # Transitions

    def add_player(self, player_id: str, name: str) -> Player:
        """Seat a new player.

        The second player moves the room from 'waiting' to 'setup'.

        Raises
        ------
        ValidationError
            If the room is full or the game has already started
        """
        if len(self.players) >= MAX_PLAYERS:
            raise ValidationError("Room is full.")
        if not can_join(self):
            raise ValidationError("Game has already started.")
        if self.is_member(player_id):
            raise PreconditionError(f"{player_id} is already in room {self.id}")

        player = Player(id=player_id, name=name)
        self.players.append(player)
        if self.host is None:
            self.host = player_id
        if len(self.players) == MAX_PLAYERS:
            self.phase = Phase.SETUP
        return player

    def submit_secret(self, player_id: str, secret: str) -> bool:
        """Commit a player's secret during setup.

        A player may replace their secret until both players are ready; the
        game starts the moment the second secret arrives.

        Returns
        -------
        bool
            True if this submission started the game
        """
        self._check_number(secret, 'Secret')
        if not can_submit_secret(self, player_id):
            raise PreconditionError(f"{player_id} cannot submit a secret in phase {self.phase.value}")

        self.get_player(player_id).commit_secret(secret)

        if len(self.players) == MAX_PLAYERS and all(p.ready for p in self.players):
            self._start()
            return True
        return False

    def ask(self, player_id: str, question: str):
        """The turn holder asks a question; the opponent must answer next."""
        if not question:
            raise ValidationError("Question must not be empty.")
        if not can_ask(self, player_id):
            raise PreconditionError(f"{player_id} cannot ask now")

        player = self.get_player(player_id)
        self.history.append(HistoryEntry('question', question, player.name))
        self.step = TurnStep.ANSWERING

    def answer(self, player_id: str, answer: str):
        """The opponent answers; the turn passes to them."""
        if not answer:
            raise ValidationError("Answer must not be empty.")
        if not can_answer(self, player_id):
            raise PreconditionError(f"{player_id} cannot answer now")

        player = self.get_player(player_id)
        self.history.append(HistoryEntry('answer', answer, player.name))
        self.turn = player_id
        self.step = TurnStep.ASKING

    def guess(self, player_id: str, guess: str) -> bool:
        """The turn holder tries to guess the opponent's secret.

        A miss passes the turn to the opponent.

        Returns
        -------
        bool
            True if the guess matched and the game is over
        """
        self._check_number(guess, 'Guess')
        if not can_guess(self, player_id):
            raise PreconditionError(f"{player_id} cannot guess now")

        player = self.get_player(player_id)
        opponent = self.opponent_of(player_id)
        self.history.append(HistoryEntry('guess', f"Guessed: {guess}", player.name))

        if matches(guess, opponent.secret_digest):
            self._finish(player_id, EndReason.GUESSED,
                         f"{player.name} guessed correctly and wins!")
            return True

        self.history.append(HistoryEntry('system', f"{player.name}'s guess was wrong."))
        self.turn = opponent.id
        self.step = TurnStep.ASKING
        return False

    def surrender(self, player_id: str):
        """End the game immediately in the opponent's favour."""
        if not can_surrender(self, player_id):
            raise PreconditionError(f"{player_id} cannot surrender in phase {self.phase.value}")

        player = self.get_player(player_id)
        opponent = self.opponent_of(player_id)
        self._finish(opponent.id, EndReason.SURRENDER, f"{player.name} surrendered.")

    def remove_player(self, player_id: str) -> Departure:
        """Handle a player's connection going away.

        - While playing, the remaining player wins by forfeit.
        - Before the game starts, the player is removed.  If someone is left,
          the room goes back to 'waiting' and their secret is cleared.
        - A finished room is left untouched.
        """
        player = self.get_player(player_id)
        if player is None:
            raise PreconditionError(f"{player_id} is not in room {self.id}")

        if self.phase is Phase.FINISHED:
            return Departure.DETACHED

        if self.phase is Phase.PLAYING:
            opponent = self.opponent_of(player_id)
            self._finish(opponent.id, EndReason.DISCONNECT,
                         f"{player.name} disconnected. Game over.")
            return Departure.FORFEIT

        self.players.remove(player)
        if not self.players:
            self.host = None
            return Departure.EMPTY

        for remaining in self.players:
            remaining.clear_secret()
        self.host = self.players[0].id
        self.phase = Phase.WAITING
        self.turn = None
        self.step = None
        return Departure.RESET

    def _start(self):
        self.phase = Phase.PLAYING
        self.turn = self._rng.choice(self.players).id
        self.step = TurnStep.ASKING

    def _finish(self, winner_id: str, reason: EndReason, text: str):
        self.phase = Phase.FINISHED
        self.winner = winner_id
        self.end_reason = reason
        self.step = None
        self.finished_at = _now()
        self.history.append(HistoryEntry('system', text))

    def _check_number(self, value: str, label: str):
        # Length first, so mismatches are rejected before anything else.
        if not isinstance(value, str) or len(value) != self.digits:
            raise ValidationError(f"{label} must be exactly {self.digits} digits.")
        if not (value.isascii() and value.isdigit()):
            raise ValidationError(f"{label} must be exactly {self.digits} digits.")

    # Serialization

    def to_dict(self, reveal_secrets: bool = False, include_digests: bool = False) -> dict:
        """Build a JSON-ready snapshot of the room.

        Parameters
        ----------
        reveal_secrets : bool
            Include each player's raw secret as ``secretRaw``
        include_digests : bool
            Include each player's commitment as ``secretHash``
        """
        players = []
        for player in self.players:
            data = {'id': player.id, 'name': player.name, 'ready': player.ready}
            if include_digests:
                data['secretHash'] = player.secret_digest
            if reveal_secrets:
                data['secretRaw'] = player.secret_raw
            players.append(data)

        return {
            'id': self.id,
            'host': self.host,
            'digits': self.digits,
            'state': self.phase.value,
            'turn': self.turn,
            'actionState': self.step.value if self.step else None,
            'players': players,
            'history': [entry.to_dict() for entry in self.history],
            'winner': self.winner,
            'reason': self.end_reason.value if self.end_reason else None,
            'createdAt': self.created_at,
            'finishedAt': self.finished_at,
        }

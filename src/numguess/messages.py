"""Typed messages exchanged over the Socket.IO channel.

Each client intent is parsed from its raw payload into a dataclass before it
reaches the gateway, and each server event knows its own name and payload.
Parsing failures raise ValidationError.

"""
from dataclasses import dataclass
from typing import Any, Optional, Union

from .room import ValidationError


@dataclass(frozen=True)
class Limits(object):
    """Input limits applied while parsing payloads."""
    default_digits: int = 5
    min_digits: int = 1
    max_digits: int = 10
    max_name_length: int = 30
    max_text_length: int = 300

    @classmethod
    def from_config(cls, config) -> 'Limits':
        return cls(
            default_digits=int(config.get('DEFAULT_DIGITS', cls.default_digits)),
            min_digits=int(config.get('MIN_DIGITS', cls.min_digits)),
            max_digits=int(config.get('MAX_DIGITS', cls.max_digits)),
            max_name_length=int(config.get('MAX_NAME_LENGTH', cls.max_name_length)),
            max_text_length=int(config.get('MAX_TEXT_LENGTH', cls.max_text_length)),
        )


def _require_dict(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Malformed request.")
    return payload


def _room_id(payload: dict) -> str:
    room_id = payload.get('roomId')
    if isinstance(room_id, int) and not isinstance(room_id, bool):
        room_id = str(room_id)
    if not isinstance(room_id, str) or not room_id.strip():
        raise ValidationError("Room ID is required.")
    return room_id.strip()


def _username(payload: dict, limits: Limits) -> str:
    name = payload.get('username')
    if not isinstance(name, str):
        raise ValidationError("Username is required.")
    name = name.strip()
    if not name or len(name) > limits.max_name_length:
        raise ValidationError(f"Username must be 1 to {limits.max_name_length} characters.")
    return name


def _text(payload: dict, key: str, label: str, limits: Limits) -> str:
    text = payload.get(key)
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(f"{label} must not be empty.")
    text = text.strip()
    if len(text) > limits.max_text_length:
        raise ValidationError(f"{label} must be at most {limits.max_text_length} characters.")
    return text


def _chat(payload: dict) -> str:
    # Chat is relayed exactly as sent.
    text = payload.get('message')
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Message must not be empty.")
    return text


def _number(payload: dict, key: str, label: str) -> str:
    # Passed through untouched; Room checks the exact length and digits.
    value = payload.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{label} is required.")
    return value


def _digits(payload: dict, limits: Limits) -> int:
    raw = payload.get('digits')
    try:
        digits = int(raw)
    except (TypeError, ValueError):
        return limits.default_digits
    if digits < limits.min_digits or digits > limits.max_digits:
        raise ValidationError(f"Digits must be between {limits.min_digits} and {limits.max_digits}.")
    return digits


# Client -> server intents

@dataclass(frozen=True)
class CreateRoom(object):
    username: str
    digits: int

    name = 'createRoom'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'CreateRoom':
        payload = _require_dict(payload)
        return cls(username=_username(payload, limits), digits=_digits(payload, limits))


@dataclass(frozen=True)
class JoinRoom(object):
    room_id: str
    username: str

    name = 'joinRoom'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'JoinRoom':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload), username=_username(payload, limits))


@dataclass(frozen=True)
class SubmitSecret(object):
    room_id: str
    secret: str

    name = 'submitSecret'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'SubmitSecret':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload), secret=_number(payload, 'secret', 'Secret'))


@dataclass(frozen=True)
class AskQuestion(object):
    room_id: str
    question: str

    name = 'askQuestion'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'AskQuestion':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload),
                   question=_text(payload, 'question', 'Question', limits))


@dataclass(frozen=True)
class AnswerQuestion(object):
    room_id: str
    answer: str

    name = 'answerQuestion'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'AnswerQuestion':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload),
                   answer=_text(payload, 'answer', 'Answer', limits))


@dataclass(frozen=True)
class MakeGuess(object):
    room_id: str
    guess: str

    name = 'makeGuess'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'MakeGuess':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload), guess=_number(payload, 'guess', 'Guess'))


@dataclass(frozen=True)
class Surrender(object):
    room_id: str

    name = 'surrender'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'Surrender':
        # Clients send the bare room ID here.
        if isinstance(payload, (str, int)) and not isinstance(payload, bool):
            payload = {'roomId': payload}
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload))


@dataclass(frozen=True)
class SendMessage(object):
    room_id: str
    message: str

    name = 'sendMessage'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'SendMessage':
        payload = _require_dict(payload)
        return cls(room_id=_room_id(payload),
                   message=_chat(payload))


@dataclass(frozen=True)
class Disconnect(object):
    name = 'disconnect'

    @classmethod
    def parse(cls, payload: Any, limits: Limits) -> 'Disconnect':
        return cls()


Intent = Union[CreateRoom, JoinRoom, SubmitSecret, AskQuestion, AnswerQuestion,
               MakeGuess, Surrender, SendMessage, Disconnect]

INTENTS = {
    intent.name: intent
    for intent in (CreateRoom, JoinRoom, SubmitSecret, AskQuestion, AnswerQuestion,
                   MakeGuess, Surrender, SendMessage, Disconnect)
}


def parse_intent(name: str, payload: Any, limits: Optional[Limits] = None) -> Intent:
    """Parse a raw Socket.IO payload into the intent registered under ``name``.

    Raises
    ------
    ValidationError
        If the intent is unknown or the payload has the wrong shape
    """
    if name not in INTENTS:
        raise ValidationError(f"Unknown action: {name}")
    return INTENTS[name].parse(payload, limits or Limits())


# Server -> client events

@dataclass(frozen=True)
class RoomJoined(object):
    room_id: str
    is_host: bool

    name = 'roomJoined'

    def payload(self):
        return {'roomId': self.room_id, 'isHost': self.is_host}


@dataclass(frozen=True)
class UpdateRoomState(object):
    room: dict

    name = 'updateRoomState'

    def payload(self):
        return self.room


@dataclass(frozen=True)
class Error(object):
    message: str

    name = 'error'

    def payload(self):
        return self.message


@dataclass(frozen=True)
class GuessResult(object):
    success: bool

    name = 'guessResult'

    def payload(self):
        return {'success': self.success}


@dataclass(frozen=True)
class GameOver(object):
    room: dict

    name = 'gameOver'

    def payload(self):
        return {'room': self.room}


@dataclass(frozen=True)
class ReceiveMessage(object):
    author: str
    text: str

    name = 'receiveMessage'

    def payload(self):
        return {'author': self.author, 'text': self.text}


@dataclass(frozen=True)
class PlayerLeft(object):
    message: str

    name = 'playerLeft'

    def payload(self):
        return self.message


Event = Union[RoomJoined, UpdateRoomState, Error, GuessResult, GameOver,
              ReceiveMessage, PlayerLeft]

"""
Per-connection dispatch of client intents.

The gateway parses each intent, finds the room it targets, checks that the
connection belongs there and hands the intent to the Room.  The outcome is then
broadcast to the room or sent privately to the sender.
"""

import threading
from typing import Optional

from loguru import logger

from .broadcaster import Broadcaster
from .match_log import MatchLog
from .messages import (AnswerQuestion, AskQuestion, CreateRoom, Disconnect, Error,
                       GuessResult, JoinRoom, Limits, MakeGuess, PlayerLeft,
                       ReceiveMessage, RoomJoined, SendMessage, SubmitSecret,
                       Surrender, parse_intent)
from .room import Departure, PreconditionError, Room, ValidationError
from .room_registry import RoomRegistry

OPPONENT_LEFT_MESSAGE = "Your opponent left the room. Waiting for a new opponent..."


class SessionGateway(object):
    """Routes intents from connections to rooms.

    Parameters
    ----------
    registry : RoomRegistry
        Owner of every room
    transport
        Object with ``emit_to``, ``emit_to_room``, ``join`` and ``leave``
    match_log : MatchLog
        Sink for finished matches
    limits : Limits, optional
        Payload limits; defaults to ``Limits()``
    """

    def __init__(self, registry: RoomRegistry, transport, match_log: MatchLog,
                 limits: Optional[Limits] = None):
        self.registry = registry
        self.transport = transport
        self.broadcaster = Broadcaster(transport)
        self.match_log = match_log
        self.limits = limits or Limits()
        # One intent at a time across all rooms.  This relies on the server
        # running in threading mode, which create_app pins.
        self._lock = threading.RLock()
        self._handlers = {
            CreateRoom: self.create_room,
            JoinRoom: self.join_room,
            SubmitSecret: self.submit_secret,
            AskQuestion: self.ask_question,
            AnswerQuestion: self.answer_question,
            MakeGuess: self.make_guess,
            Surrender: self.surrender,
            SendMessage: self.send_message,
            Disconnect: self.disconnect,
        }

    def dispatch(self, name: str, sid: str, payload=None):
        """Apply one intent from connection ``sid``.

        Validation errors go back to the sender, precondition failures are
        dropped, and anything unexpected is logged and reported as an internal
        error to the sender only.
        """
        with self._lock:
            try:
                intent = parse_intent(name, payload, self.limits)
                self._handlers[type(intent)](sid, intent)
            except ValidationError as e:
                logger.info(f"Rejected {name} from {sid}: {e}")
                if name != Disconnect.name:
                    self.broadcaster.send(sid, Error(str(e)))
            except PreconditionError as e:
                logger.debug(f"Dropped stale {name} from {sid}: {e}")
            except Exception:
                logger.exception(f"Unexpected failure handling {name} from {sid}")
                if name != Disconnect.name:
                    self.broadcaster.send(sid, Error("Internal server error."))

    # Lookups

    def _find_room(self, room_id: str) -> Room:
        room = self.registry.get(room_id)
        if room is None:
            raise ValidationError("Room not found.")
        return room

    def _member_room(self, sid: str, room_id: str) -> Room:
        room = self._find_room(room_id)
        if not room.is_member(sid):
            raise PreconditionError(f"{sid} is not a member of room {room_id}")
        return room

    def _previous_room(self, sid: str) -> Optional[Room]:
        """Return the finished room ``sid`` may leave behind, if any."""
        room = self.registry.room_of(sid)
        if room is not None and not room.is_finished:
            raise ValidationError("You are already in a room.")
        return room

    def _enter(self, sid: str, room: Room, previous: Optional[Room]):
        if previous is not None:
            self.registry.detach(sid)
            self.transport.leave(sid, previous.id)
        self.registry.attach(sid, room.id)
        self.transport.join(sid, room.id)

    def _finish(self, room: Room):
        logger.info(f"Room {room.id} finished ({room.end_reason.value}), winner {room.winner}")
        self.broadcaster.game_over(room)
        self.match_log.record(room)

    # Intents

    def create_room(self, sid: str, intent: CreateRoom):
        previous = self._previous_room(sid)
        room = self.registry.create(intent.digits)
        room.add_player(sid, intent.username)
        self._enter(sid, room, previous)

        logger.info(f"Room {room.id} created by '{intent.username}' ({room.digits} digits)")
        self.broadcaster.send(sid, RoomJoined(room.id, is_host=True))
        self.broadcaster.room_state(room)

    def join_room(self, sid: str, intent: JoinRoom):
        room = self._find_room(intent.room_id)
        previous = self._previous_room(sid)
        room.add_player(sid, intent.username)
        self._enter(sid, room, previous)

        logger.info(f"'{intent.username}' joined room {room.id}, now {room.phase.value}")
        self.broadcaster.send(sid, RoomJoined(room.id, is_host=room.host == sid))
        self.broadcaster.room_state(room)

    def submit_secret(self, sid: str, intent: SubmitSecret):
        room = self._find_room(intent.room_id)
        started = room.submit_secret(sid, intent.secret)
        if started:
            logger.info(f"Room {room.id} started, first turn {room.turn}")
        self.broadcaster.room_state(room)

    def ask_question(self, sid: str, intent: AskQuestion):
        room = self._member_room(sid, intent.room_id)
        room.ask(sid, intent.question)
        self.broadcaster.room_state(room)

    def answer_question(self, sid: str, intent: AnswerQuestion):
        room = self._member_room(sid, intent.room_id)
        room.answer(sid, intent.answer)
        self.broadcaster.room_state(room)

    def make_guess(self, sid: str, intent: MakeGuess):
        room = self._find_room(intent.room_id)
        if room.guess(sid, intent.guess):
            self._finish(room)
            return
        self.broadcaster.send(sid, GuessResult(success=False))
        self.broadcaster.room_state(room)

    def surrender(self, sid: str, intent: Surrender):
        room = self._member_room(sid, intent.room_id)
        room.surrender(sid)
        self._finish(room)

    def send_message(self, sid: str, intent: SendMessage):
        # Chat is not part of the game; it never touches room state.
        room = self._member_room(sid, intent.room_id)
        author = room.get_player(sid).name
        self.broadcaster.publish(room.id, ReceiveMessage(author, intent.message))

    def disconnect(self, sid: str, intent: Disconnect):
        room = self.registry.room_of(sid)
        self.registry.detach(sid)
        if room is None:
            return

        departure = room.remove_player(sid)
        if departure is Departure.FORFEIT:
            self._finish(room)
        elif departure is Departure.EMPTY:
            self.registry.delete(room.id)
            logger.info(f"Room {room.id} deleted, no players left")
        elif departure is Departure.RESET:
            logger.info(f"Room {room.id} reset to waiting after a player left")
            self.broadcaster.publish(room.id, PlayerLeft(OPPONENT_LEFT_MESSAGE))
            self.broadcaster.room_state(room)

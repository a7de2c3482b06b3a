"""Real-time relay: group membership and event forwarding.

Each authenticated connection is enrolled in its personal group
(``user:<id>``) on connect and may join any number of conversation groups
(``conv:<a>:<b>`` with the two ids sorted). Inbound events are forwarded to
one of those groups; only ``send_message`` touches the store. Delivery is
best effort: an event addressed to a group with no members is dropped.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError
from sqlalchemy.orm import Session

from plantspace.core.errors import PlantSpaceError
from plantspace.db.ids import new_id
from plantspace.schemas.relay import (
    AnswerCallPayload,
    CallUserPayload,
    EndCallPayload,
    IceCandidatePayload,
    JoinConversationPayload,
    RejectCallPayload,
    SendMessagePayload,
    TypingPayload,
)
from plantspace.services import messages as message_service

logger = logging.getLogger(__name__)

PERSONAL_PREFIX = "user:"
CONVERSATION_PREFIX = "conv:"
CONVERSATION_DELIMITER = ":"

# Inbound events
JOIN_CONVERSATION = "join_conversation"
SEND_MESSAGE = "send_message"
TYPING_START = "typing_start"
TYPING_STOP = "typing_stop"
CALL_USER = "call_user"
ANSWER_CALL = "answer_call"
REJECT_CALL = "reject_call"
END_CALL = "end_call"
ICE_CANDIDATE = "ice_candidate"

# Outbound events
NEW_MESSAGE = "new_message"
MESSAGE_NOTIFICATION = "message_notification"
MESSAGE_ERROR = "message_error"
USER_TYPING = "user_typing"
INCOMING_CALL = "incoming_call"
CALL_ANSWERED = "call_answered"
CALL_REJECTED = "call_rejected"
CALL_ENDED = "call_ended"
RELAY_ERROR = "relay_error"


def conversation_key(user_a: str, user_b: str) -> str:
    """Return the order-independent key for the pair ``(user_a, user_b)``."""
    return CONVERSATION_DELIMITER.join(sorted((user_a, user_b)))


def conversation_group(user_a: str, user_b: str) -> str:
    return f"{CONVERSATION_PREFIX}{conversation_key(user_a, user_b)}"


def personal_group(user_id: str) -> str:
    return f"{PERSONAL_PREFIX}{user_id}"


class RelayConnection(ABC):
    """One authenticated client session attached to the relay.

    Subclasses implement :meth:`send` for their transport.
    """

    def __init__(self, user_id: str, sid: str | None = None) -> None:
        self.user_id = user_id
        self.sid = sid or new_id()

    @abstractmethod
    async def send(self, event: str, data: Any = None) -> None:
        """Deliver one event to the client."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} sid={self.sid} user={self.user_id}>"


Handler = Callable[[RelayConnection, Any, Session], Awaitable[None]]


class RelayHub:
    """Process-local routing table plus the event handlers that use it.

    The hub is created when the application starts and cleared when it stops.
    All mutation happens on the event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._groups: dict[str, set[RelayConnection]] = {}
        self._memberships: dict[RelayConnection, set[str]] = {}
        self.running = False
        self._routes: dict[str, tuple[type[BaseModel], Handler]] = {
            JOIN_CONVERSATION: (JoinConversationPayload, self._on_join_conversation),
            SEND_MESSAGE: (SendMessagePayload, self._on_send_message),
            TYPING_START: (TypingPayload, self._on_typing_start),
            TYPING_STOP: (TypingPayload, self._on_typing_stop),
            CALL_USER: (CallUserPayload, self._on_call_user),
            ANSWER_CALL: (AnswerCallPayload, self._on_answer_call),
            REJECT_CALL: (RejectCallPayload, self._on_reject_call),
            END_CALL: (EndCallPayload, self._on_end_call),
            ICE_CANDIDATE: (IceCandidatePayload, self._on_ice_candidate),
        }

    # --- lifecycle -----------------------------------------------------------------
    async def start(self) -> None:
        self.running = True
        logger.info("Relay hub started")

    async def stop(self) -> None:
        self.running = False
        self._groups.clear()
        self._memberships.clear()
        logger.info("Relay hub stopped")

    # --- membership ----------------------------------------------------------------
    def connect(self, connection: RelayConnection) -> None:
        """Register an authenticated connection and enroll its personal group."""
        self._memberships.setdefault(connection, set())
        self.join(connection, personal_group(connection.user_id))
        logger.info("User %s connected (%s)", connection.user_id, connection.sid)

    def join(self, connection: RelayConnection, group: str) -> bool:
        """Add ``connection`` to ``group``; returns False if it was already a member."""
        groups = self._memberships.get(connection)
        if groups is None:
            raise ValueError(f"{connection!r} is not connected")
        if group in groups:
            return False
        groups.add(group)
        self._groups.setdefault(group, set()).add(connection)
        return True

    def disconnect(self, connection: RelayConnection) -> None:
        """Remove ``connection`` from every group it occupies."""
        for group in self._memberships.pop(connection, set()):
            members = self._groups.get(group)
            if members is None:
                continue
            members.discard(connection)
            if not members:
                del self._groups[group]
        logger.info("User %s disconnected (%s)", connection.user_id, connection.sid)

    def members(self, group: str) -> frozenset[RelayConnection]:
        return frozenset(self._groups.get(group, ()))

    def groups_of(self, connection: RelayConnection) -> frozenset[str]:
        return frozenset(self._memberships.get(connection, ()))

    def is_connected(self, connection: RelayConnection) -> bool:
        return connection in self._memberships

    # --- delivery ------------------------------------------------------------------
    async def emit(
        self,
        group: str,
        event: str,
        data: Any = None,
        *,
        skip: RelayConnection | None = None,
    ) -> int:
        """Send ``event`` to every member of ``group`` except ``skip``.

        Returns the number of connections the event was handed to.
        """
        delivered = 0
        for member in list(self._groups.get(group, ())):
            if member is skip:
                continue
            try:
                await member.send(event, data)
            except Exception:
                logger.warning(
                    "Dropping %s for %r: send failed", event, member, exc_info=True
                )
                continue
            delivered += 1
        return delivered

    async def dispatch(
        self,
        connection: RelayConnection,
        event: str,
        data: Any,
        db: Session,
    ) -> None:
        """Validate and route one inbound event from ``connection``."""
        if not self.is_connected(connection):
            logger.warning("Ignoring %s from unregistered %r", event, connection)
            return

        route = self._routes.get(event)
        if route is None:
            await connection.send(RELAY_ERROR, {"error": f"Unknown event: {event}"})
            return

        model, handler = route
        try:
            payload = model.model_validate(data if isinstance(data, dict) else {})
        except PayloadValidationError:
            logger.debug("Invalid %s payload from %r: %r", event, connection, data)
            error_event = MESSAGE_ERROR if event == SEND_MESSAGE else RELAY_ERROR
            await connection.send(error_event, {"error": f"Invalid payload for {event}"})
            return

        await handler(connection, payload, db)

    # --- handlers ------------------------------------------------------------------
    async def _on_join_conversation(
        self, connection: RelayConnection, payload: JoinConversationPayload, db: Session
    ) -> None:
        self.join(connection, conversation_group(connection.user_id, payload.other_user_id))

    async def _on_send_message(
        self, connection: RelayConnection, payload: SendMessagePayload, db: Session
    ) -> None:
        sender_id = connection.user_id
        try:
            message = message_service.create_message(
                db,
                sender_id=sender_id,
                receiver_id=payload.receiver_id,
                text=payload.text,
                image_url=payload.image_url,
            )
            record = message_service.serialize_message(message)
        except PlantSpaceError as err:
            db.rollback()
            logger.warning("Rejected relay message from %s: %s", sender_id, err.detail)
            await connection.send(MESSAGE_ERROR, {"error": "Failed to send message"})
            return
        except Exception:
            db.rollback()
            logger.error("Send message error for %s", sender_id, exc_info=True)
            await connection.send(MESSAGE_ERROR, {"error": "Failed to send message"})
            return

        await self.emit(conversation_group(sender_id, payload.receiver_id), NEW_MESSAGE, record)
        await self.emit(
            personal_group(payload.receiver_id),
            MESSAGE_NOTIFICATION,
            {"senderId": sender_id, "message": record},
        )

    async def _forward_typing(
        self, connection: RelayConnection, receiver_id: str, is_typing: bool
    ) -> None:
        await self.emit(
            personal_group(receiver_id),
            USER_TYPING,
            {"userId": connection.user_id, "isTyping": is_typing},
            skip=connection,
        )

    async def _on_typing_start(
        self, connection: RelayConnection, payload: TypingPayload, db: Session
    ) -> None:
        await self._forward_typing(connection, payload.receiver_id, True)

    async def _on_typing_stop(
        self, connection: RelayConnection, payload: TypingPayload, db: Session
    ) -> None:
        await self._forward_typing(connection, payload.receiver_id, False)

    async def _on_call_user(
        self, connection: RelayConnection, payload: CallUserPayload, db: Session
    ) -> None:
        await self.emit(
            personal_group(payload.callee_id),
            INCOMING_CALL,
            {
                "callerId": connection.user_id,
                "offer": payload.offer,
                "callType": payload.call_type,
            },
            skip=connection,
        )

    async def _on_answer_call(
        self, connection: RelayConnection, payload: AnswerCallPayload, db: Session
    ) -> None:
        await self.emit(
            personal_group(payload.caller_id),
            CALL_ANSWERED,
            {"answer": payload.answer},
            skip=connection,
        )

    async def _on_reject_call(
        self, connection: RelayConnection, payload: RejectCallPayload, db: Session
    ) -> None:
        await self.emit(personal_group(payload.caller_id), CALL_REJECTED, skip=connection)

    async def _on_end_call(
        self, connection: RelayConnection, payload: EndCallPayload, db: Session
    ) -> None:
        await self.emit(personal_group(payload.other_user_id), CALL_ENDED, skip=connection)

    async def _on_ice_candidate(
        self, connection: RelayConnection, payload: IceCandidatePayload, db: Session
    ) -> None:
        await self.emit(
            personal_group(payload.other_user_id),
            ICE_CANDIDATE,
            {"candidate": payload.candidate},
            skip=connection,
        )

"""Wire envelope and per-message payload schemas.

Every inbound frame is a JSON object ``{"type": str, "payload": object}``.
Frames that fail to parse or validate are dropped by the caller; nothing here
reports errors back to the client.
"""

from __future__ import annotations

from typing import Any, Optional
import json
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from packages.companion_core.dna.signature import (
    DEFAULT_INTENT_AI,
    DEFAULT_INTENT_ARTIST,
    DEFAULT_INTENT_USER,
    Identity,
    Intent,
)


MSG_SUBMIT_IDENTITY = "submit_identity"
MSG_UPDATE_INTENT = "update_intent"
MSG_OPERATOR = "operator"
MSG_PING = "ping"

MSG_WELCOME = "welcome"
MSG_IDENTITY_CONFIRMED = "identity_confirmed"
MSG_PRESENCE = "presence"
MSG_OPERATOR_STATE = "operator_state"
MSG_RESET = "reset"
MSG_PONG = "pong"
MSG_TICK = "tick"

OPERATOR_ACTION_PATTERN = "^(pause|reset)$"
MAX_ANSWERS = 16
MAX_ANSWER_LENGTH = 2000

_INTENT_DEFAULTS = {
    "ai": DEFAULT_INTENT_AI,
    "artist": DEFAULT_INTENT_ARTIST,
    "user": DEFAULT_INTENT_USER,
}


def coerce_percent(value: Any, *, default: int) -> int:
    """Clamp a loosely typed percentage to an int in [0, 100].

    Anything that does not read as a finite number yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(0, min(100, int(math.floor(number + 0.5))))


class IntentPayload(BaseModel):
    ai: int = DEFAULT_INTENT_AI
    artist: int = DEFAULT_INTENT_ARTIST
    user: int = DEFAULT_INTENT_USER

    @field_validator("ai", "artist", "user", mode="before")
    @classmethod
    def _percent(cls, value: Any, info: ValidationInfo) -> int:
        return coerce_percent(value, default=_INTENT_DEFAULTS[str(info.field_name)])

    def to_intent(self) -> Intent:
        return Intent(ai=self.ai, artist=self.artist, user=self.user)


class SubmitIdentityPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: list[str] = Field(default_factory=list, max_length=MAX_ANSWERS)
    image_hash: int = Field(default=0, alias="imageHash")
    intent: Optional[IntentPayload] = None

    @field_validator("answers", mode="before")
    @classmethod
    def _answers_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("answers")
    @classmethod
    def _answers_length(cls, value: list[str]) -> list[str]:
        for answer in value:
            if len(answer) > MAX_ANSWER_LENGTH:
                raise ValueError("answer too long")
        return value

    @field_validator("image_hash", mode="before")
    @classmethod
    def _image_hash_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    def to_identity(self, fallback_intent: Intent) -> Identity:
        intent = self.intent.to_intent() if self.intent is not None else fallback_intent
        return Identity(answers=tuple(self.answers), image_hash=self.image_hash, intent=intent)


class OperatorPayload(BaseModel):
    action: str = Field(pattern=OPERATOR_ACTION_PATTERN)


class PingPayload(BaseModel):
    pass


class Envelope(BaseModel):
    type: str = Field(min_length=1, max_length=64)
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator("payload", mode="before")
    @classmethod
    def _payload_default(cls, value: Any) -> Any:
        return {} if value is None else value


PAYLOAD_SCHEMAS: dict[str, type[BaseModel]] = {
    MSG_SUBMIT_IDENTITY: SubmitIdentityPayload,
    MSG_UPDATE_INTENT: IntentPayload,
    MSG_OPERATOR: OperatorPayload,
    MSG_PING: PingPayload,
}


def decode_message(raw: str | bytes) -> tuple[str, BaseModel] | None:
    """Parse and validate one inbound frame, or return None to drop it."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    try:
        envelope = Envelope.model_validate(data)
    except ValidationError:
        return None
    schema = PAYLOAD_SCHEMAS.get(envelope.type)
    if schema is None:
        return None
    try:
        payload = schema.model_validate(envelope.payload)
    except ValidationError:
        return None
    return envelope.type, payload


def encode_message(message_type: str, payload: dict[str, Any]) -> str:
    return json.dumps({"type": message_type, "payload": payload}, separators=(",", ":"), ensure_ascii=False)

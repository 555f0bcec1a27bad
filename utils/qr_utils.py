# utils/qr_utils.py
import base64
import hashlib
import hmac
import io
import json
import time
from dataclasses import dataclass
from enum import Enum

import qrcode

from errors import MalformedToken, SignatureMismatch, TokenExpired

QR_TOKEN_TTL_MS = 30 * 60 * 1000  # token lifetime
SEPARATOR = ":"


class Direction(str, Enum):
    IN = "IN"
    OUT = "OUT"


def now_millis():
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ScanToken:
    session_id: str
    direction: Direction
    issued_at: int
    expires_at: int


class TokenCodec:
    """
    Builds and verifies the scan token shown as a QR code:

        <json payload>:<hex HMAC-SHA256 of the payload>

    The payload is ``{"sessionId", "scanType", "timestamp", "expiry"}`` with
    epoch-millisecond times. The payload contains colons itself, so the
    signature is taken from the last separator.
    """

    def __init__(self, secret, ttl_ms=QR_TOKEN_TTL_MS, clock=now_millis):
        if not secret:
            raise ValueError("QR signing secret must not be empty")
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        self.ttl_ms = ttl_ms
        self.clock = clock

    def _sign(self, payload):
        return hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def encode(self, session_id, direction):
        """Return (payload, signature) for a fresh token."""
        direction = Direction(direction)
        issued_at = self.clock()
        payload = json.dumps(
            {
                "sessionId": session_id,
                "scanType": direction.value,
                "timestamp": issued_at,
                "expiry": issued_at + self.ttl_ms,
            },
            separators=(",", ":"),
        )
        return payload, self._sign(payload)

    def encode_wire(self, session_id, direction):
        payload, signature = self.encode(session_id, direction)
        return f"{payload}{SEPARATOR}{signature}"

    def decode(self, wire_token):
        """
        Verify a wire token and return its ScanToken.
        Raises MalformedToken, SignatureMismatch or TokenExpired.
        """
        if not isinstance(wire_token, str):
            raise MalformedToken()
        payload, sep, signature = wire_token.rpartition(SEPARATOR)
        if not sep or not payload or not signature:
            raise MalformedToken()

        try:
            expected = self._sign(payload).encode("ascii")
        except UnicodeEncodeError as e:
            # lone surrogates cannot have been produced by encode()
            raise SignatureMismatch() from e
        # bytes, so non-ASCII input compares unequal instead of raising
        if not hmac.compare_digest(expected, signature.encode("utf-8", "surrogatepass")):
            raise SignatureMismatch()

        token = self._parse(payload)
        if self.clock() > token.expires_at:
            raise TokenExpired()
        return token

    @staticmethod
    def _parse(payload):
        try:
            data = json.loads(payload)
            token = ScanToken(
                session_id=data["sessionId"],
                direction=Direction(data["scanType"]),
                issued_at=int(data["timestamp"]),
                expires_at=int(data["expiry"]),
            )
        except (ValueError, TypeError, KeyError) as e:
            raise MalformedToken() from e
        if not isinstance(token.session_id, str) or not token.session_id:
            raise MalformedToken()
        return token


def render_qr_png(data):
    """Render data as a QR code and return the PNG as base64 text."""
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("utf-8")

"""Auth service — PIN-based employee authentication check."""

import enum
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from kpi_backend.schemas.schemas import UserView


class AuthOutcome(str, enum.Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    INVALID_PIN = "INVALID_PIN"
    PIN_EXPIRED = "PIN_EXPIRED"


@dataclass(frozen=True)
class AuthResult:
    outcome: AuthOutcome
    user: Optional[UserView] = None

    @property
    def ok(self) -> bool:
        return self.outcome is AuthOutcome.OK


class PinVerifier(Protocol):
    """Compares a supplied PIN against the credentials stored for a user."""

    def verify(self, supplied: str, user: UserView) -> bool:
        ...


class PlaintextPinVerifier:
    """Exact string equality against the stored plaintext PIN; leading zeros matter."""

    def verify(self, supplied: str, user: UserView) -> bool:
        if not user.pin:
            return False
        return str(user.pin) == supplied


plaintext_pins = PlaintextPinVerifier()


_timestamps = TypeAdapter(datetime)

# PostgreSQL renders whole-hour offsets as "+07"; expand to "+07:00".
_SHORT_OFFSET = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?[+-]\d{2})$")


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a stored timestamp; naive values are taken as UTC, garbage as None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = _SHORT_OFFSET.sub(r"\1:00", str(value).strip())
        try:
            parsed = _timestamps.validate_python(text)
        except PydanticValidationError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_auth(
    user: Optional[UserView],
    pin: Optional[str],
    now: Optional[datetime] = None,
    verifier: PinVerifier = plaintext_pins,
    verify_pin: bool = True,
) -> AuthResult:
    """Run the authentication sequence; the first failing step decides the outcome.

    Order: record present, account active, PIN matches, PIN not expired.
    With ``verify_pin=False`` only the first two steps run (identity lookup).
    """
    if user is None:
        return AuthResult(AuthOutcome.NOT_FOUND)
    if not user.active:
        return AuthResult(AuthOutcome.INACTIVE)
    if not verify_pin:
        return AuthResult(AuthOutcome.OK, user)

    if pin is None or not pin.strip() or not verifier.verify(pin, user):
        return AuthResult(AuthOutcome.INVALID_PIN)

    expires_at = parse_timestamp(user.pin_expires_at)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if expires_at is not None and expires_at < now:
        return AuthResult(AuthOutcome.PIN_EXPIRED)

    return AuthResult(AuthOutcome.OK, user)

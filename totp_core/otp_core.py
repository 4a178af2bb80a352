"""
otp_core.py — Core library for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions only: no files, sockets, environment or clock reads inside
  the generators. The caller passes the time in, in milliseconds since epoch.
- Hash algorithm, digit count and time step are parameters, never constants
  baked into the algorithm.
- Used directly by the CLI (otp_cli.py) and the Flask backend.

Security note:
- Secrets are never logged above DEBUG.
"""

import hashlib
import hmac
import logging
import struct
import time
from typing import Optional, Union
from urllib.parse import quote

import pyotp

from .base32 import decode_base32
from .exceptions import OTPConfigurationError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_WINDOW = 1          # +/- steps accepted when verifying
MAX_WINDOW = 10             # larger windows accept almost any code
DEFAULT_ALGORITHM = "SHA1"
SECRET_LENGTH = 64          # Base32 chars, 40 random bytes
MAX_DIGITS = 9              # dbc is 31 bits wide
MAX_COUNTER = 2 ** 64 - 1

_ALGORITHMS = {
    "SHA1": hashlib.sha1,
    "SHA256": hashlib.sha256,
    "SHA512": hashlib.sha512,
}

Secret = Union[str, bytes]


# --- Utility ---------------------------------------------------------------
def generate_base32_secret(length: int = SECRET_LENGTH) -> str:
    """
    Generate a random Base32 secret (no padding).

    The default 64 characters carry 40 bytes of entropy, the size the
    authenticator setup has always used.
    """
    return pyotp.random_base32(length=length)


def resolve_algorithm(algorithm: str):
    """Map 'SHA1' / 'sha256' / ... to a hashlib constructor."""
    try:
        return _ALGORITHMS[str(algorithm).upper()]
    except KeyError:
        raise OTPConfigurationError(
            f"Unsupported hash algorithm: {algorithm}", field="algorithm"
        ) from None


def _check_digits(digits: int) -> None:
    if not isinstance(digits, int) or isinstance(digits, bool) or not 1 <= digits <= MAX_DIGITS:
        raise OTPConfigurationError(
            f"digits must be an integer between 1 and {MAX_DIGITS}, got {digits!r}",
            field="digits",
        )


def _check_step(step_seconds: int) -> None:
    if not isinstance(step_seconds, int) or isinstance(step_seconds, bool) or step_seconds <= 0:
        raise OTPConfigurationError(
            f"step_seconds must be a positive integer, got {step_seconds!r}",
            field="step_seconds",
        )


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, (bytes, bytearray)):
        return bytes(secret)
    return decode_base32(secret)


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Counter -> 8-byte big-endian, as RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    if not 0 <= i <= MAX_COUNTER:
        raise OTPConfigurationError(
            f"counter must fit in an unsigned 64-bit integer, got {i}", field="counter"
        )
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - 4 bytes from offset, MSB of the first one cleared (0x7F)
    - returns an unsigned 31-bit integer
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def hotp(
    key: Secret,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    HOTP code per RFC 4226.

    Steps:
    1. key: raw bytes, or a Base32 string decoded leniently
    2. message = 8-byte big-endian counter
    3. HMAC(algorithm, key, message)
    4. dynamic truncation -> dbc
    5. otp = dbc % 10^digits, zero-padded to `digits`

    Raises:
        OTPConfigurationError: bad digits, counter or algorithm
    """
    _check_digits(digits)
    digestmod = resolve_algorithm(algorithm)
    msg = int_to_bytes(counter)

    digest = hmac.new(_secret_bytes(key), msg, digestmod).digest()
    dbc = dynamic_truncate(digest)
    code = str(dbc % (10 ** digits)).zfill(digits)
    logger.debug("HOTP: HMAC-%s(counter=%d) dbc=%d", algorithm, counter, dbc)
    return code


def time_counter(timestamp_ms: float, step_seconds: int = DEFAULT_TIME_STEP) -> int:
    """floor(timestamp / step) with the timestamp in milliseconds."""
    _check_step(step_seconds)
    return int(timestamp_ms // (step_seconds * 1000))


def totp(
    secret: Secret,
    timestamp_ms: float,
    step_seconds: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    TOTP code per RFC 6238: HOTP with counter = floor(timestamp / step).

    `timestamp_ms` is required; pass `time.time() * 1000` for "now".
    """
    counter = time_counter(timestamp_ms, step_seconds)
    logger.debug("TOTP: time=%sms step=%ds counter=%d", timestamp_ms, step_seconds, counter)
    return hotp(secret, counter, digits, algorithm)


def seconds_remaining(timestamp_ms: float, step_seconds: int = DEFAULT_TIME_STEP) -> int:
    """Whole seconds before the code at `timestamp_ms` rolls over (1..step)."""
    _check_step(step_seconds)
    return step_seconds - int(timestamp_ms // 1000) % step_seconds


def current_time_ms() -> int:
    return int(time.time() * 1000)


def verify_totp(
    candidate_code: str,
    secret: Secret,
    now_ms: Optional[float] = None,
    window: int = DEFAULT_WINDOW,
    step_seconds: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> bool:
    """
    Check a user-supplied TOTP code against `2 * window + 1` time steps.

    The code is compared as a string, so leading zeros count ("007123" is not
    123). Whitespace is not trimmed here. `now_ms` defaults to the current
    time; steps that would fall before the epoch are skipped.
    """
    if not isinstance(window, int) or isinstance(window, bool) or not 0 <= window <= MAX_WINDOW:
        raise OTPConfigurationError(
            f"window must be an integer between 0 and {MAX_WINDOW}, got {window!r}", field="window"
        )
    _check_step(step_seconds)
    _check_digits(digits)
    resolve_algorithm(algorithm)
    if not isinstance(candidate_code, str):
        return False
    if now_ms is None:
        now_ms = current_time_ms()

    key = _secret_bytes(secret)
    candidate = candidate_code.encode("utf-8")
    for offset in range(-window, window + 1):
        at = now_ms + offset * step_seconds * 1000
        if at < 0:
            continue
        expected = totp(key, at, step_seconds, digits, algorithm)
        if hmac.compare_digest(expected.encode("ascii"), candidate):
            logger.debug("TOTP verified at step offset %+d", offset)
            return True
    return False


def format_otpauth_uri(
    secret_b32: str,
    account: str,
    issuer: str,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_TIME_STEP,
) -> str:
    """
    otpauth:// URI for authenticator apps.

    otpauth://totp/{issuer}:{account}?secret=...&issuer=...

    issuer and account are percent-encoded. algorithm / digits / period are
    only appended when they differ from the defaults every app assumes.
    """
    label_issuer = quote(issuer, safe="")
    uri = (
        f"otpauth://totp/{label_issuer}:{quote(account, safe='')}"
        f"?secret={secret_b32}&issuer={label_issuer}"
    )
    if algorithm.upper() != DEFAULT_ALGORITHM:
        uri += f"&algorithm={algorithm.upper()}"
    if digits != DEFAULT_DIGITS:
        uri += f"&digits={digits}"
    if period != DEFAULT_TIME_STEP:
        uri += f"&period={period}"
    return uri

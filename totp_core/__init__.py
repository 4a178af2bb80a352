"""
totp_core package
=================

HOTP/TOTP generation and verification per RFC 4226 & RFC 6238.

Core algorithm
--------------
- HOTP: code = Truncate(HMAC(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(timestamp / step), step defaults to 30s
- Dynamic truncation: 4 bytes of the HMAC at offset (last byte & 0x0F),
  top bit cleared

Time is always passed in, in milliseconds since the epoch. Only
`verify_totp` falls back to the current time when `now_ms` is omitted.

Quick example
-------------
>>> from totp_core import totp, verify_totp
>>> totp("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", 59000)
'287082'
>>> verify_totp("287082", "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", now_ms=59000, window=0)
True
"""
from .base32 import decode_base32
from .exceptions import OTPConfigurationError, SecretExistsError, TOTPError
from .otp_core import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_TIME_STEP,
    DEFAULT_WINDOW,
    format_otpauth_uri,
    generate_base32_secret,
    hotp,
    seconds_remaining,
    totp,
    verify_totp,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_DIGITS",
    "DEFAULT_TIME_STEP",
    "DEFAULT_WINDOW",
    "OTPConfigurationError",
    "SecretExistsError",
    "TOTPError",
    "decode_base32",
    "format_otpauth_uri",
    "generate_base32_secret",
    "hotp",
    "seconds_remaining",
    "totp",
    "verify_totp",
]

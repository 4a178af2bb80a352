"""
base32.py — Lenient Base32 decoder (RFC 4648 alphabet) for OTP secrets.

Authenticator apps hand out secrets in many shapes: lower case, grouped with
spaces or dashes, with or without '=' padding. `base64.b32decode` rejects most
of those, so secrets are decoded here instead:

- trailing '=' padding is stripped
- each character is upper-cased and looked up in the alphabet
- characters outside the alphabet are skipped, never an error
- 5-bit groups are packed into bytes, an incomplete trailing byte is dropped
"""

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_VALUES = {ch: i for i, ch in enumerate(ALPHABET)}


def decode_base32(text: str) -> bytes:
    """
    Decode a Base32 secret to raw bytes.

    Example: decode_base32("JBSWY3DPEHPK3PXP") -> b'Hello!\\xde\\xad\\xbe\\xef'

    Never raises for string input; returns b"" when nothing decodable remains.
    """
    out = bytearray()
    buffer = 0
    bits = 0
    for ch in text.rstrip("="):
        value = _VALUES.get(ch.upper())
        if value is None:
            continue
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    # leftover bits (< 8) are padding from the encoder
    return bytes(out)

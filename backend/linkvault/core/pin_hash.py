"""PIN Hash - placeholder digest for the private-vault PIN.

Invariants:
    - hash_pin is deterministic: same PIN, same digest, across processes
    - Output format: "pin_" + base36 of the absolute 32-bit rolling hash
    - is_valid_pin accepts exactly PIN_LENGTH ASCII digits

Design Decisions:
    - NOT a cryptographic hash. The vault PIN is an access-convenience gate
      for a shared screen, not a confidentiality control. Private links are
      stored unencrypted like every other link.
    - Same digest as the web client so existing stored PINs keep verifying
"""

from linkvault.core.domain_types import PIN_LENGTH

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x1_0000_0000 if value & 0x8000_0000 else value


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def hash_pin(pin: str) -> str:
    """Rolling `h = h * 31 + code` over UTF-16 code units, wrapped to int32."""
    h = 0
    encoded = pin.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code = int.from_bytes(encoded[i:i + 2], "little")
        h = _to_int32((h << 5) - h + code)
    return "pin_" + _base36(abs(h))


def is_valid_pin(pin: str) -> bool:
    return len(pin) == PIN_LENGTH and all(c in "0123456789" for c in pin)

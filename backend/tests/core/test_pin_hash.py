"""PIN hash - deterministic digest compatible with existing stored PINs."""

from linkvault.core.pin_hash import hash_pin, is_valid_pin


def test_known_digest():
    assert hash_pin("1234") == "pin_wcoy"


def test_digest_is_deterministic():
    assert hash_pin("0000") == hash_pin("0000")


def test_different_pins_differ():
    assert hash_pin("1234") != hash_pin("4321")


def test_empty_input():
    assert hash_pin("") == "pin_0"


def test_long_input_wraps_to_int32():
    digest = hash_pin("9" * 64)
    assert digest.startswith("pin_")
    # abs(int32) never exceeds 2**31, which fits in six base36 digits
    assert len(digest) <= len("pin_") + 6


def test_is_valid_pin():
    assert is_valid_pin("0042")
    assert not is_valid_pin("123")
    assert not is_valid_pin("12345")
    assert not is_valid_pin("12a4")
    assert not is_valid_pin("١٢٣٤")

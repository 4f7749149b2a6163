import os

import pytest

from aegisprobe.core.entropy import MAX_ENTROPY, shannon_entropy


def test_empty_input_has_zero_entropy() -> None:
    assert shannon_entropy(b"") == 0
    assert shannon_entropy("") == 0


@pytest.mark.parametrize("value", [0, 65, 255])
def test_single_symbol_has_zero_entropy(value: int) -> None:
    assert shannon_entropy(bytes([value]) * 1000) == 0


def test_two_equiprobable_symbols_is_one_bit() -> None:
    assert shannon_entropy(b"ab" * 50) == pytest.approx(1.0)


def test_every_byte_once_is_eight_bits() -> None:
    assert shannon_entropy(bytes(range(256))) == pytest.approx(MAX_ENTROPY)


def test_random_bytes_approach_eight_bits() -> None:
    score = shannon_entropy(os.urandom(1 << 16))
    assert 7.9 < score <= MAX_ENTROPY


def test_text_is_measured_over_utf8_bytes() -> None:
    assert shannon_entropy("Hello World") == pytest.approx(shannon_entropy(b"Hello World"))

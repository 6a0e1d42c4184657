"""MOD-11 Check Digit — weights (3, 7, 1), modulus 11, 10 collapses to 0.

Tests:
    - Hand-computed digits for short inputs
    - Remainder 0 and raw 10 both yield 0
    - str and int-sequence inputs agree
    - Worked example base digits produce 4
"""

from capture_lines.core.checksum import (
    CHECKSUM_MODULUS, CHECKSUM_WEIGHTS, mod11_check_digit,
)


def test_weights_and_modulus():
    assert CHECKSUM_WEIGHTS == (3, 7, 1)
    assert CHECKSUM_MODULUS == 11


def test_single_digit():
    # 1*3 = 3 -> 11 - 3
    assert mod11_check_digit("1") == 8


def test_two_digits():
    # 1*3 + 2*7 = 17 -> 17 % 11 = 6 -> 5
    assert mod11_check_digit("12") == 5


def test_three_digits():
    # 3 + 14 + 3 = 20 -> 9 -> 2
    assert mod11_check_digit("123") == 2


def test_weights_cycle_after_three_digits():
    # 3 + 14 + 3 + 4*3 = 32 -> 10 -> 1
    assert mod11_check_digit("1234") == 1


def test_zero_remainder_gives_zero():
    assert mod11_check_digit("111") == 0
    assert mod11_check_digit("0") == 0


def test_raw_ten_collapses_to_zero():
    # 4*3 = 12 -> remainder 1 -> 11 - 1 = 10 -> 0
    assert mod11_check_digit("4") == 0


def test_sequence_input_matches_string_input():
    assert mod11_check_digit([1, 2, 3]) == mod11_check_digit("123")


def test_worked_example_base():
    assert mod11_check_digit("09010000193200150000260212") == 4


def test_result_is_always_single_digit():
    for n in range(0, 5000, 7):
        assert 0 <= mod11_check_digit(str(n).zfill(26)) <= 9

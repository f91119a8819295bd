from __future__ import annotations

import pytest

from quiz_trainer.errors import MissingParameterError, NotANumberError
from quiz_trainer.validation import validate_id


def test_validate_id_missing_parameter():
    with pytest.raises(MissingParameterError) as excinfo:
        validate_id(None)
    assert excinfo.value.failure.kind == "missing_parameter"
    assert "<id>" in excinfo.value.failure.message


@pytest.mark.parametrize(
    "raw", ["abc", "", "   ", "x12", "-", "\u0663", "\uff11"]
)
def test_validate_id_not_a_number(raw):
    with pytest.raises(NotANumberError) as excinfo:
        validate_id(raw)
    assert excinfo.value.failure.kind == "not_a_number"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7", 7),
        ("12x", 12),
        ("  42", 42),
        ("3.9", 3),
        ("+5", 5),
        ("-2", -2),
    ],
)
def test_validate_id_parses_leading_integer(raw, expected):
    assert validate_id(raw) == expected

# tests/normalizers/test_fields.py
import math

import pytest

from alchemist.normalizers.fields import (
    PhaseSyntax,
    as_text,
    canonical_phases,
    detect_phase_syntax,
    is_blank,
    parse_int,
    parse_json_attributes,
    parse_phases,
    split_list,
    split_set,
)


# -----------------------------
# Phase grammar
# -----------------------------
@pytest.mark.parametrize("cell", ["[1,2,3]", "1-3", "1,2,3", " [3, 1, 2, 2] ", "3,2,1,1"])
def test_all_phase_syntaxes_share_one_canonical_form(cell):
    """
    @brief
    Every supported phase syntax yields the same canonical tuple.

    @details
    Array, range and list forms of the set {1, 2, 3} must compare equal
    after parsing, regardless of order or repetition in the cell.
    """
    # --- Act ---
    result = parse_phases(cell)

    # --- Assert ---
    assert result.ok
    assert result.value == (1, 2, 3)


@pytest.mark.parametrize(
    ("cell", "fragment"),
    [
        ("1,,3", "entry 2 is empty"),
        ("x-y", "malformed phase range 'x-y'"),
        ("3-1", "start 3 is greater than end 1"),
        ('[1,"a"]', "is not an integer"),
        ("[1,]", "not a valid JSON array"),
        ("[-1]", "entry -1 is negative"),
        ("soon", "is not a phase list"),
    ],
)
def test_malformed_phase_cells_fail_with_reason(cell, fragment):
    result = parse_phases(cell)

    assert not result.ok
    assert result.value is None
    assert fragment in result.reason


def test_blank_phase_cell_is_empty_set():
    assert parse_phases("").value == ()
    assert parse_phases(None).ok
    assert parse_phases(float("nan")).value == ()


def test_detect_phase_syntax():
    assert detect_phase_syntax("[1]") is PhaseSyntax.ARRAY
    assert detect_phase_syntax("2 - 4") is PhaseSyntax.RANGE
    assert detect_phase_syntax("2, 4") is PhaseSyntax.LIST
    assert detect_phase_syntax("two") is None
    assert detect_phase_syntax("") is None


def test_single_number_cell_is_a_list():
    # numeric cells from spreadsheets arrive as int/float
    assert parse_phases(4).value == (4,)
    assert parse_phases(4.0).value == (4,)


def test_canonical_phases_sorts_and_dedups():
    assert canonical_phases([5, 1, 5, 3]) == (1, 3, 5)


# -----------------------------
# Integers
# -----------------------------
def test_parse_int_accepts_integral_forms():
    assert parse_int(3).value == 3
    assert parse_int(" +2 ").value == 2
    assert parse_int("3.0").value == 3
    assert parse_int(4.0).value == 4


@pytest.mark.parametrize(
    ("raw", "fragment"),
    [
        (None, "value is missing"),
        ("  ", "value is missing"),
        (True, "expected an integer, got true"),
        (2.5, "expected an integer, got 2.5"),
        ("high", "expected an integer, got 'high'"),
    ],
)
def test_parse_int_rejects_non_integers(raw, fragment):
    result = parse_int(raw)
    assert not result.ok
    assert result.reason == fragment


def test_parse_int_bounds_are_inclusive():
    assert parse_int(1, minimum=1, maximum=5).ok
    assert parse_int(5, minimum=1, maximum=5).ok
    assert parse_int(0, minimum=1).reason == "0 is below the minimum of 1"
    assert parse_int("7", maximum=5).reason == "7 is above the maximum of 5"


# -----------------------------
# Lists, text and JSON
# -----------------------------
def test_split_list_keeps_order_and_repeats():
    assert split_list("T1, T2,,T1 ").value == ("T1", "T2", "T1")
    assert split_list(["a", " b", ""]).value == ("a", "b")
    assert split_list(None).value == ()


def test_split_set_keeps_first_occurrence():
    assert split_set("python,sql,python").value == ("python", "sql")


def test_is_blank_and_as_text():
    assert is_blank(None) and is_blank(" ") and is_blank(math.nan)
    assert not is_blank(0)
    assert as_text(1.0) == "1"
    assert as_text(1.5) == "1.5"
    assert as_text(False) == "false"
    assert as_text(" C1 ") == "C1"
    assert as_text([1, 2]) == "[1, 2]"


def test_parse_json_attributes():
    assert parse_json_attributes('{"a": 1}').value == {"a": 1}
    assert parse_json_attributes({"a": 1}).value == {"a": 1}
    assert parse_json_attributes("").ok
    assert parse_json_attributes("").value is None

    bad = parse_json_attributes("{bad json")
    assert not bad.ok
    assert "at position 1" in bad.reason


# -----------------------------
# Oversized and hostile cells
# -----------------------------
@pytest.mark.parametrize("cell", ["1" * 5000, "1" * 400 + ".0", "-" + "9" * 4400])
def test_parse_int_out_of_range_strings_fail(cell):
    """
    @brief
    Digit strings beyond the int conversion limit, and integral float
    literals beyond the double range, are failures rather than exceptions.
    """
    result = parse_int(cell, minimum=1)

    assert not result.ok
    assert "out of range" in result.reason


def test_parse_int_long_values_are_clipped_in_reason():
    result = parse_int("9" * 200, maximum=5)

    assert not result.ok
    assert result.reason.endswith("... is above the maximum of 5")
    assert len(result.reason) < 100


@pytest.mark.parametrize("cell", ["0-5000000", "[1, 2, 5000]", "1,5000", "1001"])
def test_phases_above_max_phase_fail(cell):
    """
    @brief
    Phase numbers above max_phase fail in every syntax.

    @details
    Ranges are bounded before expansion, so a huge range fails immediately.
    """
    result = parse_phases(cell, max_phase=1000)

    assert not result.ok
    assert "above the highest phase 1000" in result.reason


def test_max_phase_is_inclusive():
    assert parse_phases("998-1000", max_phase=1000).value == (998, 999, 1000)


def test_deeply_nested_phase_array_fails():
    cell = "[" * 100000 + "]" * 100000

    result = parse_phases(cell)

    assert not result.ok
    assert "nested too deeply" in result.reason
    assert len(result.reason) < 200


@pytest.mark.parametrize("cell", ["NaN", '{"budget": Infinity}', "[-Infinity]"])
def test_parse_json_attributes_rejects_non_finite_constants(cell):
    result = parse_json_attributes(cell)

    assert not result.ok
    assert "is not a valid JSON value" in result.reason


def test_parse_json_attributes_oversized_or_deep_documents_fail():
    too_long = parse_json_attributes("1" * 5000)
    too_deep = parse_json_attributes("[" * 100000 + "]" * 100000)

    assert not too_long.ok and too_long.reason
    assert not too_deep.ok
    assert too_deep.reason == "document is nested too deeply"

"""Determinism gate over two decoded runs."""

import logging

from gotestsynth.runtime.validate import RunTimeInfo, decode_run, validate

INT_7 = '{"type":"int","var_name":"x","val":"7"}'
INT_8 = '{"type":"int","var_name":"x","val":"8"}'
ERR_NIL = '{"type":"error","var_name":"err","val":"nil"}'
PTR_7 = '{"type":"pointer","var_name":"p","val":"0xc000012345","child":{"type":"int","var_name":"y","val":"7"}}'
PTR_7_MOVED = '{"type":"pointer","var_name":"p","val":"0xc000099999","child":{"type":"int","var_name":"y","val":"7"}}'


def test_identical_runs_are_valid() -> None:
    info = validate([INT_7, ERR_NIL], [INT_7, ERR_NIL])
    assert info.is_valid
    assert info.assert_stmts == ["s.EqualValues(int(7), x)", "s.NoError(err)"]
    assert info.second_run == info.assert_stmts


def test_different_values_are_invalid(caplog) -> None:
    with caplog.at_level(logging.INFO):
        info = validate([INT_7], [INT_8])
    assert not info.is_valid
    assert "runs disagree" in caplog.text


def test_different_lengths_are_invalid() -> None:
    assert not validate([INT_7, ERR_NIL], [INT_7]).is_valid


def test_pointer_addresses_do_not_matter() -> None:
    info = validate([PTR_7], [PTR_7_MOVED])
    assert info.is_valid
    assert info.assert_stmts == ["y := *p", "s.EqualValues(int(7), y)"]


def test_runs_are_decoded_independently() -> None:
    info = validate([PTR_7, PTR_7], [PTR_7, PTR_7])
    assert info.is_valid
    assert info.assert_stmts[2] == "y = *p"
    assert info.second_run[0] == "y := *p"


def test_empty_runs_are_valid() -> None:
    info = validate([], [""])
    assert info.is_valid
    assert info.assert_stmts == []


def test_decode_run_skips_blank_lines() -> None:
    assert decode_run(["", INT_7, "   "]) == ["s.EqualValues(int(7), x)"]


def test_set_is_valid_records_outcome() -> None:
    info = RunTimeInfo(assert_stmts=["a", "b"], second_run=["a", "b"])
    assert not info.is_valid
    assert info.set_is_valid()
    assert info.is_valid
    info.second_run = ["a", "c"]
    assert not info.set_is_valid()
    assert not info.is_valid


def test_map_key_difference_is_invalid() -> None:
    first = '{"type":"map","var_name":"m","map_key_type":"string","arr_ident":"k","val":"a","child":{"type":"int","var_name":"m[k]","val":"1"}}'
    second = first.replace('"val":"a"', '"val":"b"')
    info = validate([first], [second])
    assert not info.is_valid
    assert info.assert_stmts == ['s.EqualValues(int(1), m["a"])']
    assert info.second_run == ['s.EqualValues(int(1), m["b"])']

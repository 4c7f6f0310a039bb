"""
test_record_parser.py
─────────────────────
Pytest tests for the text-format record parser.

Run:  pytest tests/test_record_parser.py -v
"""

import numpy as np
import pytest

from embedstore.exceptions import FormatError
from embedstore.record_parser import EmbeddingRecord, iter_records, parse_record


class TestParseRecord:

    def test_parses_key_and_floats(self):
        rec = parse_record("king 0.5 -1.25 3e-2\n", 1)
        assert isinstance(rec, EmbeddingRecord)
        assert rec.key == "king"
        assert rec.vector.dtype == np.float32
        np.testing.assert_allclose(rec.vector, [0.5, -1.25, 0.03], rtol=1e-6)
        assert rec.line_num == 1

    def test_tabs_and_runs_of_spaces(self):
        rec = parse_record("a\t1.0   2.0 \t 3.0", 7)
        np.testing.assert_allclose(rec.vector, [1.0, 2.0, 3.0])

    def test_trailing_whitespace_is_ignored(self):
        rec = parse_record("a 1 2   \r\n", 1)
        assert len(rec.vector) == 2

    def test_empty_line_is_blank(self):
        rec = parse_record("", 3)
        assert rec.is_blank
        assert rec.key == ""
        assert rec.vector is None

    def test_leading_whitespace_is_blank(self):
        rec = parse_record("  a 1 2", 3)
        assert rec.is_blank

    def test_whitespace_only_is_blank(self):
        assert parse_record("   \t \n", 1).is_blank

    def test_key_only_gives_empty_vector(self):
        rec = parse_record("lonely\n", 1)
        assert not rec.is_blank
        assert len(rec.vector) == 0

    def test_no_normalization(self):
        rec = parse_record("a 3 4", 1)
        np.testing.assert_allclose(rec.vector, [3.0, 4.0])

    def test_bad_float_reports_line_and_token(self):
        with pytest.raises(FormatError) as exc_info:
            parse_record("x notanumber 2\n", 1)
        err = exc_info.value
        assert err.line_num == 1
        assert err.token_index == 1
        assert "line 1" in str(err)
        assert "notanumber" in str(err)

    def test_bad_float_later_position(self):
        with pytest.raises(FormatError) as exc_info:
            parse_record("x 1.0 2.0 oops", 12)
        assert exc_info.value.line_num == 12
        assert exc_info.value.token_index == 3

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_record("x 1,5", 1)

    def test_unicode_whitespace_stays_in_key(self):
        rec = parse_record("a\u00a0b 1 0\n", 1)
        assert rec.key == "a\u00a0b"
        np.testing.assert_allclose(rec.vector, [1.0, 0.0])

    @pytest.mark.parametrize("sep", ["\u0085", "\u2028", "\u001c", "\u3000"])
    def test_other_unicode_separators_stay_in_key(self, sep):
        rec = parse_record(f"x{sep}y 0.5 0.5", 1)
        assert rec.key == f"x{sep}y"
        assert len(rec.vector) == 2

    def test_leading_unicode_space_is_not_blank(self):
        rec = parse_record("\u00a0word 1", 1)
        assert not rec.is_blank
        assert rec.key == "\u00a0word"

    @pytest.mark.parametrize("token", ["1_0", "inf", "nan", "-infinity", "0x1p3", "1.0e", "+", "."])
    def test_rejects_non_decimal_tokens(self, token):
        with pytest.raises(FormatError) as exc_info:
            parse_record(f"a {token} 1", 4)
        assert exc_info.value.token_index == 1

    @pytest.mark.parametrize("token,expected", [
        ("NaN", None),
        ("-Infinity", float("-inf")),
        ("1.5f", 1.5),
        ("2D", 2.0),
        (".25", 0.25),
        ("3.", 3.0),
        ("+1E2", 100.0),
    ])
    def test_accepts_float_literals(self, token, expected):
        value = parse_record(f"a {token}", 1).vector[0]
        if expected is None:
            assert np.isnan(value)
        else:
            assert value == expected


class TestIterRecords:

    def test_numbers_lines_from_one(self):
        records = list(iter_records(["a 1 0\n", "\n", "b 0 1\n"]))
        assert [r.line_num for r in records] == [1, 2, 3]
        assert records[1].is_blank

    def test_stops_at_first_error(self):
        lines = ["a 1 0\n", "b bad 1\n", "c 0 1\n"]
        seen = []
        with pytest.raises(FormatError) as exc_info:
            for rec in iter_records(lines):
                seen.append(rec.key)
        assert seen == ["a"]
        assert exc_info.value.line_num == 2

    def test_is_lazy(self):
        def lines():
            yield "a 1 0\n"
            raise AssertionError("should not be read")

        it = iter_records(lines())
        assert next(it).key == "a"

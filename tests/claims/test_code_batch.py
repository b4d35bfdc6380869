from __future__ import annotations

from pathlib import Path

import pytest

from coupon_drop.claims.batch import CODE_ALPHABET, generate_raw_codes, load_codes_from_file


def test_generate_raw_codes_returns_unique_prefixed_codes() -> None:
    existing = {"DROP-AAAAAAAA"}

    codes = generate_raw_codes(count=20, token_length=8, prefix="DROP-", existing_codes=existing)

    assert len(codes) == 20
    assert len(set(codes)) == 20
    assert "DROP-AAAAAAAA" not in codes
    for code in codes:
        assert code.startswith("DROP-")
        assert all(char in CODE_ALPHABET for char in code.removeprefix("DROP-"))


@pytest.mark.parametrize("kwargs", [{"count": 0}, {"count": 1, "token_length": 0}])
def test_generate_raw_codes_rejects_non_positive_sizes(kwargs: dict[str, int]) -> None:
    with pytest.raises(ValueError):
        generate_raw_codes(**kwargs)


def test_load_codes_from_csv_with_code_column(tmp_path: Path) -> None:
    path = tmp_path / "codes.csv"
    path.write_text("code,note\nDISC10,first\n,blank\nSAVE20,second\n", encoding="utf-8")

    assert load_codes_from_file(path) == ["DISC10", "SAVE20"]


def test_load_codes_from_plain_lines(tmp_path: Path) -> None:
    path = tmp_path / "codes.txt"
    path.write_text("DISC10\n\n  SAVE20  \n", encoding="utf-8")

    assert load_codes_from_file(path) == ["DISC10", "SAVE20"]

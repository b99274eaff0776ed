from __future__ import annotations

import pytest

from stig_mapping.normalization import normalize_reference_token, split_reference_codes


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("CCI-000196", "CCI-000196"),
        ("cci-000196", "CCI-000196"),
        ("196", "CCI-000196"),
        ("CCI-196", "CCI-000196"),
        ("002235", "CCI-002235"),
        ("CCI-ABC", "CCI-ABC"),
        ("CCI-", ""),
        ("CCI-$%", ""),
        ("1234567", ""),
        ("V-205625", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_reference_token(token: str | None, expected: str) -> None:
    assert normalize_reference_token(token) == expected


def test_split_reference_codes_splits_and_deduplicates_in_order() -> None:
    codes = split_reference_codes(
        "CCI-000366, CCI-000196;196",
        ["CCI-000054", None, "CCI-000366"],
        None,
        "000197\n CCI-002235",
    )

    assert codes == ["CCI-000366", "CCI-000196", "CCI-000054", "CCI-000197", "CCI-002235"]


def test_split_reference_codes_skips_non_codes() -> None:
    assert split_reference_codes("none", ["n/a", ""], "") == []
    assert split_reference_codes() == []


def test_split_reference_codes_drops_dangling_prefix() -> None:
    assert split_reference_codes("CCI- 000196") == ["CCI-000196"]
    assert split_reference_codes(["CCI-", "CCI-000366"]) == ["CCI-000366"]

import datetime as dt
from decimal import Decimal

import pytest

from freight_cms.data.validators import (
    coerce_flag,
    coerce_json_list,
    is_positive_number,
    is_valid_cpf,
    is_valid_date,
    is_valid_plate,
)
from freight_cms.utils.formatting import (
    format_balance,
    format_cpf,
    format_currency,
    format_date,
    format_phone,
    format_plate,
    format_price_per_km_ton,
    format_price_per_liter,
)


class TestFormatting:
    def test_currency_uses_pt_br_separators(self):
        assert format_currency(Decimal("1234567.891")) == "1.234.567,89"
        assert format_currency(None) == "0,00"

    def test_currency_rounds_half_up(self):
        assert format_currency(Decimal("0.005")) == "0,01"

    def test_rate_precision(self):
        assert format_price_per_liter(Decimal("5.8")) == "5,8000"
        assert format_price_per_km_ton(Decimal("0.25")) == "0,250000"

    def test_date(self):
        assert format_date(dt.date(2026, 1, 12)) == "12/01/2026"
        assert format_date("2026-01-12T03:00:00.000Z") == "12/01/2026"

    def test_balance(self):
        assert format_balance(Decimal("0")) == "-"
        assert format_balance(Decimal("750")) == "750,00"

    def test_identifiers(self):
        assert format_cpf("52998224725") == "529.982.247-25"
        assert format_cpf(None) == "-"
        assert format_phone("11987654321") == "(11) 98765-4321"
        assert format_phone("1133334444") == "(11) 3333-4444"
        assert format_plate("abc1d23") == "ABC-1D23"


class TestValidators:
    def test_cpf_checksum(self):
        assert is_valid_cpf("529.982.247-25")
        assert not is_valid_cpf("529.982.247-24")
        assert not is_valid_cpf("111.111.111-11")
        assert not is_valid_cpf("1234")

    @pytest.mark.parametrize("plate", ["ABC-1234", "abc-1d23", " XYZ-9A87 "])
    def test_valid_plates(self, plate):
        assert is_valid_plate(plate)

    @pytest.mark.parametrize("plate", ["ABC1234", "AB-1234", "ABC-12345", ""])
    def test_invalid_plates(self, plate):
        assert not is_valid_plate(plate)

    def test_dates(self):
        assert is_valid_date("2026-01-12")
        assert not is_valid_date("2026-02-30")
        assert not is_valid_date("12/01/2026")

    def test_positive_numbers(self):
        assert is_positive_number("12.5")
        assert not is_positive_number(0)
        assert not is_positive_number("abc")
        assert not is_positive_number(True)

    def test_flags(self):
        assert coerce_flag(1) is True
        assert coerce_flag("1") is True
        assert coerce_flag(None) is False
        assert coerce_flag(0) is False

    def test_json_list(self):
        assert coerce_json_list('["ABC-1234"]') == ["ABC-1234"]
        assert coerce_json_list(None) == []
        with pytest.raises(ValueError):
            coerce_json_list("ABC-1234")

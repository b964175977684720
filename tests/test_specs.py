import pytest

from framerate.builder.specs import (
    normalize_form_factor,
    normalize_memory_type,
    normalize_socket,
    parse_watts,
    spec_value,
)
from framerate.schemas import Product


@pytest.mark.parametrize("raw", ["120 W", "120W", 120, "  120 ", "120 watts"])
def test_parse_watts_reads_first_number(raw):
    assert parse_watts(raw) == 120


@pytest.mark.parametrize("raw", ["", None, "N/A", 0, False, "No posee"])
def test_parse_watts_defaults_to_zero(raw):
    assert parse_watts(raw) == 0


def test_parse_watts_keeps_numbers_as_given():
    assert parse_watts(65.5) == 65.5


def test_parse_watts_only_takes_first_digit_run():
    assert parse_watts("3 x 120 mm") == 3
    assert parse_watts("12.5W") == 12


def test_spec_value_falls_back_through_keys():
    psu = Product(name="PSU", specs={"power_output": "", "watts": "650W", "wattage": "700W"})
    assert spec_value(psu, "power_output", "watts", "wattage") == "650W"
    assert spec_value(psu, "missing") is None
    assert spec_value(None, "watts") is None


def test_normalizers():
    assert normalize_socket("LGA 1700") == normalize_socket("lga-1700") == "lga1700"
    assert normalize_socket("am-5") == normalize_socket("AM5")
    assert normalize_memory_type("ddr 5") == "DDR5"
    assert normalize_form_factor("Micro-ATX") == normalize_form_factor("micro atx") == "MICROATX"

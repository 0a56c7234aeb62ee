from sheetimport.mapping.location import compose_location, normalize_port, parse_location


def test_country_and_port():
    loc = compose_location("Romania", "Constantza")

    assert loc.value == "RO-Constanta"
    assert loc.country_code == "RO"
    assert loc.needs_review is False


def test_country_only():
    assert compose_location("Egypt", "").value == "EG"


def test_port_only_needs_review():
    loc = compose_location("", "Odessa")

    assert loc.value == "Odessa"
    assert loc.needs_review is True
    assert loc.country_degraded is False


def test_neither_keeps_existing_value():
    assert compose_location(None, None, existing="RO-Constanta").value == "RO-Constanta"
    assert compose_location(None, None).value == ""


def test_unverified_country_is_flagged():
    loc = compose_location("Xyzzy", "port x")

    assert loc.value == "XY-Port X"
    assert loc.country_degraded is True
    assert loc.needs_review is True


def test_normalize_port():
    assert normalize_port("  alexandria ") == "Alexandria"
    assert normalize_port("CONSTANTZA") == "Constanta"
    assert normalize_port("") == ""


def test_parse_location():
    assert parse_location("RO-Constanta") == ("RO", "Constanta")
    assert parse_location("HT-Port-au-Prince") == ("HT", "Port-au-Prince")
    assert parse_location("Constanta") is None
    assert parse_location("-Constanta") is None
    assert parse_location(None) is None

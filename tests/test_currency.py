from budget_app.core.currency import CURRENCIES, Currency, currency_options, format_currency


def test_format_usd_groups_thousands_with_two_decimals():
    assert format_currency(1234.5, Currency.USD) == "$1,234.50"


def test_format_defaults_to_usd():
    assert format_currency(10) == "$10.00"


def test_format_eur_symbol_before():
    assert format_currency(1000000, Currency.EUR) == "€1,000,000.00"


def test_format_huf_symbol_after_without_decimals():
    assert format_currency(1234.6, Currency.HUF) == "1,235 Ft"
    assert format_currency(0, Currency.HUF) == "0 Ft"


def test_format_accepts_plain_code():
    assert format_currency(5, "EUR") == "€5.00"


def test_currency_options_cover_every_currency():
    options = currency_options()
    assert [o["value"] for o in options] == ["USD", "EUR", "HUF"]
    assert {"value": "HUF", "label": "HUF (Ft)"} in options
    assert len(options) == len(CURRENCIES)


def test_format_rounds_halves_up():
    assert format_currency(2.5, Currency.HUF) == "3 Ft"
    assert format_currency(1234.5, Currency.HUF) == "1,235 Ft"
    assert format_currency(0.125, Currency.USD) == "$0.13"
    assert format_currency(2.675, Currency.EUR) == "€2.68"

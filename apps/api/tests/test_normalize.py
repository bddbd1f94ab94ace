from datetime import date, datetime

import pytest

from data_pipeline.models import RawListing, PRICE_NOT_INFORMED, LOCATION_NOT_INFORMED
from data_pipeline.normalize import (
    clean_text,
    normalize_listings,
    parse_date_filter,
    parse_price,
    parse_relative_date,
)

NOW = datetime(2024, 11, 20, 15, 0, 0)


class TestParsePrice:
    def test_thousands_and_decimals(self):
        assert parse_price("1.234,56") == pytest.approx(1234.56)

    def test_currency_prefix_without_decimals(self):
        assert parse_price("R$ 800") == 800

    def test_thousands_group(self):
        assert parse_price("R$ 12.500") == 12500

    def test_sentinel_is_none(self):
        assert parse_price(PRICE_NOT_INFORMED) is None

    def test_no_number_is_none(self):
        assert parse_price("Grátis") is None
        assert parse_price("") is None
        assert parse_price(None) is None

    def test_zero_is_none(self):
        assert parse_price("R$ 0") is None
        assert parse_price("0,00") is None


class TestParseRelativeDate:
    def test_today(self):
        assert parse_relative_date("hoje", now=NOW) == datetime(2024, 11, 20)

    def test_today_with_time_and_case(self):
        assert parse_relative_date("  Hoje, 14:30 ", now=NOW) == datetime(2024, 11, 20)

    def test_yesterday(self):
        assert parse_relative_date("Ontem, 09:12", now=NOW) == datetime(2024, 11, 19)

    def test_days_ago(self):
        assert parse_relative_date("3 dias", now=NOW) == datetime(2024, 11, 17)
        assert parse_relative_date("há 1 dia", now=NOW) == datetime(2024, 11, 19)

    def test_hours_ago_keeps_time_of_day(self):
        assert parse_relative_date("2 horas", now=NOW) == datetime(2024, 11, 20, 13, 0)
        assert parse_relative_date("1 hora", now=NOW) == datetime(2024, 11, 20, 14, 0)

    def test_hours_ago_across_midnight(self):
        early = datetime(2024, 11, 20, 1, 30)
        assert parse_relative_date("3 horas", now=early) == datetime(2024, 11, 19, 22, 30)

    def test_literal_date_day_first(self):
        assert parse_relative_date("15/11/2024", now=NOW) == datetime(2024, 11, 15)
        assert parse_relative_date("5/3/2024", now=NOW) == datetime(2024, 3, 5)

    def test_two_digit_year_uses_strptime_window(self):
        # %y: 00-68 -> 20xx, 69-99 -> 19xx
        assert parse_relative_date("05/03/24", now=NOW) == datetime(2024, 3, 5)
        assert parse_relative_date("05/03/70", now=NOW) == datetime(1970, 3, 5)

    def test_impossible_literal_date(self):
        assert parse_relative_date("31/02/2024", now=NOW) is None

    def test_iso_datetime_attribute(self):
        assert parse_relative_date("2024-11-15T10:00:00", now=NOW) == datetime(2024, 11, 15)

    def test_unknown_text(self):
        assert parse_relative_date("xyz", now=NOW) is None
        assert parse_relative_date("", now=NOW) is None
        assert parse_relative_date("   ", now=NOW) is None
        assert parse_relative_date(None, now=NOW) is None

    def test_deterministic_and_idempotent(self):
        for text in ["hoje", "ontem", "3 dias", "2 horas", "15/11/2024"]:
            first = parse_relative_date(text, now=NOW)
            assert parse_relative_date(text, now=NOW) == first


class TestParseDateFilter:
    def test_iso(self):
        assert parse_date_filter("2024-11-15") == date(2024, 11, 15)

    def test_brazilian(self):
        assert parse_date_filter("15/11/2024") == date(2024, 11, 15)

    def test_invalid_is_ignored(self):
        assert parse_date_filter("amanhã") is None
        assert parse_date_filter("2024-13-40") is None
        assert parse_date_filter(None) is None


class TestNormalizeListings:
    def test_ids_order_and_batch_timestamp(self):
        raws = [
            RawListing(title="A", link="https://x/a", price_text="R$ 1.000", date_text="3 dias"),
            RawListing(title="B", link="https://x/b", price_text="R$ 20", date_text="hoje"),
            RawListing(title="C", link="https://x/c"),
        ]

        items = normalize_listings(raws, now=NOW)

        assert [i.id for i in items] == [1, 2, 3]
        assert [i.title for i in items] == ["A", "B", "C"]
        assert {i.scraped_at for i in items} == {"2024-11-20 15:00:00"}
        assert items[0].price == 1000
        assert items[0].date_parsed == "2024-11-17"
        assert items[1].date_parsed == "2024-11-20"

    def test_all_optional_fields_missing_never_raises(self):
        raw = RawListing(title="Só título", link="https://x/only")

        [item] = normalize_listings([raw], now=NOW)

        assert item.price is None
        assert item.price_text == PRICE_NOT_INFORMED
        assert item.location == LOCATION_NOT_INFORMED
        assert item.date_text is None
        assert item.date_parsed is None
        assert item.image is None

    def test_unparseable_fields_become_none(self):
        raw = RawListing(title="T", link="https://x/t", price_text="A combinar", date_text="semana passada")

        [item] = normalize_listings([raw], now=NOW)

        assert item.price is None
        assert item.date_parsed is None
        assert item.date_text == "semana passada"

    def test_empty_input(self):
        assert normalize_listings([], now=NOW) == []


def test_clean_text_collapses_whitespace():
    assert clean_text("  iPhone\n 13 \t 128GB ") == "iPhone 13 128GB"
    assert clean_text(None) == ""

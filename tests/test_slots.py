"""Tests for date/time slot utilities."""
from datetime import date, datetime

import pytest

from turni.models.slots import (
    GIORNI,
    OrarioTurno,
    date_range,
    durata_ore,
    easter_sunday,
    festivita_in_range,
    festivita_italiane,
    format_time,
    giorno_settimana,
    nome_festivita,
    nome_giorno,
    normalize_day,
    parse_time,
    range_minutes,
    time_ranges_overlap,
    to_date,
    week_bounds,
    week_dates,
)


class TestDays:
    """Tests for weekday numbering and normalization."""

    def test_giorni_start_monday(self):
        assert GIORNI[0] == "Lunedì"
        assert GIORNI[6] == "Domenica"
        assert len(GIORNI) == 7

    def test_nome_giorno(self):
        assert nome_giorno(1) == "Lunedì"
        assert nome_giorno(6) == "Sabato"
        assert nome_giorno(0) == ""
        assert nome_giorno(8) == ""

    def test_giorno_settimana(self):
        """Test ISO weekday numbering (Monday=1)."""
        assert giorno_settimana(date(2025, 3, 3)) == 1
        assert giorno_settimana("2025-03-09") == 7

    def test_normalize_day(self):
        """Test day normalization from various formats."""
        # Numbers
        assert normalize_day(1) == 1
        assert normalize_day("7") == 7

        # Italian, with and without accents
        assert normalize_day("lunedì") == 1
        assert normalize_day("Venerdi") == 5
        assert normalize_day("sab") == 6

        # English
        assert normalize_day("sunday") == 7
        assert normalize_day("Wed") == 3

    def test_normalize_day_invalid(self):
        assert normalize_day(0) is None
        assert normalize_day(8) is None
        assert normalize_day("domani") is None
        assert normalize_day(None) is None
        assert normalize_day(True) is None


class TestTimes:
    """Tests for time parsing and range arithmetic."""

    def test_parse_time(self):
        assert parse_time("00:00") == 0
        assert parse_time("09:30") == 570
        assert parse_time("24:00") == 1440
        assert parse_time("18:00:00") == 1080

    @pytest.mark.parametrize("value", ["9", "25:00", "12:60", "ab:cd", "24:30"])
    def test_parse_time_invalid(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_format_time(self):
        assert format_time(570) == "09:30"
        assert format_time(1500) == "01:00"

    def test_overnight_range(self):
        """Test that a range ending before it starts runs past midnight."""
        assert range_minutes("22:00", "06:00") == (1320, 1800)
        assert durata_ore("22:00", "06:00") == 8.0

    def test_overlap_is_half_open(self):
        """Test that touching ranges do not overlap."""
        assert time_ranges_overlap("09:00", "13:00", "12:00", "18:00")
        assert not time_ranges_overlap("09:00", "13:00", "13:00", "18:00")
        assert not time_ranges_overlap("14:00", "18:00", "09:00", "14:00")

    def test_orario_turno_duration(self):
        """Test explicit duration overrides the clock span."""
        assert OrarioTurno("09:00", "18:00").ore == 9.0
        assert OrarioTurno("09:00", "18:00", durata=8).ore == 8.0

    def test_orario_from_dict_validates(self):
        with pytest.raises(ValueError):
            OrarioTurno.from_dict({"inizio": "9h", "fine": "18:00"})


class TestDates:
    """Tests for date coercion and ranges."""

    def test_to_date(self):
        assert to_date("2025-03-03") == date(2025, 3, 3)
        assert to_date("2025-03-03T10:00:00") == date(2025, 3, 3)
        assert to_date(datetime(2025, 3, 3, 10)) == date(2025, 3, 3)

    def test_to_date_invalid(self):
        with pytest.raises(ValueError, match="Invalid date"):
            to_date("03/03/2025")

    def test_date_range_inclusive(self):
        days = date_range("2025-03-03", "2025-03-09")
        assert len(days) == 7
        assert days[0] == date(2025, 3, 3)
        assert days[-1] == date(2025, 3, 9)

    def test_date_range_reversed(self):
        with pytest.raises(ValueError):
            date_range("2025-03-09", "2025-03-03")

    def test_week_bounds(self):
        assert week_bounds("2025-03-06") == (date(2025, 3, 3), date(2025, 3, 9))

    def test_week_dates(self):
        assert week_dates(date(2025, 3, 3))[-1] == date(2025, 3, 9)


class TestHolidays:
    """Tests for Italian holidays."""

    @pytest.mark.parametrize("year,expected", [
        (2024, date(2024, 3, 31)),
        (2025, date(2025, 4, 20)),
        (2026, date(2026, 4, 5)),
    ])
    def test_easter(self, year, expected):
        assert easter_sunday(year) == expected

    def test_festivita_count(self):
        assert len(festivita_italiane(2025)) == 12

    def test_pasquetta(self):
        assert nome_festivita("2025-04-21") == "Pasquetta"

    def test_not_a_holiday(self):
        assert nome_festivita("2025-03-04") is None

    def test_festivita_in_range_spans_years(self):
        found = festivita_in_range("2025-12-24", "2026-01-07")
        assert [d for d, _ in found] == [
            date(2025, 12, 25), date(2025, 12, 26), date(2026, 1, 1), date(2026, 1, 6),
        ]

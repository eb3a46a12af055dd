"""
Time and Slot Utilities
=======================
Pure date/time arithmetic shared by every algorithm.

Conventions:
    - Weekdays are numbered 1-7 (Lunedì=1 ... Domenica=7)
    - Times are "HH:MM" strings, converted to minutes from midnight
    - Ranges are half-open: [start, end)
    - A range whose end is not after its start runs past midnight
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple, Union

GIORNI: List[str] = ["Lunedì", "Martedì", "Mercoledì", "Giovedì", "Venerdì", "Sabato", "Domenica"]
WEEKEND: Tuple[int, int] = (6, 7)

MINUTES_PER_DAY = 24 * 60

# Day name aliases -> weekday number
_DAY_ALIASES: Dict[str, int] = {}
for _n, _names in enumerate([
    ("lunedì", "lunedi", "lun", "monday", "mon", "lu"),
    ("martedì", "martedi", "mar", "tuesday", "tue", "ma"),
    ("mercoledì", "mercoledi", "mer", "wednesday", "wed", "me"),
    ("giovedì", "giovedi", "gio", "thursday", "thu", "gi"),
    ("venerdì", "venerdi", "ven", "friday", "fri", "ve"),
    ("sabato", "sab", "saturday", "sat", "sa"),
    ("domenica", "dom", "sunday", "sun", "do"),
], start=1):
    for _alias in _names:
        _DAY_ALIASES[_alias] = _n

DateLike = Union[date, str]


def to_date(value: DateLike) -> date:
    """Coerce an ISO string (YYYY-MM-DD) or date into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def giorno_settimana(d: DateLike) -> int:
    """Weekday number 1-7 (Monday=1)."""
    return to_date(d).isoweekday()


def nome_giorno(numero: int) -> str:
    """Italian name for a weekday number, empty string when out of range."""
    if 1 <= numero <= 7:
        return GIORNI[numero - 1]
    return ""


def normalize_day(value) -> Optional[int]:
    """
    Normalize a day reference to a weekday number.

    Accepts integers 1-7, numeric strings, Italian and English names
    (with or without accents) and their common abbreviations.

    Returns:
        Weekday number 1-7, or None if the value is not recognized
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 1 <= value <= 7 else None
    key = str(value).strip().lower().rstrip(".")
    if key.isdigit():
        n = int(key)
        return n if 1 <= n <= 7 else None
    return _DAY_ALIASES.get(key)


def parse_time(value: str) -> int:
    """
    Parse "HH:MM" (or "HH:MM:SS") into minutes from midnight.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    parts = str(value).strip().split(":")
    if len(parts) < 2 or len(parts) > 3:
        raise ValueError(f"Invalid time (expected HH:MM): {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValueError(f"Invalid time (expected HH:MM): {value!r}") from e
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes > 0):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Format minutes from midnight as HH:MM."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def range_minutes(start: str, end: str) -> Tuple[int, int]:
    """Convert a time range to (start, end) minutes, extending overnight ranges past 24:00."""
    s = parse_time(start)
    e = parse_time(end)
    if e <= s:
        e += MINUTES_PER_DAY
    return s, e


def durata_ore(start: str, end: str) -> float:
    """Duration of a time range in hours."""
    s, e = range_minutes(start, end)
    return (e - s) / 60


def time_ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Half-open overlap test: not (end1 <= start2 or end2 <= start1)."""
    s1, e1 = range_minutes(start1, end1)
    s2, e2 = range_minutes(start2, end2)
    return not (e1 <= s2 or e2 <= s1)


@dataclass(frozen=True)
class OrarioTurno:
    """A shift time window, with an optional explicit paid duration."""
    inizio: str
    fine: str
    durata: Optional[float] = None  # Overrides the clock span (e.g. unpaid break)

    @property
    def ore(self) -> float:
        if self.durata is not None:
            return float(self.durata)
        return durata_ore(self.inizio, self.fine)

    def to_dict(self) -> dict:
        d = {"inizio": self.inizio, "fine": self.fine}
        if self.durata is not None:
            d["durata"] = self.durata
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "OrarioTurno":
        inizio, fine = str(d["inizio"]), str(d["fine"])
        # Validate eagerly
        parse_time(inizio)
        parse_time(fine)
        durata = d.get("durata")
        return cls(inizio=inizio, fine=fine, durata=float(durata) if durata is not None else None)


def week_bounds(d: DateLike) -> Tuple[date, date]:
    """Monday and Sunday of the week containing d."""
    day = to_date(d)
    monday = day - timedelta(days=day.isoweekday() - 1)
    return monday, monday + timedelta(days=6)


def date_range(start: DateLike, end: DateLike) -> List[date]:
    """
    Inclusive list of dates from start to end.

    Raises:
        ValueError: If end is before start
    """
    s, e = to_date(start), to_date(end)
    if e < s:
        raise ValueError(f"End date {e} is before start date {s}")
    return [s + timedelta(days=i) for i in range((e - s).days + 1)]


def week_dates(week_start: DateLike) -> List[date]:
    """The seven dates starting at week_start."""
    s = to_date(week_start)
    return [s + timedelta(days=i) for i in range(7)]


def easter_sunday(year: int) -> date:
    """Easter Sunday (Gregorian) via Gauss's computus."""
    a = year % 19
    b = year % 4
    c = year % 7
    k = year // 100
    p = (13 + 8 * k) // 25
    q = k // 4
    m = (15 - p + k - q) % 30
    n = (4 + k - q) % 7
    d = (19 * a + m) % 30
    e = (2 * b + 4 * c + 6 * d + n) % 7

    # Gauss exceptions
    if d == 29 and e == 6:
        return date(year, 4, 19)
    if d == 28 and e == 6 and (11 * m + 11) % 30 < 19:
        return date(year, 4, 18)

    day = 22 + d + e
    if day > 31:
        return date(year, 4, day - 31)
    return date(year, 3, day)


def festivita_italiane(year: int) -> Dict[date, str]:
    """Italian national holidays for a year, keyed by date."""
    easter = easter_sunday(year)
    return {
        date(year, 1, 1): "Capodanno",
        date(year, 1, 6): "Epifania",
        easter: "Pasqua",
        easter + timedelta(days=1): "Pasquetta",
        date(year, 4, 25): "Festa della Liberazione",
        date(year, 5, 1): "Festa dei Lavoratori",
        date(year, 6, 2): "Festa della Repubblica",
        date(year, 8, 15): "Ferragosto",
        date(year, 11, 1): "Tutti i Santi",
        date(year, 12, 8): "Immacolata Concezione",
        date(year, 12, 25): "Natale",
        date(year, 12, 26): "Santo Stefano",
    }


def nome_festivita(d: DateLike) -> Optional[str]:
    """Holiday name if d is an Italian national holiday, else None."""
    day = to_date(d)
    return festivita_italiane(day.year).get(day)


def festivita_in_range(start: DateLike, end: DateLike) -> List[Tuple[date, str]]:
    """Holidays falling in an inclusive date range, in date order."""
    s, e = to_date(start), to_date(end)
    found = []
    for year in range(s.year, e.year + 1):
        for day, name in festivita_italiane(year).items():
            if s <= day <= e:
                found.append((day, name))
    return sorted(found)

"""
CityReport - Calendar Locale
Month and day names handed explicitly to whatever renders dates.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class CalendarLocale:
    """Names used by calendar widgets and date labels."""
    month_names: Tuple[str, ...]
    month_names_short: Tuple[str, ...]
    # Sunday first
    day_names: Tuple[str, ...]
    day_names_short: Tuple[str, ...]
    today: str

    def __post_init__(self):
        if len(self.month_names) != 12 or len(self.month_names_short) != 12:
            raise ValueError("A calendar locale needs 12 month names")
        if len(self.day_names) != 7 or len(self.day_names_short) != 7:
            raise ValueError("A calendar locale needs 7 day names")

    def month_name(self, month: int, short: bool = False) -> str:
        names = self.month_names_short if short else self.month_names
        return names[month - 1]

    def day_name(self, value: Union[date, datetime], short: bool = False) -> str:
        names = self.day_names_short if short else self.day_names
        # date.weekday() is Monday=0, names are Sunday first
        return names[(value.weekday() + 1) % 7]


FRENCH = CalendarLocale(
    month_names=(
        "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
        "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
    ),
    month_names_short=(
        "Janv.", "Févr.", "Mars", "Avril", "Mai", "Juin",
        "Juil.", "Août", "Sept.", "Oct.", "Nov.", "Déc.",
    ),
    day_names=(
        "Dimanche", "Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi",
    ),
    day_names_short=("Dim.", "Lun.", "Mar.", "Mer.", "Jeu.", "Ven.", "Sam."),
    today="Aujourd'hui",
)


def format_event_date(
    value: Union[date, datetime],
    locale: CalendarLocale,
    today: Optional[date] = None,
) -> str:
    """
    Human label for an event date, e.g. 'Lundi 3 Mars 2025'.

    Args:
        value: Event date or datetime
        locale: Names to use
        today: Reference day; when equal to the event day the locale's
            'today' label is returned

    Returns:
        Formatted label
    """
    day = value.date() if isinstance(value, datetime) else value
    if today is not None and day == today:
        return locale.today
    label = f"{locale.day_name(day)} {day.day} {locale.month_name(day.month)} {day.year}"
    if isinstance(value, datetime):
        label += f" {value:%H:%M}"
    return label

from datetime import datetime
from typing import Optional
from babel.numbers import format_currency as babel_format_currency
from babel.dates import format_datetime as babel_format_datetime

from storefront.configuration.settings import Configuration

configuration = Configuration()

def format_currency(value: Optional[float], currency: Optional[str] = None, locale_str: Optional[str] = None) -> str:
    return babel_format_currency(
        value or 0.0,
        currency or configuration.currency,
        locale=locale_str or configuration.locale,
    )

def format_date(date: Optional[datetime], locale_str: Optional[str] = None) -> str:
    if date is None:
        return ""
    return babel_format_datetime(date, "MMM d, yyyy HH:mm", locale=locale_str or configuration.locale)

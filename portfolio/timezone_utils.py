import pytz
from django.conf import settings
from django.utils import timezone


def get_firm_timezone():
    """
    Get the firm's timezone from settings.
    Falls back to UTC if the configured name is unknown.
    """
    try:
        return pytz.timezone(settings.TIME_ZONE)
    except pytz.exceptions.UnknownTimeZoneError:
        return pytz.UTC


def get_current_year():
    """Current calendar year in the firm's timezone."""
    return timezone.now().astimezone(get_firm_timezone()).year

# core/errors.py


class AgriSenseError(Exception):
    """Base class for all AgriSense domain errors."""


class GeocodeUnavailable(AgriSenseError):
    """Reverse/forward geocoding failed or returned an unusable payload."""


class DataUnavailable(AgriSenseError):
    """A payload lacked the data needed to build a result."""


class ForecastMalformed(DataUnavailable):
    """Forecast payload is missing the daily axis, a metric array, or has mismatched lengths."""


class ForecastUnavailable(AgriSenseError):
    """Forecast could not be fetched (transport or HTTP status error)."""


class InvalidPhoneNumber(AgriSenseError, ValueError):
    pass


class SmsUnavailable(AgriSenseError):
    """SMS transport is not configured."""


class SmsSendFailed(AgriSenseError):
    """The SMS provider rejected or failed the send."""

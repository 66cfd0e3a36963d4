"""
Dependency injection container for the application.
Constructs singletons and provides them to routes/handlers.
"""
from agrisense.app.config import settings
from agrisense.app.tools.geocode import NominatimGeocoder
from agrisense.app.tools.sms import TwilioSmsSender
from agrisense.app.tools.weather import OpenMeteoForecaster
from agrisense.app.tools.weather_cached import CachedForecaster
from agrisense.core.adapters.base import Permission
from agrisense.core.adapters.outbox import OutboxNotifier
from agrisense.core.services.advisory import AdvisorySession
from agrisense.core.services.notifications import NotificationScheduler

# Singletons - created once and reused
_notifier = None
_scheduler = None
_geocoder = None
_forecaster = None
_session = None
_sms_sender = None

def get_notifier() -> OutboxNotifier:
    """Get singleton notification outbox."""
    global _notifier
    if _notifier is None:
        _notifier = OutboxNotifier(
            permission=Permission(settings.NOTIFY_PERMISSION),
            grant_on_request=settings.NOTIFY_GRANT_ON_REQUEST,
        )
    return _notifier

def get_scheduler() -> NotificationScheduler:
    """Get singleton advisory scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = NotificationScheduler(get_notifier(), delay_sec=settings.ADVISORY_DELAY_SEC)
    return _scheduler

def get_geocoder() -> NominatimGeocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = NominatimGeocoder()
    return _geocoder

def get_forecaster() -> CachedForecaster:
    global _forecaster
    if _forecaster is None:
        _forecaster = CachedForecaster(OpenMeteoForecaster())
    return _forecaster

def get_session() -> AdvisorySession:
    """Get singleton advisory session."""
    global _session
    if _session is None:
        _session = AdvisorySession(
            geocoder=get_geocoder(),
            forecaster=get_forecaster(),
            scheduler=get_scheduler(),
            search_reverse_fail_open=settings.SEARCH_REVERSE_FAIL_OPEN,
        )
    return _session

def get_sms_sender() -> TwilioSmsSender:
    global _sms_sender
    if _sms_sender is None:
        _sms_sender = TwilioSmsSender()
    return _sms_sender

def shutdown_singletons():
    """Cancel pending advisories and drop the session state."""
    global _session
    if _session is not None:
        _session.close()
        _session = None
    if _scheduler is not None:
        _scheduler.cancel_all()

# agrisense/app/tools/sms.py
import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from agrisense.app.config import settings
from agrisense.core.errors import SmsSendFailed, SmsUnavailable

log = logging.getLogger("agrisense.sms")


class TwilioSmsSender:
    """
    Sends plain SMS through Twilio. The REST client is created on first use so
    the app can start without credentials; sending without them raises
    SmsUnavailable.
    """

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 from_number: Optional[str] = None, country_code: Optional[str] = None):
        self.account_sid = account_sid if account_sid is not None else settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token if auth_token is not None else settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number if from_number is not None else settings.TWILIO_SMS_NUMBER
        self.country_code = country_code if country_code is not None else settings.SMS_COUNTRY_CODE
        self._client: Optional[Client] = None

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def _twilio(self) -> Client:
        if not self.configured:
            raise SmsUnavailable("Twilio credentials are not configured")
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send_sync(self, phone: str, message: str) -> str:
        """Send one SMS; returns the Twilio message SID."""
        client = self._twilio()
        to = phone if phone.startswith("+") else f"{self.country_code}{phone}"
        try:
            msg = client.messages.create(body=message, from_=self.from_number, to=to)
        except TwilioException as e:
            log.error("❌ SMS send failed: %s", e)
            raise SmsSendFailed(str(e)) from e
        log.info("✅ SMS sent successfully (%s)", msg.sid)
        return msg.sid

    async def send(self, phone: str, message: str) -> str:
        # twilio's client is blocking
        return await asyncio.to_thread(self.send_sync, phone, message)

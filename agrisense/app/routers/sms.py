"""
/sms endpoint
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from agrisense.app.di import get_session, get_sms_sender
from agrisense.app.schemas import SmsRequest, SmsResponse
from agrisense.app.tools.sms import TwilioSmsSender
from agrisense.app.utils.sms_messages import compose_crop_sms, validate_phone
from agrisense.core.errors import InvalidPhoneNumber, SmsSendFailed, SmsUnavailable
from agrisense.core.services.advisory import AdvisorySession

log = logging.getLogger("agrisense.sms")

router = APIRouter(tags=["sms"])


@router.post("/sms", response_model=SmsResponse)
async def send_sms(req: SmsRequest,
                   session: AdvisorySession = Depends(get_session),
                   sender: TwilioSmsSender = Depends(get_sms_sender)):
    """Send the current crop/fertilizer summary. Invalid locations send N/A data."""
    try:
        phone = validate_phone(req.phone)
    except InvalidPhoneNumber as e:
        raise HTTPException(status_code=400, detail=str(e))

    rec = session.current()
    if rec.location is not None and not rec.location.is_valid:
        log.info("Location is not a farming area; SMS will contain N/A data")
    message = compose_crop_sms(rec)

    try:
        sid = await sender.send(phone, message)
    except SmsUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SmsSendFailed as e:
        raise HTTPException(status_code=502, detail=f"Failed to send SMS: {e}")

    return SmsResponse(success=True, sid=sid, message=message)

# medstock/routers/email_settings.py

from fastapi import APIRouter, Depends, Request

from medstock.core.config import settings
from medstock.core.email import EmailTransport, OutgoingEmail, get_email_transport
from medstock.core.exceptions import DeliveryError
from medstock.core.rate_limiter import limiter
from medstock.schemas.supply_request import EmailConfigResponse, EmailTestRequest

router = APIRouter(prefix="/api", tags=["Email"])


@router.get("/email-config", response_model=EmailConfigResponse)
def email_config(transport: EmailTransport = Depends(get_email_transport)):
    # Secrets are never echoed back
    return {
        "transport": transport.name,
        "from_email": settings.EMAIL_FROM,
        "from_name": settings.EMAIL_FROM_NAME,
        "smtp_host": settings.SMTP_HOST,
        "smtp_port": settings.SMTP_PORT,
        "relay_configured": bool(settings.RESEND_API_KEY),
    }


@router.post("/test-email")
@limiter.limit("3/minute")
def send_test_email(
    request: Request,
    email_data: EmailTestRequest,
    transport: EmailTransport = Depends(get_email_transport),
):
    message = OutgoingEmail(
        to=email_data.to,
        subject="Test email - Medische Inventaris",
        html="<p>De email instellingen werken correct.</p>",
        text="De email instellingen werken correct.",
    )

    if not transport.send(message):
        raise DeliveryError("Test email could not be delivered. Check the email settings.")

    return {"success": True, "message": f"Test email sent to {email_data.to}"}

"""
Email Service using Resend
Templates are written in MJML and compiled to responsive HTML before sending
"""

import logging
from datetime import date
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    booking_confirmation_template,
    partner_application_decision_template,
    partner_application_received_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Email could not be compiled or handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e

    # mjml_to_html returns a result object exposing .html and .errors
    errors = getattr(result, "errors", None)
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    if hasattr(result, "html"):
        return result.html
    if isinstance(result, dict):
        return result.get("html", "")
    return str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        EmailDeliveryError: when Resend is not configured or rejects the message
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Notifications
# These run as background tasks after the triggering write has committed.
# A delivery failure is logged and never reaches the caller.
# ============================================


async def send_booking_confirmation(
    to: str,
    booking_id: str,
    patient_name: str,
    test_name: str,
    appointment_date: date,
    appointment_time: str,
    sample_type: str,
    lab_name: Optional[str] = None,
    address: Optional[str] = None,
    price: Optional[int] = None,
) -> Optional[dict]:
    """Send the booking confirmation to the patient"""
    try:
        mjml_content = booking_confirmation_template(
            booking_id=booking_id,
            patient_name=patient_name,
            test_name=test_name,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            sample_type=sample_type,
            lab_name=lab_name,
            address=address,
            price=price,
        )
        return await send_email(
            to=to,
            subject=f"Booking Confirmed - {test_name} Appointment",
            mjml_content=mjml_content,
        )
    except Exception as e:
        logger.error(f"❌ Booking confirmation email failed for booking {booking_id}: {e}")
        return None


async def send_partner_application_received(to: str, owner_name: str, lab_name: str) -> Optional[dict]:
    try:
        return await send_email(
            to=to,
            subject="We received your partner application",
            mjml_content=partner_application_received_template(owner_name, lab_name),
        )
    except Exception as e:
        logger.error(f"❌ Partner application acknowledgement failed for {lab_name}: {e}")
        return None


async def send_partner_application_decision(
    to: str, owner_name: str, lab_name: str, approved: bool
) -> Optional[dict]:
    """Tell the applicant whether their lab was approved"""
    try:
        return await send_email(
            to=to,
            subject="Your partner application has been approved"
            if approved
            else "An update on your partner application",
            mjml_content=partner_application_decision_template(owner_name, lab_name, approved),
        )
    except Exception as e:
        logger.error(f"❌ Partner application decision email failed for {lab_name}: {e}")
        return None

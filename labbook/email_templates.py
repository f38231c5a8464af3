"""
MJML Email Templates
Patient-facing emails, compiled to HTML by email_service before sending
"""

from datetime import date
from typing import Optional

from .config import FRONTEND_URL, SUPPORT_EMAIL, SUPPORT_PHONE
from .utils.sanitization import sanitize_string

# Brand colors - Blue/Slate color scheme
THEME = {
    "primary": "#3b82f6",
    "primary_dark": "#2563eb",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#22c55e",
    "warning": "#856404",
    "warning_bg": "#fff3cd",
}

BRAND_NAME = "Dr. Patho"

PREPARATION_INSTRUCTIONS = [
    "Please arrive 15 minutes before your scheduled appointment time",
    "Bring a valid photo ID for verification",
    "Fast for 8-12 hours if required for your test",
]


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{THEME['primary']}" padding="24px 20px" border-radius="10px 10px 0 0">
          <mj-column>
            <mj-text align="center" font-size="24px" font-weight="700" color="#ffffff" padding="0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="32px 40px 40px 40px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="14px" color="{THEME['text_muted']}" padding="0">
              For any questions or to reschedule, contact us at:<br/>
              📞 {SUPPORT_PHONE} | 📧 {SUPPORT_EMAIL}
            </mj-text>
            <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
              This is an automated email. Please do not reply to this email.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_row(label: str, value: str) -> str:
    return f"""
              <tr style="border-bottom: 1px solid #f0f0f0;">
                <td style="padding: 10px 0; font-weight: bold;">{label}:</td>
                <td style="padding: 10px 0;">{value}</td>
              </tr>"""


def format_appointment_date(value: date) -> str:
    """Long-form date, e.g. Monday, March 10, 2025"""
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def booking_confirmation_template(
    booking_id: str,
    patient_name: str,
    test_name: str,
    appointment_date: date,
    appointment_time: str,
    sample_type: str,
    lab_name: Optional[str] = None,
    address: Optional[str] = None,
    price: Optional[int] = None,
) -> str:
    """Booking confirmation MJML template"""
    booking_id = sanitize_string(booking_id)

    rows = [
        _detail_row("Booking ID", booking_id),
        _detail_row("Test Name", sanitize_string(test_name)),
        _detail_row("Date", format_appointment_date(appointment_date)),
        _detail_row("Time", sanitize_string(appointment_time)),
        _detail_row("Collection Type", "Home Collection" if sample_type == "home" else "Visit Lab"),
    ]
    if lab_name:
        rows.append(_detail_row("Lab", sanitize_string(lab_name)))
    if address and sample_type == "home":
        rows.append(_detail_row("Address", sanitize_string(address)))
    if price is not None:
        rows.append(_detail_row("Amount", f"₹{price}"))

    instructions = "".join(
        f"<li>{item}</li>" for item in PREPARATION_INSTRUCTIONS
    ) + f"<li>Save this booking ID: <strong>{booking_id}</strong></li>"

    content = f"""
    <mj-text font-size="20px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 8px 0">
      Dear {sanitize_string(patient_name)},
    </mj-text>
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      Your diagnostic test appointment has been successfully booked. Here are your booking details:
    </mj-text>

    <mj-text font-size="16px" font-weight="600" color="{THEME['primary']}" padding="0 0 8px 0">
      Booking Details
    </mj-text>
    <mj-table font-size="14px" color="{THEME['text_primary']}" padding="0 0 24px 0">
      {''.join(rows)}
    </mj-table>

    <mj-text container-background-color="{THEME['warning_bg']}" color="{THEME['warning']}" font-size="14px" padding="16px 20px">
      <strong>📋 Important Instructions</strong>
      <ul style="padding-left: 20px; margin: 8px 0 0 0;">{instructions}</ul>
    </mj-text>
    """

    return get_base_template(
        title="✅ Booking Confirmed!",
        preview_text=f"Your {sanitize_string(test_name)} appointment is booked",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="View My Bookings",
    )


def partner_application_received_template(owner_name: str, lab_name: str) -> str:
    """Partner application acknowledgement MJML template"""
    content = f"""
    <mj-text>
      Hi {sanitize_string(owner_name)},
    </mj-text>
    <mj-text>
      Thank you for applying to list <strong>{sanitize_string(lab_name)}</strong> on {BRAND_NAME}.
      Our partnerships team will review your application and get back to you within 2-3 business days.
    </mj-text>
    """

    return get_base_template(
        title="Application Received",
        preview_text=f"We received the partner application for {sanitize_string(lab_name)}",
        content_sections=content,
    )


def partner_application_decision_template(owner_name: str, lab_name: str, approved: bool) -> str:
    if approved:
        message = (
            f"Great news! <strong>{sanitize_string(lab_name)}</strong> has been approved as a "
            f"{BRAND_NAME} partner lab. Our team will contact you shortly to complete onboarding."
        )
    else:
        message = (
            f"After reviewing your application for <strong>{sanitize_string(lab_name)}</strong>, "
            f"we are unable to onboard your lab at this time. You are welcome to apply again later."
        )

    content = f"""
    <mj-text>
      Hi {sanitize_string(owner_name)},
    </mj-text>
    <mj-text>
      {message}
    </mj-text>
    """

    return get_base_template(
        title="Application Approved" if approved else "Application Update",
        preview_text=f"An update on your {BRAND_NAME} partner application",
        content_sections=content,
    )

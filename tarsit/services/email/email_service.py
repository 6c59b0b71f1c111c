# ===== tarsit/services/email/email_service.py =====
import html
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Dict, List, Optional
import logging

from tarsit.config.settings import settings

logger = logging.getLogger(__name__)

# event -> (subject, heading, intro, frontend path)
APPOINTMENT_TEMPLATES = {
    "requested": (
        "New Appointment Request - {business_name}",
        "📅 New Appointment Request",
        "You have a new appointment request for {business_name}. Please confirm or decline it.",
        "/dashboard/appointments",
    ),
    "confirmed": (
        "Appointment Confirmed with {business_name}",
        "✅ Appointment Confirmed!",
        "Your appointment with {business_name} has been confirmed.",
        "/appointments",
    ),
    "canceled": (
        "Appointment Canceled - {business_name}",
        "Appointment Canceled",
        "Your appointment with {business_name} has been canceled.",
        "/appointments",
    ),
    "completed": (
        "Thanks for visiting {business_name}",
        "Appointment Completed",
        "Your appointment with {business_name} is complete. We'd love to hear how it went.",
        "/appointments",
    ),
    "no_show": (
        "Missed Appointment - {business_name}",
        "We Missed You",
        "You were marked as a no-show for your appointment with {business_name}.",
        "/appointments",
    ),
    "reminder": (
        "Reminder: Upcoming Appointment with {business_name}",
        "⏰ Appointment Reminder",
        "This is a reminder of your upcoming appointment with {business_name}.",
        "/appointments",
    ),
}


class EmailService:
    """Service for sending emails via SMTP"""

    @staticmethod
    def _get_smtp_connection():
        """Create and return SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT)

            if settings.EMAIL_USERNAME and settings.EMAIL_PASSWORD:
                server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            raise

    @staticmethod
    def send_email(
            to_email: str,
            subject: str,
            html_content: str,
            plain_text: Optional[str] = None,
            cc: Optional[List[str]] = None
    ) -> bool:
        """
        Send an email using SMTP

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            plain_text: Plain text version (fallback for non-HTML clients)
            cc: List of CC email addresses

        Returns:
            bool: True if email sent successfully

        Raises:
            Exception: Any SMTP failure, so callers can retry
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
            msg['To'] = to_email

            if cc:
                msg['Cc'] = ', '.join(cc)

            if plain_text:
                msg.attach(MIMEText(plain_text, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            recipients = [to_email]
            if cc:
                recipients.extend(cc)

            server = EmailService._get_smtp_connection()
            try:
                server.sendmail(settings.EMAIL_FROM_ADDRESS, recipients, msg.as_string())
            finally:
                server.quit()

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            raise

    @staticmethod
    def render_appointment_email(event: str, details: Dict[str, str]) -> Dict[str, str]:
        """
        Build subject, HTML and plain-text bodies for an appointment event.

        details keys: recipient_name, business_name, when, service_name
        (optional), reason (optional).
        """
        if event not in APPOINTMENT_TEMPLATES:
            raise ValueError(f"Unknown appointment email event: {event}")

        subject_tpl, heading, intro_tpl, path = APPOINTMENT_TEMPLATES[event]
        business_name = details.get("business_name", "")
        display_name = details.get("recipient_name") or "there"
        intro = intro_tpl.format(business_name=business_name)
        link = f"{settings.FRONTEND_URL}{path}"

        rows = [("Business", business_name), ("When", details.get("when", ""))]
        if details.get("service_name"):
            rows.append(("Service", details["service_name"]))
        if details.get("reason"):
            rows.append(("Reason", details["reason"]))

        rows_html = "".join(
            f'<p style="margin: 4px 0;"><strong>{label}:</strong> {html.escape(value)}</p>' for label, value in rows
        )
        rows_text = "\n".join(f"{label}: {value}" for label, value in rows)

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #4F46E5; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
                <h1 style="color: white; margin: 0; font-size: 26px;">{heading}</h1>
            </div>

            <div style="background-color: #ffffff; padding: 30px; border: 1px solid #e0e0e0; border-top: none; border-radius: 0 0 10px 10px;">
                <h2 style="color: #333; margin-top: 0;">Hi {html.escape(display_name)}!</h2>
                <p style="font-size: 16px; color: #555;">{html.escape(intro)}</p>
                <div style="background-color: #F3F4F6; padding: 20px; border-radius: 8px; margin: 20px 0;">
                    {rows_html}
                </div>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{link}"
                       style="background-color: #4F46E5; color: white; padding: 14px 40px; text-decoration: none; border-radius: 5px; font-weight: bold; display: inline-block;">
                        View Appointments
                    </a>
                </div>
            </div>

            <div style="text-align: center; padding: 20px; font-size: 12px; color: #999;">
                <p>© Tarsit. All rights reserved.</p>
            </div>
        </body>
        </html>
        """

        plain_text = f"""
        Hi {display_name}!

        {intro}

        {rows_text}

        View your appointments: {link}
        """

        return {
            "subject": subject_tpl.format(business_name=business_name),
            "html_content": html_content,
            "plain_text": plain_text,
        }

    @staticmethod
    def send_appointment_email(to_email: str, event: str, details: Dict[str, str]) -> bool:
        """Send one of the appointment lifecycle emails"""
        rendered = EmailService.render_appointment_email(event, details)
        return EmailService.send_email(to_email=to_email, **rendered)

"""
Email Service
=============
Sends the two notifications of the submission workflow over SMTP:
- New submission alert to the assigned tutor
- Decision (accepted/declined) alert to the student

Templates render both an HTML and a plain text body. Values interpolated
into the HTML body are escaped.
"""

import aiosmtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Tuple

from internship.core.config import settings
from internship.core.logging_config import logger


class EmailService:
    """Async email service using SMTP"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.start_tls = settings.SMTP_START_TLS
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            # Add plain text version (fallback)
            if text_content:
                message.attach(MIMEText(text_content, "plain"))

            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=self.start_tls
            )

            logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    # =====================================================
    # TEMPLATES
    # =====================================================

    def _wrap(self, heading: str, body_html: str) -> str:
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background: #1e3a8a; color: white; padding: 24px; text-align: center; border-radius: 10px 10px 0 0; }}
                .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px; }}
                .footer {{ text-align: center; margin-top: 30px; font-size: 12px; color: #6b7280; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h2>{heading}</h2>
                </div>
                <div class="content">
                    {body_html}
                    <p><a href="{self.frontend_url}">Open the internship portal</a></p>
                </div>
                <div class="footer">
                    <p>{settings.INSTITUTION_SHORT_NAME} - {self.from_name}</p>
                </div>
            </div>
        </body>
        </html>
        """

    def render_tutor_notification(self, student_name: str, roll_number: Optional[str]) -> Tuple[str, str, str]:
        """Subject, HTML and text for a new submission awaiting the tutor"""
        roll = roll_number or "N/A"
        subject = f"New internship submission from {student_name} ({roll})"
        html_content = self._wrap(
            "New Internship Submission",
            f"""
            <p>Dear Tutor,</p>
            <p><strong>{escape(student_name)}</strong> (Roll No: {escape(roll)}) has submitted internship details
            and is awaiting your review.</p>
            """,
        )
        text_content = f"""
        Dear Tutor,

        {student_name} (Roll No: {roll}) has submitted internship details and is awaiting your review.

        Review it at: {self.frontend_url}
        """
        return subject, html_content, text_content

    def render_student_notification(self, student_name: str, decision: str, remarks: str) -> Tuple[str, str, str]:
        """Subject, HTML and text for a tutor decision"""
        subject = f"Your internship submission has been {decision}"
        html_content = self._wrap(
            f"Submission {decision.capitalize()}",
            f"""
            <p>Dear {escape(student_name)},</p>
            <p>Your internship submission has been <strong>{escape(decision)}</strong>.</p>
            <p><strong>Remarks:</strong> {escape(remarks)}</p>
            """,
        )
        text_content = f"""
        Dear {student_name},

        Your internship submission has been {decision}.

        Remarks: {remarks}
        """
        return subject, html_content, text_content


# Singleton instance
email_service = EmailService()

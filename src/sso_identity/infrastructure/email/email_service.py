import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from sso_config.settings import Settings

logger = logging.getLogger(__name__)

VERIFICATION_CODE_SUBJECT = "Your verification code - {app_name}"

VERIFICATION_CODE_TEXT = """Hello,

Your {app_name} verification code is:

    {code}

The code is valid for a short time and can be used once.

If you didn't request this, you can safely ignore this email.

-- {app_name}
"""

VERIFICATION_CODE_HTML = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f9fafb; margin: 0; padding: 20px;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; padding: 40px; box-shadow: 0 1px 3px rgba(0,0,0,0.1);">
        <h2 style="color: #111827; margin-top: 0;">Verification code</h2>
        <p style="color: #374151; line-height: 1.6;">Use the code below to verify your email address.</p>
        <p style="margin: 30px 0; text-align: center; font-size: 32px; letter-spacing: 8px; font-weight: 700; color: #111827;">{code}</p>
        <p style="color: #6b7280; font-size: 14px;">The code is valid for a short time and can be used once.</p>
        <div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb;">
            <p style="color: #9ca3af; font-size: 13px; margin: 0;">If you didn't request this, you can safely ignore this email.</p>
            <p style="color: #9ca3af; font-size: 13px; margin-top: 8px;">{app_name}</p>
        </div>
    </div>
</body>
</html>
"""


class EmailService:
    """SMTP notifier for verification codes."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _create_message(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self._settings.smtp_from_name} <{self._settings.smtp_from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        return msg

    def _send_email(self, to_email: str, message: MIMEMultipart) -> None:
        if not self._settings.smtp_host:
            msg = "SMTP host not configured"
            raise RuntimeError(msg)

        smtp_password = (
            self._settings.smtp_password.get_secret_value()
            if self._settings.smtp_password
            else ""
        )
        timeout = self._settings.smtp_timeout_seconds

        try:
            if self._settings.smtp_use_tls and not self._settings.smtp_starttls:
                # Implicit TLS (port 465)
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(
                    self._settings.smtp_host,
                    self._settings.smtp_port,
                    context=context,
                    timeout=timeout,
                ) as server:
                    if self._settings.smtp_user:
                        server.login(self._settings.smtp_user, smtp_password)
                    server.send_message(message)
            else:
                # STARTTLS (port 587) or plain
                with smtplib.SMTP(
                    self._settings.smtp_host,
                    self._settings.smtp_port,
                    timeout=timeout,
                ) as server:
                    if self._settings.smtp_starttls:
                        context = ssl.create_default_context()
                        server.starttls(context=context)
                    if self._settings.smtp_user:
                        server.login(self._settings.smtp_user, smtp_password)
                    server.send_message(message)

            logger.info("Email sent to %s", to_email)

        except Exception as e:
            logger.error("Failed to send email to %s: %s", to_email, e)
            raise

    def send_code(self, code: str, email: str) -> None:
        if not self._settings.smtp_enabled:
            logger.warning("SMTP disabled, skipping verification code email to %s", email)
            return

        app_name = self._settings.app_name
        message = self._create_message(
            to_email=email,
            subject=VERIFICATION_CODE_SUBJECT.format(app_name=app_name),
            text_body=VERIFICATION_CODE_TEXT.format(code=code, app_name=app_name),
            html_body=VERIFICATION_CODE_HTML.format(code=code, app_name=app_name),
        )

        self._send_email(email, message)

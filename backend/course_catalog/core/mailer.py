# File: backend/course_catalog/core/mailer.py

import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urlencode

from course_catalog.core.config import SMTP_HOST, SMTP_PORT, EMAIL_USER, EMAIL_PASS, FRONTEND_URL

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "Password Reset Request"

RESET_EMAIL_TEMPLATE = """
<h2>Password Reset Request</h2>
<p>You are receiving this because you (or someone else) have requested the reset of the password for your account.</p>
<p>Please click on the following link, or paste this into your browser to complete the process:</p>
<a href="{reset_url}">Reset Password</a>
"""


def build_reset_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/reset-password?{urlencode({'token': token})}"


def build_reset_message(to_email: str, token: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = RESET_EMAIL_SUBJECT
    message["From"] = EMAIL_USER
    message["To"] = to_email
    reset_url = build_reset_url(token)
    message.set_content(f"Reset your password here: {reset_url}")
    message.add_alternative(RESET_EMAIL_TEMPLATE.format(reset_url=reset_url), subtype="html")
    return message


def send_email(message: EmailMessage):
    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30) as smtp:
        smtp.starttls()
        smtp.login(EMAIL_USER, EMAIL_PASS)
        smtp.send_message(message)


def send_password_reset_email(to_email: str, token: str) -> bool:
    """
    Deliver the reset link. Runs as a background task after the response
    is sent, so failures are only logged and never reach the caller.
    """
    if not (EMAIL_USER and EMAIL_PASS):
        logger.warning("EMAIL_USER/EMAIL_PASS not set; reset email to %s not sent.", to_email)
        return False

    try:
        send_email(build_reset_message(to_email, token))
    except (smtplib.SMTPException, OSError):
        logger.exception("Error sending password reset email to %s", to_email)
        return False

    logger.info("Password reset email sent to %s", to_email)
    return True

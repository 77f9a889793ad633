"""
Outbound notifications.

Password reset messages by email (Resend) and SMS (Africa's Talking).
Provider failures are logged and raised as ExternalDeliveryError;
nothing is retried.
"""

from __future__ import annotations

import logging

import africastalking
import resend
from fastapi.concurrency import run_in_threadpool

from taskforge.core.config import Settings
from taskforge.core.exceptions import ExternalDeliveryError

logger = logging.getLogger(__name__)

SMS_FAILURE_MESSAGE = (
    "Failed to send reset SMS. Please check your phone number format (e.g. +254XXXXXXXXX)."
)


class NotificationDispatcher:
    """Sends email and SMS through external providers."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        africastalking.initialize(settings.AT_USERNAME, settings.AT_API_KEY)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def send_email(self, to_email: str, subject: str, html: str) -> str:
        """
        Send an email via Resend.

        Returns the provider message id.
        """
        resend.api_key = self.settings.RESEND_API_KEY
        params: resend.Emails.SendParams = {
            "from": self.settings.EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        try:
            response = await run_in_threadpool(resend.Emails.send, params)
            return response["id"]
        except Exception as exc:
            logger.error("Email delivery to %s failed: %s", to_email, exc)
            raise ExternalDeliveryError("Failed to send reset email.") from exc

    async def send_sms(self, to_number: str, message: str) -> None:
        """Send an SMS via the Africa's Talking SDK."""
        try:
            body = await run_in_threadpool(
                africastalking.SMS.send,
                message,
                [to_number],
                sender_id=self.settings.AT_SENDER_ID,
            )
            recipients = body["SMSMessageData"]["Recipients"]
            status = recipients[0]["status"] if recipients else None
        except Exception as exc:
            logger.error("SMS delivery to %s failed: %s", to_number, exc)
            raise ExternalDeliveryError(SMS_FAILURE_MESSAGE) from exc

        if status != "Success":
            logger.error("SMS provider rejected message to %s: %s", to_number, body)
            raise ExternalDeliveryError(SMS_FAILURE_MESSAGE)

    # ------------------------------------------------------------------
    # Password reset messages
    # ------------------------------------------------------------------

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> None:
        reset_url = f"{self.settings.FRONTEND_URL}/reset-password?token={reset_token}"
        html = f"""
            <h2>Reset your password</h2>
            <p>We received a request to reset your TaskForge password.</p>
            <p>
                <a href="{reset_url}"
                   style="background:#6366f1;color:#fff;padding:12px 24px;
                          border-radius:6px;text-decoration:none;display:inline-block;">
                    Reset Password
                </a>
            </p>
            <p>Or paste this link into your browser: {reset_url}</p>
            <p>This link expires in 1 hour.</p>
            <p>If you did not request a password reset, you can safely ignore this email.</p>
        """
        message_id = await self.send_email(
            to_email, "Password Reset Request for TaskForge", html
        )
        logger.info("Password reset email sent to %s (id=%s)", to_email, message_id)

    async def send_password_reset_sms(self, to_number: str, code: str) -> None:
        await self.send_sms(
            to_number,
            f"Your TaskForge password reset code is: {code}. It is valid for 15 minutes.",
        )
        logger.info("Password reset SMS sent to %s", to_number)

# lidobook/services/notification_service.py
from typing import Awaitable, Callable, List, Optional
from uuid import UUID
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import aiosmtplib
from jinja2 import Template

from lidobook.core.config import settings
from lidobook.core.logging import logger
from lidobook.db.models.payment import Payment
from lidobook.db.models.reservation import Reservation

# (tenant_id, user_id) -> email address, supplied by the identity store
RecipientResolver = Callable[[UUID, UUID], Awaitable[Optional[str]]]


EMAIL_TEMPLATE = Template("""
<!DOCTYPE html>
<html>
<head>
    <style>
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { background: #0077b6; color: white; padding: 20px; text-align: center; }
        .content { background: #f9f9f9; padding: 30px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{{ title }}</h1>
        </div>
        <div class="content">
            <p>{{ intro }}</p>
            <ul>
            {% for label, value in details %}
                <li><strong>{{ label }}:</strong> {{ value }}</li>
            {% endfor %}
            </ul>
        </div>
    </div>
</body>
</html>
""")

TEXT_TEMPLATE = Template("""{{ intro }}

{% for label, value in details %}- {{ label }}: {{ value }}
{% endfor %}""")


class NotificationService:
    """Transactional emails for booking events.

    Sending is best effort: a missing SMTP host, an unknown recipient or a
    delivery failure is logged and never raised.
    """

    def __init__(self, recipient_resolver: Optional[RecipientResolver] = None):
        self.recipient_resolver = recipient_resolver
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL

    async def send_email(
        self,
        to: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send an email"""
        if not self.smtp_host:
            logger.warning("SMTP not configured, skipping email")
            return False

        try:
            message = MIMEMultipart('alternative')
            message['Subject'] = subject
            message['From'] = self.from_email
            message['To'] = ', '.join(to)

            if text_content:
                message.attach(MIMEText(text_content, 'plain'))

            message.attach(MIMEText(html_content, 'html'))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True,
            )

            logger.info(f"Email sent to {to}: {subject}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email: {str(e)}")
            return False

    async def _recipient(self, reservation: Reservation) -> Optional[str]:
        if self.recipient_resolver is None:
            return None
        return await self.recipient_resolver(reservation.tenant_id, reservation.user_id)

    async def _notify(self, reservation: Reservation, subject: str, intro: str, details: list) -> bool:
        recipient = await self._recipient(reservation)
        if not recipient:
            logger.info(
                f"No recipient for {subject!r}, skipping",
                extra={"tenant_id": reservation.tenant_id, "reservation_id": reservation.id},
            )
            return False

        html_content = EMAIL_TEMPLATE.render(title=subject, intro=intro, details=details)
        text_content = TEXT_TEMPLATE.render(intro=intro, details=details)
        return await self.send_email([recipient], subject, html_content, text_content)

    async def booking_confirmed(self, reservation: Reservation) -> bool:
        return await self._notify(
            reservation,
            "Booking confirmed",
            "Your umbrella booking has been confirmed.",
            [
                ("Code", reservation.booking_code),
                ("From", reservation.start_date.isoformat()),
                ("To", reservation.end_date.isoformat()),
                ("Amount", f"EUR {reservation.total_price:.2f}"),
            ],
        )

    async def booking_cancelled(self, reservation: Reservation, reason: str) -> bool:
        return await self._notify(
            reservation,
            "Booking cancelled",
            "Your umbrella booking has been cancelled.",
            [
                ("Code", reservation.booking_code),
                ("Reason", reason),
            ],
        )

    async def payment_confirmed(self, reservation: Reservation, payment: Payment) -> bool:
        return await self._notify(
            reservation,
            "Payment confirmed",
            "We received your payment.",
            [
                ("Booking code", reservation.booking_code),
                ("Amount", f"EUR {payment.amount:.2f}"),
                ("Method", payment.method),
            ],
        )

    async def payment_refunded(self, reservation: Reservation, payment: Payment, reason: str) -> bool:
        return await self._notify(
            reservation,
            "Payment refunded",
            "Your payment has been refunded and the booking cancelled.",
            [
                ("Booking code", reservation.booking_code),
                ("Amount", f"EUR {payment.amount:.2f}"),
                ("Reason", reason),
            ],
        )

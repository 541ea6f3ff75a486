import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class Mailer:
    """
    Thin wrapper around one Django mail connection.

    Build one per operation (or per sweep) and hand it to the notification
    helpers; `send` never raises, it reports success as a bool and logs the
    failure, so one bad address cannot abort a batch.
    """

    def __init__(self, connection=None, from_email=None):
        self.connection = connection or get_connection(fail_silently=False)
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, to, subject, template, context=None, attachments=()):
        """
        Render `emails/<template>.txt` (+ `.html`) and send it to `to`.
        `attachments` is an iterable of (filename, bytes, mimetype).
        """
        if not to:
            logger.warning(f"Email '{subject}' skipped: no recipient")
            return False

        context = {"frontend_url": settings.FRONTEND_URL, **(context or {})}
        try:
            text_body = render_to_string(f"emails/{template}.txt", context)
            html_body = render_to_string(f"emails/{template}.html", context)

            message = EmailMultiAlternatives(
                subject=subject,
                body=text_body,
                from_email=self.from_email,
                to=[to],
                connection=self.connection,
            )
            message.attach_alternative(html_body, "text/html")
            for filename, content, mimetype in attachments:
                message.attach(filename, content, mimetype)
            message.send()
        except Exception as exc:
            logger.warning(f"Email '{subject}' to {to} failed: {exc}")
            return False

        logger.info(f"Email '{subject}' sent to {to}")
        return True

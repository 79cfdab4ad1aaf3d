"""
Celery tasks for broadcast email delivery.
"""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils import timezone

logger = logging.getLogger(__name__)


def broadcast_to_address(email_log):
    """Visible To: address of a single BCC broadcast."""
    if settings.BROADCAST_TO_EMAIL:
        return settings.BROADCAST_TO_EMAIL
    if settings.CEO_EMAIL:
        return settings.CEO_EMAIL
    if email_log.triggered_by and email_log.triggered_by.email:
        return email_log.triggered_by.email
    return settings.DEFAULT_FROM_EMAIL


def build_messages(email_log, connection=None):
    """One BCC message, or one message per recipient with their name filled in."""
    from .services import render_email

    if email_log.bcc_mode == 'per_recipient':
        messages = []
        for recipient in email_log.recipients:
            rendered = render_email(
                email_log.subject,
                email_log.body_html,
                email_log.body_text,
                {'collaborator_name': recipient.get('name') or ''}
            )
            message = EmailMultiAlternatives(
                subject=rendered.subject,
                body=rendered.text,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[recipient['email']],
                connection=connection,
            )
            message.attach_alternative(rendered.html, 'text/html')
            messages.append(message)
        return messages

    message = EmailMultiAlternatives(
        subject=email_log.subject,
        body=email_log.body_text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[broadcast_to_address(email_log)],
        bcc=email_log.recipient_emails,
        connection=connection,
    )
    message.attach_alternative(email_log.body_html, 'text/html')
    return [message]


@shared_task(bind=True, name='notifications.send_broadcast_email')
def send_broadcast_email(self, email_log_id):
    """
    Deliver a broadcast and record the outcome on its EmailLog.

    Returns:
        dict: Result with success status and email_log_id
    """
    from .models import EmailLog

    try:
        email_log = EmailLog.objects.select_related('triggered_by').get(id=email_log_id)
    except EmailLog.DoesNotExist:
        error_msg = f"EmailLog {email_log_id} not found"
        logger.error(error_msg)
        return {'success': False, 'error': error_msg}

    try:
        logger.info(f"Sending broadcast {email_log_id} to {email_log.recipient_count} recipients ({email_log.bcc_mode})")

        connection = get_connection()
        sent = connection.send_messages(build_messages(email_log, connection=connection)) or 0

        email_log.status = 'sent'
        email_log.sent_at = timezone.now()
        email_log.error_message = ''
        email_log.save(update_fields=['status', 'sent_at', 'error_message', 'updated_at'])

        logger.info(f"Broadcast {email_log_id} delivered ({sent} messages)")
        return {
            'success': True,
            'email_log_id': email_log_id,
            'messages': sent
        }

    except Exception as e:
        error_msg = f"Failed to send broadcast: {str(e)}"
        logger.error(f"Error sending broadcast {email_log_id}: {error_msg}", exc_info=True)

        EmailLog.objects.filter(id=email_log_id).update(status='failed', error_message=error_msg)
        return {'success': False, 'error': error_msg}

"""
Broadcast email: recipient resolution and placeholder rendering.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from django.utils.html import strip_tags

from catalog.models import Collaborator, Song
from contracts.services.template_engine import replace_placeholders

logger = logging.getLogger(__name__)

PER_RECIPIENT_PLACEHOLDER = '{{collaborator_name}}'


class BroadcastError(Exception):
    """A broadcast request that cannot be sent as asked."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


@dataclass
class RenderedEmail:
    subject: str
    html: str
    text: str


def _unique_recipients(collaborators) -> List[Dict]:
    """Active collaborators with an address, first occurrence of each address wins."""
    recipients = []
    seen = set()
    for collaborator in collaborators:
        email = (collaborator.email or '').strip()
        if not email or collaborator.status != 'active':
            continue
        key = email.lower()
        if key in seen:
            continue
        seen.add(key)
        recipients.append({'email': email, 'name': collaborator.full_name})
    return recipients


def resolve_recipients(scope, song: Optional[Song] = None, collaborator_ids=None) -> List[Dict]:
    """
    Recipients for a broadcast scope as a list of {email, name}.

    Raises BroadcastError when the scope is missing its song or ids, or
    when nobody with an address is left.
    """
    if scope == 'all_collaborators':
        collaborators = Collaborator.objects.order_by('last_name', 'first_name')
    elif scope == 'song_collaborators':
        if song is None:
            raise BroadcastError('songId is required when scope is song_collaborators')
        collaborators = [
            row.collaborator
            for row in song.song_collaborators.select_related('collaborator').order_by('id')
        ]
    elif scope == 'specific_collaborators':
        if not collaborator_ids:
            raise BroadcastError('collaboratorIds is required when scope is specific_collaborators')
        collaborators = Collaborator.objects.filter(id__in=collaborator_ids).order_by('last_name', 'first_name')
    else:
        raise BroadcastError(f"Unknown scope: {scope}")

    recipients = _unique_recipients(collaborators)
    if not recipients:
        raise BroadcastError('No recipients with valid email addresses were found for this selection')
    return recipients


def uses_per_recipient_placeholders(*parts) -> bool:
    return any(PER_RECIPIENT_PLACEHOLDER in (part or '') for part in parts)


def render_email(subject, html, text, context) -> RenderedEmail:
    """Substitute placeholders; the text body falls back to the stripped HTML."""
    rendered_html = replace_placeholders(html, context)
    rendered_text = replace_placeholders(text, context) if text else strip_tags(rendered_html)
    return RenderedEmail(
        subject=replace_placeholders(subject, context),
        html=rendered_html,
        text=rendered_text,
    )


def shared_context(song: Optional[Song] = None, per_recipient=False) -> Dict:
    """Placeholder values that are the same for every recipient."""
    context = {'song_title': song.title if song else ''}
    if per_recipient:
        # Left in place and filled in for each recipient at delivery
        context['collaborator_name'] = PER_RECIPIENT_PLACEHOLDER
    return context


def create_broadcast(user, scope, bcc_mode='single_bcc', template_id=None, subject=None,
                     body_html=None, body_text=None, song_id=None, collaborator_ids=None):
    """
    Validate a broadcast request and record it as a queued EmailLog.

    Explicit subject and bodies override the template's. Delivery is left
    to the caller.
    """
    from .models import EmailLog, EmailTemplate

    template = None
    if template_id is not None:
        try:
            template = EmailTemplate.objects.get(pk=template_id)
        except EmailTemplate.DoesNotExist:
            raise BroadcastError('Email template not found', status_code=404)

    song = None
    if song_id is not None:
        try:
            song = Song.objects.get(pk=song_id)
        except Song.DoesNotExist:
            raise BroadcastError('Song not found', status_code=404)

    recipients = resolve_recipients(scope, song=song, collaborator_ids=collaborator_ids)

    base_subject = subject or (template.subject if template else '')
    base_html = body_html or (template.body_html if template else '')
    base_text = body_text or (template.body_text if template else '')
    if not base_subject or not base_html:
        raise BroadcastError('Subject and HTML body are required (either from template or request)')

    per_recipient = bcc_mode == 'per_recipient'
    if not per_recipient and uses_per_recipient_placeholders(base_subject, base_html, base_text):
        raise BroadcastError(
            f'Templates using {PER_RECIPIENT_PLACEHOLDER} require per-recipient sending; '
            'use bccMode "per_recipient"'
        )

    rendered = render_email(base_subject, base_html, base_text, shared_context(song, per_recipient))

    email_log = EmailLog.objects.create(
        template=template,
        subject=rendered.subject,
        body_html=rendered.html,
        body_text=rendered.text,
        scope=scope,
        bcc_mode=bcc_mode,
        song=song,
        recipient_count=len(recipients),
        recipients=recipients,
        triggered_by=user if user and user.is_authenticated else None,
    )
    logger.info(f"Queued broadcast {email_log.id} ({scope}, {bcc_mode}) to {len(recipients)} recipients")
    return email_log

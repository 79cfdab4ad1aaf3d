from django.conf import settings
from django.db import models


class EmailTemplate(models.Model):
    """
    Reusable broadcast email.

    Subject and bodies may use {{song_title}} and {{collaborator_name}}.
    """

    name = models.CharField(max_length=200, unique=True)
    subject = models.CharField(max_length=500)
    body_html = models.TextField()
    body_text = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_templates'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class EmailLog(models.Model):
    """
    One row per broadcast send, written before delivery and updated by the
    delivery task.
    """

    SCOPE_CHOICES = [
        ('all_collaborators', 'All Collaborators'),
        ('song_collaborators', 'Song Collaborators'),
        ('specific_collaborators', 'Specific Collaborators'),
    ]

    BCC_MODE_CHOICES = [
        ('single_bcc', 'Single email, recipients in BCC'),
        ('per_recipient', 'One email per recipient'),
    ]

    STATUS_CHOICES = [
        ('queued', 'Queued'),
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    template = models.ForeignKey(
        EmailTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='logs'
    )
    subject = models.CharField(max_length=500)
    body_html = models.TextField()
    body_text = models.TextField(blank=True, default='')

    scope = models.CharField(max_length=30, choices=SCOPE_CHOICES, db_index=True)
    bcc_mode = models.CharField(max_length=20, choices=BCC_MODE_CHOICES, default='single_bcc')
    song = models.ForeignKey(
        'catalog.Song',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_logs'
    )

    recipient_count = models.PositiveIntegerField(default=0)
    recipients = models.JSONField(
        default=list,
        blank=True,
        help_text="List of {email, name} the message was addressed to"
    )

    triggered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_logs'
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='queued', db_index=True)
    error_message = models.TextField(blank=True, default='')
    sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.subject} ({self.recipient_count} recipients, {self.status})"

    @property
    def recipient_emails(self):
        return [recipient['email'] for recipient in self.recipients]

from django.db import models

from .contract_types import CONTRACT_TYPE_CHOICES


class Contract(models.Model):
    """
    A contract generated for one song collaborator row and one contract type.

    Regenerating the same (song collaborator, type) pair updates the
    existing record instead of creating a new one.
    """

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('signed', 'Signed'),
        ('declined', 'Declined'),
    ]

    song = models.ForeignKey('catalog.Song', on_delete=models.CASCADE, related_name='contracts')
    collaborator = models.ForeignKey(
        'catalog.Collaborator',
        on_delete=models.CASCADE,
        related_name='contracts'
    )
    song_collaborator = models.ForeignKey(
        'catalog.SongCollaborator',
        on_delete=models.CASCADE,
        related_name='contracts'
    )
    template_type = models.CharField(max_length=30, choices=CONTRACT_TYPE_CHOICES)

    esignature_status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default='pending',
        db_index=True
    )
    esignature_doc_id = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        db_index=True,
        help_text="Dropbox Sign signature request ID"
    )
    signer_email = models.EmailField(blank=True, null=True)
    signed_at = models.DateTimeField(blank=True, null=True)
    error_message = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['song_collaborator', 'template_type'],
                name='unique_contract_per_song_collaborator_type'
            ),
        ]

    def __str__(self):
        return f"{self.get_template_type_display()} - {self.collaborator} ({self.song})"

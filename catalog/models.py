from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone

from rights.roles import ROLE_CHOICES
from .validators import validate_isrc, validate_pro_affiliation


def ownership_field(**kwargs):
    """Ownership share stored as a fraction between 0 and 1."""
    return models.DecimalField(
        max_digits=7,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(1)],
        **kwargs
    )


class Collaborator(models.Model):
    """
    A person credited on songs: writer, artist, producer, musician or vocalist.
    """

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True, null=True)
    last_name = models.CharField(max_length=100, db_index=True)

    email = models.EmailField(
        blank=True,
        null=True,
        unique=True,
        help_text="Contact address; required for e-signature and broadcast email"
    )
    phone = models.CharField(max_length=50, blank=True, null=True)
    address = models.TextField(blank=True, null=True)

    capable_roles = models.JSONField(
        default=list,
        blank=True,
        help_text="Roles this person can be assigned on a song"
    )

    # Credentials used in contracts
    pro_affiliation = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        validators=[validate_pro_affiliation],
        help_text="Performing rights organization (ASCAP, BMI, ...)"
    )
    ipi_number = models.CharField(max_length=20, blank=True, null=True, help_text="IPI/CAE number")
    tax_id = models.CharField(max_length=50, blank=True, null=True)
    publishing_company = models.CharField(max_length=255, blank=True, null=True)

    manager_name = models.CharField(max_length=255, blank=True, null=True)
    manager_email = models.EmailField(blank=True, null=True)
    manager_phone = models.CharField(max_length=50, blank=True, null=True)

    royalty_account_info = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active', db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part for part in parts if part)


class PublishingEntity(models.Model):
    """
    A publishing company that can hold part of a song's publisher's share.
    """

    name = models.CharField(max_length=255, unique=True)
    is_internal = models.BooleanField(
        default=False,
        help_text="The label's own publishing company"
    )
    contact_name = models.CharField(max_length=255, blank=True, null=True)
    contact_email = models.EmailField(blank=True, null=True)
    pro_affiliation = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        validators=[validate_pro_affiliation]
    )
    ipi_number = models.CharField(max_length=20, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Publishing entities'

    def __str__(self):
        return self.name


class Song(models.Model):
    """
    A song with its publishing and master ownership ledgers.

    Lock fields are changed only through rights.workflow; a locked master
    ledger always sits on top of a locked publishing ledger.
    """

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('active', 'Active'),
        ('archived', 'Archived'),
    ]

    title = models.CharField(max_length=255, db_index=True)

    isrc_code = models.CharField(
        max_length=15,
        blank=True,
        null=True,
        validators=[validate_isrc],
        help_text="ISRC in CC-XXX-YY-NNNNN form"
    )
    iswc_code = models.CharField(max_length=20, blank=True, null=True)
    catalog_number = models.CharField(max_length=20, blank=True, null=True, unique=True)
    release_date = models.DateField(blank=True, null=True)
    pro_work_registration_number = models.CharField(max_length=50, blank=True, null=True)

    publishing_admin = models.CharField(max_length=255, blank=True, null=True)
    master_owner = models.CharField(max_length=255, blank=True, null=True)
    genre = models.CharField(max_length=50, blank=True, null=True)
    sub_genre = models.CharField(max_length=50, blank=True, null=True)
    duration = models.PositiveIntegerField(blank=True, null=True, help_text="Duration in seconds")
    recording_date = models.DateField(blank=True, null=True)
    recording_location = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='draft', db_index=True)

    # Split workflow state
    publishing_locked = models.BooleanField(default=False)
    publishing_locked_at = models.DateTimeField(blank=True, null=True)
    master_locked = models.BooleanField(default=False)
    master_locked_at = models.DateTimeField(blank=True, null=True)
    label_master_share = ownership_field(help_text="Label's master share as a fraction")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title

    @property
    def is_split_complete(self):
        return self.publishing_locked and self.master_locked


class SongCollaborator(models.Model):
    """
    One role held by one collaborator on one song.

    Split percentages are stored per row so a producer-writer keeps a
    separate producer share and writer share.
    """

    song = models.ForeignKey(Song, on_delete=models.CASCADE, related_name='song_collaborators')
    collaborator = models.ForeignKey(
        Collaborator,
        on_delete=models.CASCADE,
        related_name='song_collaborations'
    )
    role_in_song = models.CharField(max_length=20, choices=ROLE_CHOICES)
    publishing_ownership = ownership_field()
    master_ownership = ownership_field()

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['song', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['song', 'collaborator', 'role_in_song'],
                name='unique_song_collaborator_role'
            ),
        ]

    def __str__(self):
        return f"{self.collaborator} - {self.role_in_song} on {self.song}"


class SongPublishingEntity(models.Model):
    """A publishing entity's share of a song's publisher's share."""

    song = models.ForeignKey(Song, on_delete=models.CASCADE, related_name='song_publishing_entities')
    publishing_entity = models.ForeignKey(
        PublishingEntity,
        on_delete=models.CASCADE,
        related_name='song_links'
    )
    ownership_percentage = ownership_field()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['song', 'publishing_entity__name']
        verbose_name_plural = 'Song publishing entities'
        constraints = [
            models.UniqueConstraint(
                fields=['song', 'publishing_entity'],
                name='unique_song_publishing_entity'
            ),
        ]

    def __str__(self):
        return f"{self.publishing_entity} on {self.song}"

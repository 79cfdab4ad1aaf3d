from django.db import models
from django.contrib.auth import get_user_model

User = get_user_model()


class UserProfile(models.Model):
    """
    Back-office profile attached to every Django user.

    Administrators manage songs, splits, contracts and broadcast email.
    Collaborators sign in to see the songs and contracts they are on, which
    is resolved through the linked Collaborator record.
    """

    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('collaborator', 'Collaborator'),
    ]

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile'
    )

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default='collaborator',
        db_index=True,
        help_text="User's role in the back office"
    )

    collaborator = models.OneToOneField(
        'catalog.Collaborator',
        on_delete=models.SET_NULL,
        related_name='user_profile',
        null=True,
        blank=True,
        help_text="Collaborator record this user signs in as"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email or self.user.username} - {self.get_role_display()}"

    @property
    def is_admin(self):
        """Check if user is a back-office administrator."""
        return self.role == 'admin'

"""
Signal handlers for user profiles.
"""
import logging
from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import UserProfile

logger = logging.getLogger(__name__)

User = get_user_model()


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """Every new user gets a profile; superusers start as administrators."""
    if not created:
        return
    role = 'admin' if instance.is_superuser else 'collaborator'
    UserProfile.objects.get_or_create(user=instance, defaults={'role': role})
    logger.info(f"Created {role} profile for user {instance.pk}")

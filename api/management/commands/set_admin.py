"""
Django management command to set a user as back-office administrator.

Usage:
    python manage.py set_admin <email>
    python manage.py set_admin owner@riverandember.com
"""

from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth import get_user_model
from api.models import UserProfile

User = get_user_model()


class Command(BaseCommand):
    help = 'Set a user as administrator by email'

    def add_arguments(self, parser):
        parser.add_argument(
            'email',
            type=str,
            help='Email address of the user to set as administrator'
        )
        parser.add_argument(
            '--superuser',
            action='store_true',
            help='Also grant Django admin (superuser) access'
        )

    def handle(self, *args, **options):
        email = options['email']

        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            raise CommandError(f'User with email "{email}" does not exist.')

        profile, _ = UserProfile.objects.get_or_create(user=user)
        profile.role = 'admin'
        profile.save()

        if options['superuser'] and not user.is_superuser:
            user.is_superuser = True
            user.is_staff = True
            user.save()
            self.stdout.write(
                self.style.SUCCESS(f'Also granted Django superuser access to {email}')
            )

        self.stdout.write(self.style.SUCCESS(f'Successfully set {email} as administrator'))

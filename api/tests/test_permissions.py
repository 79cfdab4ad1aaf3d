"""
Tests for back-office roles and song access checks.
"""
from unittest.mock import Mock

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from api.models import UserProfile
from api.permissions import (
    CanAccessSong,
    IsAdministrator,
    IsAdministratorOrReadOnly,
    can_access_song,
    get_collaborator_id,
    is_admin,
)
from catalog.models import Collaborator, Song, SongCollaborator

User = get_user_model()


class ProfileSignalTestCase(TestCase):

    def test_new_user_gets_collaborator_profile(self):
        user = User.objects.create_user(username='newbie', password='test123')
        self.assertEqual(user.profile.role, 'collaborator')
        self.assertFalse(user.profile.is_admin)

    def test_superuser_gets_admin_profile(self):
        user = User.objects.create_superuser(username='root', email='root@test.com', password='test123')
        self.assertEqual(user.profile.role, 'admin')

    def test_saving_again_keeps_one_profile(self):
        user = User.objects.create_user(username='newbie', password='test123')
        user.first_name = 'New'
        user.save()
        self.assertEqual(UserProfile.objects.filter(user=user).count(), 1)


class PermissionHelpersTestCase(TestCase):

    def setUp(self):
        self.admin_user = User.objects.create_user(username='admin', password='test123')
        self.admin_user.profile.role = 'admin'
        self.admin_user.profile.save()

        self.collaborator = Collaborator.objects.create(first_name='Mara', last_name='Quinn', capable_roles=['writer'])
        self.user = User.objects.create_user(username='mara', password='test123')
        self.user.profile.collaborator = self.collaborator
        self.user.profile.save()

        self.song = Song.objects.create(title='Low Tide')
        self.other_song = Song.objects.create(title='High Water')
        SongCollaborator.objects.create(song=self.song, collaborator=self.collaborator, role_in_song='writer')

    def test_is_admin(self):
        self.assertTrue(is_admin(self.admin_user))
        self.assertFalse(is_admin(self.user))
        self.assertFalse(is_admin(AnonymousUser()))
        self.assertFalse(is_admin(None))

    def test_superuser_is_admin_without_profile_role(self):
        superuser = User.objects.create_user(username='super', password='test123')
        superuser.is_superuser = True
        self.assertTrue(is_admin(superuser))

    def test_get_collaborator_id(self):
        self.assertEqual(get_collaborator_id(self.user), self.collaborator.id)
        self.assertIsNone(get_collaborator_id(self.admin_user))

    def test_can_access_song(self):
        self.assertTrue(can_access_song(self.admin_user, self.other_song))
        self.assertTrue(can_access_song(self.user, self.song))
        self.assertFalse(can_access_song(self.user, self.other_song))

    def test_user_without_collaborator_has_no_access(self):
        stranger = User.objects.create_user(username='stranger', password='test123')
        self.assertFalse(can_access_song(stranger, self.song))


class PermissionClassesTestCase(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()
        self.admin_user = User.objects.create_user(username='admin', password='test123')
        self.admin_user.profile.role = 'admin'
        self.admin_user.profile.save()
        self.user = User.objects.create_user(username='viewer', password='test123')

    def request(self, method, user):
        request = getattr(self.factory, method)('/')
        request.user = user
        return request

    def test_is_administrator(self):
        permission = IsAdministrator()
        self.assertTrue(permission.has_permission(self.request('post', self.admin_user), Mock()))
        self.assertFalse(permission.has_permission(self.request('get', self.user), Mock()))

    def test_read_only_for_non_admins(self):
        permission = IsAdministratorOrReadOnly()
        self.assertTrue(permission.has_permission(self.request('get', self.user), Mock()))
        self.assertFalse(permission.has_permission(self.request('post', self.user), Mock()))
        self.assertTrue(permission.has_permission(self.request('delete', self.admin_user), Mock()))
        self.assertFalse(permission.has_permission(self.request('get', AnonymousUser()), Mock()))

    def test_can_access_song_object_check(self):
        song = Song.objects.create(title='Low Tide')
        permission = CanAccessSong()
        self.assertTrue(permission.has_object_permission(self.request('get', self.admin_user), Mock(), song))
        self.assertFalse(permission.has_object_permission(self.request('get', self.user), Mock(), song))

"""
Tests for the broadcast email endpoints.
"""
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from catalog.models import Collaborator, Song, SongCollaborator
from notifications.models import EmailLog, EmailTemplate

User = get_user_model()

SEND_URL = '/api/v1/emails/send/'


@override_settings(BROADCAST_TO_EMAIL='broadcast@label.com', DEFAULT_FROM_EMAIL='no-reply@label.com')
class EmailAPITestCase(APITestCase):

    def setUp(self):
        self.admin_user = User.objects.create_user(username='admin', email='admin@test.com', password='test123')
        self.admin_user.profile.role = 'admin'
        self.admin_user.profile.save()

        self.mara = Collaborator.objects.create(
            first_name='Mara', last_name='Quinn', email='mara@test.com', capable_roles=['writer']
        )
        self.theo = Collaborator.objects.create(
            first_name='Theo', last_name='Banks', email='theo@test.com', capable_roles=['musician']
        )
        self.song = Song.objects.create(title='Low Tide', catalog_number='00001')
        SongCollaborator.objects.create(song=self.song, collaborator=self.mara, role_in_song='writer')

        self.collaborator_user = User.objects.create_user(username='mara', email='mara@test.com', password='test123')
        self.collaborator_user.profile.collaborator = self.mara
        self.collaborator_user.profile.save()

        self.client = APIClient()
        self.client.force_authenticate(user=self.admin_user)

    def send(self, **body):
        payload = {'scope': 'all_collaborators', 'subject': 'News', 'bodyHtml': '<p>Hello</p>'}
        payload.update(body)
        return self.client.post(SEND_URL, payload, format='json')


class SendEmailTest(EmailAPITestCase):

    def test_single_bcc(self):
        response = self.send()

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['recipients'], 2)
        self.assertEqual(response.data['status'], 'sent')

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['broadcast@label.com'])
        self.assertEqual(message.bcc, ['theo@test.com', 'mara@test.com'])
        self.assertEqual(message.subject, 'News')
        self.assertEqual(message.body, 'Hello')
        self.assertEqual(message.alternatives[0][0], '<p>Hello</p>')

        log = EmailLog.objects.get(pk=response.data['emailLogId'])
        self.assertEqual(log.status, 'sent')
        self.assertIsNotNone(log.sent_at)
        self.assertEqual(log.triggered_by, self.admin_user)

    def test_song_scope_uses_song_title(self):
        response = self.send(scope='song_collaborators', songId=self.song.id, subject='{{song_title}} is out')

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(mail.outbox[0].subject, 'Low Tide is out')
        self.assertEqual(mail.outbox[0].bcc, ['mara@test.com'])

    def test_per_recipient(self):
        response = self.send(bccMode='per_recipient', bodyHtml='<p>Dear {{collaborator_name}}</p>')

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(len(mail.outbox), 2)
        bodies = {message.to[0]: message.body for message in mail.outbox}
        self.assertEqual(bodies, {'theo@test.com': 'Dear Theo Banks', 'mara@test.com': 'Dear Mara Quinn'})
        self.assertEqual(mail.outbox[0].bcc, [])

    def test_collaborator_name_requires_per_recipient(self):
        response = self.send(bodyHtml='<p>Dear {{collaborator_name}}</p>')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(EmailLog.objects.exists())

    def test_template(self):
        template = EmailTemplate.objects.create(name='Hello', subject='From the label', body_html='<p>Hi all</p>')

        response = self.client.post(SEND_URL, {'scope': 'all_collaborators', 'templateId': template.id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(mail.outbox[0].subject, 'From the label')
        self.assertEqual(EmailLog.objects.get().template, template)

    def test_song_scope_without_song(self):
        response = self.send(scope='song_collaborators')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'songId is required when scope is song_collaborators')

    def test_unknown_song(self):
        response = self.send(scope='song_collaborators', songId=9999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_no_recipients(self):
        Collaborator.objects.update(status='inactive')
        response = self.send()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_scope(self):
        response = self.send(scope='everyone')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('scope', response.data['details'])

    def test_delivery_failure_is_logged(self):
        with patch('notifications.tasks.get_connection') as mock_connection:
            mock_connection.return_value.send_messages.side_effect = SMTPException('relay refused')
            response = self.send()

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['status'], 'failed')
        log = EmailLog.objects.get()
        self.assertIn('relay refused', log.error_message)

    def test_collaborator_forbidden(self):
        self.client.force_authenticate(user=self.collaborator_user)
        response = self.send()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated(self):
        response = APIClient().post(SEND_URL, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class EmailTemplateEndpointTest(EmailAPITestCase):

    def test_create_records_author(self):
        response = self.client.post('/api/v1/email-templates/', {
            'name': 'Release', 'subject': '{{song_title}} is out', 'body_html': '<p>Listen</p>'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(EmailTemplate.objects.get().created_by, self.admin_user)

    def test_collaborator_cannot_list(self):
        self.client.force_authenticate(user=self.collaborator_user)
        response = self.client.get('/api/v1/email-templates/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class EmailHistoryEndpointTest(EmailAPITestCase):

    def test_list_and_detail(self):
        self.send()
        self.send(scope='song_collaborators', songId=self.song.id, subject='Song news')

        response = self.client.get('/api/v1/email-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['subject'], 'Song news')
        self.assertEqual(response.data['results'][0]['song_title'], 'Low Tide')

        log_id = response.data['results'][0]['id']
        detail = self.client.get(f'/api/v1/email-history/{log_id}/')
        self.assertEqual(detail.data['recipients'], [{'email': 'mara@test.com', 'name': 'Mara Quinn'}])

    def test_filters(self):
        self.send()
        self.send(scope='song_collaborators', songId=self.song.id, subject='Song news')

        response = self.client.get('/api/v1/email-history/', {'scope': 'all_collaborators'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/email-history/', {'q': 'song'})
        self.assertEqual(response.data['count'], 1)

"""
Tests for the Dropbox Sign webhook endpoint.
"""
import json
from unittest.mock import Mock, patch

from django.test import override_settings
from rest_framework.test import APIClient, APITestCase

from catalog.models import Collaborator, Song, SongCollaborator
from contracts.models import Contract

SECRET = 'hook-secret'
WEBHOOK_URL = f'/api/v1/contracts/webhook/dropbox-sign/{SECRET}/'


def callback_event(event_type, signature_request_id='sr_123'):
    return Mock(
        event=Mock(event_type=event_type),
        signature_request=Mock(signature_request_id=signature_request_id),
    )


@override_settings(DROPBOX_SIGN_WEBHOOK_SECRET=SECRET, DROPBOX_SIGN_API_KEY='test-key')
class DropboxSignWebhookTest(APITestCase):

    def setUp(self):
        song = Song.objects.create(title='Low Tide', catalog_number='00001', master_locked=True)
        writer = Collaborator.objects.create(
            first_name='Mara', last_name='Quinn', email='mara@test.com', capable_roles=['writer']
        )
        row = SongCollaborator.objects.create(song=song, collaborator=writer, role_in_song='writer')
        self.contract = Contract.objects.create(
            song=song, collaborator=writer, song_collaborator=row,
            template_type='songwriter_publishing',
            esignature_status='sent', esignature_doc_id='sr_123',
        )
        self.client = APIClient()

    def post_event(self, mock_service_class, event, valid=True):
        service = mock_service_class.return_value
        service.parse_callback.return_value = event
        service.is_valid_callback.return_value = valid
        payload = {'event': {'event_type': event.event.event_type}}
        return self.client.post(WEBHOOK_URL, {'json': json.dumps(payload)})

    def test_wrong_token(self):
        response = self.client.post('/api/v1/contracts/webhook/dropbox-sign/nope/', {})
        self.assertEqual(response.status_code, 404)

    @override_settings(DROPBOX_SIGN_WEBHOOK_SECRET='')
    def test_unconfigured_secret(self):
        response = self.client.post(WEBHOOK_URL, {})
        self.assertEqual(response.status_code, 404)

    @patch('contracts.views.DropboxSignService')
    def test_ping_is_acknowledged(self, mock_service_class):
        response = self.client.post(WEBHOOK_URL, {})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'Hello API Event Received')
        mock_service_class.assert_not_called()

    def test_malformed_json(self):
        response = self.client.post(WEBHOOK_URL, {'json': '{not json'})
        self.assertEqual(response.status_code, 400)

    @patch('contracts.views.DropboxSignService')
    def test_invalid_hash(self, mock_service_class):
        response = self.post_event(mock_service_class, callback_event('signature_request_all_signed'), valid=False)

        self.assertEqual(response.status_code, 401)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'sent')

    @patch('contracts.views.DropboxSignService')
    def test_all_signed(self, mock_service_class):
        response = self.post_event(mock_service_class, callback_event('signature_request_all_signed'))

        self.assertEqual(response.status_code, 200)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'signed')
        self.assertIsNotNone(self.contract.signed_at)

    @patch('contracts.views.DropboxSignService')
    def test_declined(self, mock_service_class):
        self.post_event(mock_service_class, callback_event('signature_request_declined'))

        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'declined')

    @patch('contracts.views.DropboxSignService')
    def test_canceled_returns_to_pending(self, mock_service_class):
        self.post_event(mock_service_class, callback_event('signature_request_canceled'))

        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'pending')
        self.assertIsNone(self.contract.esignature_doc_id)

    @patch('contracts.views.DropboxSignService')
    def test_other_events_change_nothing(self, mock_service_class):
        response = self.post_event(mock_service_class, callback_event('signature_request_viewed'))

        self.assertEqual(response.status_code, 200)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'sent')

    @patch('contracts.views.DropboxSignService')
    def test_unknown_contract_is_acknowledged(self, mock_service_class):
        response = self.post_event(mock_service_class, callback_event('signature_request_all_signed', 'sr_other'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'Hello API Event Received')
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.esignature_status, 'sent')

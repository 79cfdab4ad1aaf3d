"""
Dropbox Sign API integration for contract signatures.
"""
import io
import logging

from django.conf import settings
from dropbox_sign import (
    ApiClient,
    ApiException,
    Configuration,
    EventCallbackHelper,
    EventCallbackRequest,
    apis,
    models,
)

logger = logging.getLogger(__name__)


class DropboxSignError(Exception):
    """Raised when the Dropbox Sign API rejects a call or is not configured."""


class DropboxSignService:
    """
    Service for interacting with Dropbox Sign API.
    """

    def __init__(self, api_key=None):
        self.api_key = api_key or settings.DROPBOX_SIGN_API_KEY
        if not self.api_key:
            raise DropboxSignError('DROPBOX_SIGN_API_KEY is not configured')

        configuration = Configuration(username=self.api_key)
        self.api_client = ApiClient(configuration)
        self.signature_request_api = apis.SignatureRequestApi(self.api_client)

    def create_signature_request(self, html, signers, title, subject=None, message=None, test_mode=None):
        """
        Create a signature request from a rendered HTML contract.

        Args:
            html: Contract document as HTML
            signers: List of signer dicts with 'email' and 'name'; all sign in parallel
            title: Title of the signature request
            subject: Optional email subject
            message: Optional email message
            test_mode: Defaults to DROPBOX_SIGN_TEST_MODE

        Returns:
            Signature request object with signature_request_id
        """
        if test_mode is None:
            test_mode = settings.DROPBOX_SIGN_TEST_MODE

        document = io.BytesIO(html.encode('utf-8'))
        document.name = 'contract.html'

        signer_list = [
            models.SubSignatureRequestSigner(email_address=signer['email'], name=signer['name'])
            for signer in signers
        ]

        data = models.SignatureRequestSendRequest(
            title=title,
            subject=subject or f"Please sign: {title}",
            message=message or "Please review and sign this document.",
            signers=signer_list,
            files=[document],
            use_text_tags=True,
            hide_text_tags=True,
            test_mode=test_mode
        )

        try:
            response = self.signature_request_api.signature_request_send(data)
        except ApiException as e:
            raise DropboxSignError(f'Dropbox Sign API error: {e}')
        return response.signature_request

    def create_draft(self, html, signers, title, test_mode=None):
        """
        Create an unclaimed draft that an administrator reviews and sends
        from Dropbox Sign.

        Returns:
            Unclaimed draft object with signature_request_id and claim_url
        """
        if test_mode is None:
            test_mode = settings.DROPBOX_SIGN_TEST_MODE

        document = io.BytesIO(html.encode('utf-8'))
        document.name = 'contract.html'

        data = models.UnclaimedDraftCreateRequest(
            type='request_signature',
            subject=f"Please sign: {title}",
            signers=[
                models.SubUnclaimedDraftSigner(email_address=signer['email'], name=signer['name'])
                for signer in signers
            ],
            files=[document],
            use_text_tags=True,
            hide_text_tags=True,
            test_mode=test_mode
        )

        try:
            response = apis.UnclaimedDraftApi(self.api_client).unclaimed_draft_create(data)
        except ApiException as e:
            raise DropboxSignError(f'Dropbox Sign API error: {e}')
        return response.unclaimed_draft

    def get_signature_request(self, signature_request_id):
        try:
            response = self.signature_request_api.signature_request_get(signature_request_id)
        except ApiException as e:
            raise DropboxSignError(f'Dropbox Sign API error: {e}')
        return response.signature_request

    @staticmethod
    def parse_callback(payload):
        """Build an EventCallbackRequest from the webhook's JSON payload."""
        return EventCallbackRequest.init(payload)

    def is_valid_callback(self, callback_event):
        """Check the event hash Dropbox Sign computed with our API key."""
        return EventCallbackHelper.is_valid(self.api_key, callback_event)


def status_from_signature_request(signature_request):
    """Map a Dropbox Sign signature request onto a contract status, or None if still open."""
    if getattr(signature_request, 'is_complete', False):
        return 'signed'
    if getattr(signature_request, 'is_declined', False):
        return 'declined'
    return None

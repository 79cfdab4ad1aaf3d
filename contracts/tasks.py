"""
Celery tasks for async contract processing.
"""
import logging
from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)


def build_signers(contract):
    """The collaborator signs first in the template; the CEO countersigns when configured."""
    signers = [{
        'email': contract.collaborator.email,
        'name': contract.collaborator.full_name,
    }]
    if settings.CEO_EMAIL:
        signers.append({
            'email': settings.CEO_EMAIL,
            'name': settings.CEO_NAME or settings.CONTRACT_CONFIG['publisher']['manager_name'],
        })
    return signers


@shared_task(bind=True, name='contracts.send_for_signature_async')
def send_for_signature_async(self, contract_id, draft=False):
    """
    Render the contract and create a Dropbox Sign signature request for it.

    With draft=True an unclaimed draft is created instead, to be reviewed
    and sent from Dropbox Sign.

    Returns:
        dict: Result with success status and contract_id
    """
    from .models import Contract
    from .services.contract_generator import contract_title, generate_contract_html
    from .services.dropbox_sign import DropboxSignService

    try:
        logger.info(f"Starting async signature sending for contract {contract_id}")

        contract = Contract.objects.select_related('song', 'song_collaborator__collaborator', 'collaborator').get(
            id=contract_id
        )
        song_collaborator = contract.song_collaborator

        html = generate_contract_html(contract.song, song_collaborator, contract.template_type)
        title = contract_title(contract.song, song_collaborator, contract.template_type)

        service = DropboxSignService()
        signers = build_signers(contract)
        if draft:
            signature_request = service.create_draft(html=html, signers=signers, title=title)
        else:
            signature_request = service.create_signature_request(html=html, signers=signers, title=title)

        contract.esignature_doc_id = signature_request.signature_request_id
        contract.esignature_status = 'draft' if draft else 'sent'
        contract.signer_email = contract.collaborator.email
        contract.signed_at = None
        contract.error_message = ''
        contract.save()

        logger.info(f"Successfully sent contract {contract_id} for signature ({contract.esignature_status})")
        return {
            'success': True,
            'contract_id': contract_id
        }

    except Contract.DoesNotExist:
        error_msg = f"Contract {contract_id} not found"
        logger.error(error_msg)
        return {'success': False, 'error': error_msg}

    except Exception as e:
        error_msg = f"Failed to send for signature: {str(e)}"
        logger.error(f"Error sending contract {contract_id} for signature: {error_msg}", exc_info=True)

        Contract.objects.filter(id=contract_id).update(error_message=error_msg)
        return {'success': False, 'error': error_msg}

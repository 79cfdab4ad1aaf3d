"""
Contract generation: context building, rendering and the Contract record.
"""
import logging

from django.db import transaction

from ..contract_types import get_contract_type_label
from ..models import Contract
from .contract_data_builder import build_contract_data
from .contract_templates import render_contract_document

logger = logging.getLogger(__name__)


def contract_title(song, song_collaborator, contract_type):
    return f"{get_contract_type_label(contract_type)} - {song.title} - {song_collaborator.collaborator.full_name}"


def generate_contract_html(song, song_collaborator, contract_type):
    """Render the full HTML document for one collaborator row and contract type."""
    data = build_contract_data(song, song_collaborator, contract_type)
    return render_contract_document(
        contract_type,
        data,
        title=contract_title(song, song_collaborator, contract_type)
    )


def upsert_contract(song, song_collaborator, contract_type):
    """
    Create the contract, or reset an existing one for regeneration.

    Regeneration puts the contract back to pending and forgets any previous
    signature request.
    """
    with transaction.atomic():
        contract, created = Contract.objects.select_for_update().get_or_create(
            song_collaborator=song_collaborator,
            template_type=contract_type,
            defaults={
                'song': song,
                'collaborator': song_collaborator.collaborator,
            }
        )
        if not created:
            contract.esignature_status = 'pending'
            contract.esignature_doc_id = None
            contract.signed_at = None
            contract.error_message = ''
            contract.save(update_fields=[
                'esignature_status', 'esignature_doc_id', 'signed_at', 'error_message', 'updated_at'
            ])

    logger.info(f"{'Created' if created else 'Regenerated'} {contract_type} contract {contract.id} for song {song.id}")
    return contract

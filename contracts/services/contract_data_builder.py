"""
Contract data builder.

Turns a song and one of its collaborator rows into the flat context the
contract templates are rendered with. Percentages are rendered with two
decimals ("25.00"); dates as "October 19, 2026".
"""
import logging
from datetime import date
from typing import Dict, Optional

from django.conf import settings

from rights.percentages import format_percentage, fraction_to_percentage, to_decimal
from rights.roles import ContractType, Role

logger = logging.getLogger(__name__)

IN_KIND_KEYS = ['studio_value', 'admin_value', 'marketing_value', 'alternative_versions_value']

ROLE_TITLES = {
    Role.PRODUCER.value: 'Producer',
    Role.MUSICIAN.value: 'Instrumentalist',
    Role.VOCALIST.value: 'Vocalist',
    Role.ARTIST.value: 'Featured Artist',
    Role.WRITER.value: 'Writer',
}

ROLE_DESCRIPTIONS = {
    Role.ARTIST.value: 'Lead Artist/Performer',
    Role.MUSICIAN.value: 'Musician/Instrumentalist',
    Role.PRODUCER.value: 'Producer',
    Role.WRITER.value: 'Writer/Composer',
    Role.VOCALIST.value: 'Vocalist',
}

SERVICES_DESCRIPTIONS = {
    Role.PRODUCER.value: 'Production, arrangement, and creative direction services for the Recording',
    Role.MUSICIAN.value: 'Instrumental performance services for the Recording',
    Role.VOCALIST.value: 'Vocal performance services for the Recording',
    Role.ARTIST.value: 'Lead performance and creative input for the Recording',
    Role.WRITER.value: 'Songwriting and composition services for the Recording',
}

CREDIT_WORDINGS = {
    Role.PRODUCER.value: 'Produced by {name}',
    Role.MUSICIAN.value: 'Instrumental performance by {name}',
    Role.VOCALIST.value: 'Vocals by {name}',
    Role.ARTIST.value: 'Featuring {name}',
    Role.WRITER.value: 'Written by {name}',
}


def get_contract_config() -> Dict:
    return getattr(settings, 'CONTRACT_CONFIG', {})


def calculate_in_kind_total(services: Optional[Dict] = None):
    """
    Total value of in-kind services.

    Missing entries fall back to the configured defaults, then to 0.
    """
    services = services or {}
    defaults = get_contract_config().get('in_kind_services', {})
    total = 0
    for key in IN_KIND_KEYS:
        value = services.get(key)
        if value is None:
            value = defaults.get(key) or 0
        total += value
    return total


def format_effective_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def share_percentage(fraction) -> str:
    return format_percentage(fraction_to_percentage(fraction))


def format_writers_list(song_collaborators) -> str:
    """
    "Name (25.00%), Name (25.00%)" for writer and artist rows holding a
    publishing share, or "N/A" when there are none.
    """
    writers = [
        row for row in song_collaborators
        if row.role_in_song in (Role.WRITER.value, Role.ARTIST.value)
        and to_decimal(row.publishing_ownership) > 0
    ]
    if not writers:
        return 'N/A'
    return ', '.join(
        f"{row.collaborator.full_name} ({share_percentage(row.publishing_ownership)}%)"
        for row in writers
    )


def _in_kind_context(contract_config) -> Dict:
    services = contract_config.get('in_kind_services', {})
    context = {key: services.get(key) or 0 for key in IN_KIND_KEYS}
    context['total_value'] = calculate_in_kind_total(services)
    return context


def _base_context(song, song_collaborator, contract_config, today) -> Dict:
    collaborator = song_collaborator.collaborator
    publisher = contract_config.get('publisher', {})
    defaults = contract_config.get('defaults', {})

    return {
        'logo_url': f"{getattr(settings, 'SITE_URL', '').rstrip('/')}/static/images/logo.png",

        'song_title': song.title,
        'isrc_code': song.isrc_code,
        'iswc_code': song.iswc_code,
        'catalog_number': song.catalog_number,
        'release_date': song.release_date.isoformat() if song.release_date else None,

        'collaborator_full_name': collaborator.full_name,
        'collaborator_email': collaborator.email,
        'collaborator_address': collaborator.address,
        'collaborator_phone': collaborator.phone,
        'pro_affiliation': collaborator.pro_affiliation,
        'ipi_number': collaborator.ipi_number,
        'role': song_collaborator.role_in_song,
        'publishing_share_percentage': share_percentage(song_collaborator.publishing_ownership),
        'master_share_percentage': share_percentage(song_collaborator.master_ownership),

        'publisher_name': publisher.get('name'),
        'publisher_state': publisher.get('state'),
        'publisher_address': publisher.get('address'),
        'publisher_manager_name': publisher.get('manager_name'),
        'publisher_manager_title': publisher.get('manager_title'),

        'effective_date': format_effective_date(today),
        'governing_state': defaults.get('governing_state'),
    }


def build_publishing_assignment_data(song, song_collaborator, contract_config, today) -> Dict:
    """Context for the Publishing Assignment: one composition, this writer's share only."""
    context = _base_context(song, song_collaborator, contract_config, today)
    defaults = contract_config.get('defaults', {})

    writer_name = song_collaborator.collaborator.full_name
    composition = {
        'title': song.title,
        'writers': f"{writer_name} ({context['publishing_share_percentage']}%)",
        'isrc': song.isrc_code,
        'iswc': song.iswc_code,
        'work_id': song.pro_work_registration_number,
        'notes': song.notes,
    }

    context.update({
        'writer_full_name': writer_name,
        'writer_address': song_collaborator.collaborator.address,
        'all_writers': format_writers_list(song.song_collaborators.select_related('collaborator')),
        'composition': composition,
        'compositions': [composition],
        'reversion_condition': defaults.get('reversion_condition') or '',
        'publishing_administrator': defaults.get('publishing_administrator'),
        'advance_amount': None,
    })
    context.update(_in_kind_context(contract_config))
    return context


def build_master_revenue_share_data(song, song_collaborator, contract_config, today) -> Dict:
    """Context for the Master Revenue Share Agreement, worded for the collaborator's role."""
    context = _base_context(song, song_collaborator, contract_config, today)
    role = song_collaborator.role_in_song
    name = song_collaborator.collaborator.full_name
    in_kind = _in_kind_context(contract_config)

    context.update({
        'collaborator_share_percentage': context['master_share_percentage'],
        'label_share_percentage': share_percentage(song.label_master_share),
        'collaborator_role': ROLE_TITLES.get(role, role),
        'collaborator_role_description': ROLE_DESCRIPTIONS.get(role, role),
        'services_description': SERVICES_DESCRIPTIONS.get(role, 'Services as described in this Agreement'),
        'credit_wording': CREDIT_WORDINGS[role].format(name=name) if role in CREDIT_WORDINGS else name,
        'special_terms': song.notes or 'None',
        'estimated_label_investment': in_kind['total_value'],
        'is_musician': role == Role.MUSICIAN.value,
        'is_artist': role == Role.ARTIST.value,
        'is_producer': role == Role.PRODUCER.value,
        'is_writer': role == Role.WRITER.value,
        'is_vocalist': role == Role.VOCALIST.value,
    })
    context.update(in_kind)
    return context


def build_contract_data(song, song_collaborator, contract_type, contract_config=None, today=None) -> Dict:
    """
    Build the template context for one contract.

    Types without a dedicated builder get the common song, collaborator
    and publisher fields only.
    """
    contract_config = contract_config if contract_config is not None else get_contract_config()
    today = today or date.today()

    if contract_type == ContractType.SONGWRITER_PUBLISHING.value:
        context = build_publishing_assignment_data(song, song_collaborator, contract_config, today)
    elif contract_type == ContractType.DIGITAL_MASTER_ONLY.value:
        context = build_master_revenue_share_data(song, song_collaborator, contract_config, today)
    else:
        context = _base_context(song, song_collaborator, contract_config, today)

    logger.debug(f"Built {contract_type} context for song collaborator {song_collaborator.id}: {sorted(context)}")
    return context

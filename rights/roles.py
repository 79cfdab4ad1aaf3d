"""
Role eligibility table.

A collaborator's role on a song decides which ownership ledgers it may
hold a share of and which contract template covers it. The table is
immutable; nothing at runtime should add to or edit it.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Optional


class Role(str, Enum):
    MUSICIAN = 'musician'
    WRITER = 'writer'
    PRODUCER = 'producer'
    ARTIST = 'artist'
    VOCALIST = 'vocalist'
    LABEL = 'label'


class MasterRevenueScope(str, Enum):
    DIGITAL_ONLY = 'digital_only'
    FULL = 'full'


class ContractType(str, Enum):
    DIGITAL_MASTER_ONLY = 'digital_master_only'
    SONGWRITER_PUBLISHING = 'songwriter_publishing'
    PRODUCER_AGREEMENT = 'producer_agreement'
    LABEL_RECORD = 'label_record'


ROLE_CHOICES = [
    (Role.MUSICIAN.value, 'Musician'),
    (Role.WRITER.value, 'Writer'),
    (Role.PRODUCER.value, 'Producer'),
    (Role.ARTIST.value, 'Artist'),
    (Role.VOCALIST.value, 'Vocalist'),
    (Role.LABEL.value, 'Label'),
]

# Roles a collaborator profile may list as capable; label is system-only
ASSIGNABLE_ROLES = [
    Role.MUSICIAN.value,
    Role.WRITER.value,
    Role.PRODUCER.value,
    Role.ARTIST.value,
    Role.VOCALIST.value,
]


@dataclass(frozen=True)
class RoleConfiguration:
    role: Role
    publishing_eligible: bool
    master_eligible: bool
    master_revenue_scope: Optional[MasterRevenueScope]
    contract_type: ContractType


ROLE_CONFIGURATIONS = MappingProxyType({
    Role.MUSICIAN: RoleConfiguration(
        role=Role.MUSICIAN,
        publishing_eligible=False,
        master_eligible=True,
        master_revenue_scope=MasterRevenueScope.DIGITAL_ONLY,
        contract_type=ContractType.DIGITAL_MASTER_ONLY,
    ),
    # Master share only when also credited as artist (a separate row)
    Role.WRITER: RoleConfiguration(
        role=Role.WRITER,
        publishing_eligible=True,
        master_eligible=False,
        master_revenue_scope=None,
        contract_type=ContractType.SONGWRITER_PUBLISHING,
    ),
    # Publishing share only when also credited as writer (a separate row)
    Role.PRODUCER: RoleConfiguration(
        role=Role.PRODUCER,
        publishing_eligible=False,
        master_eligible=True,
        master_revenue_scope=MasterRevenueScope.FULL,
        contract_type=ContractType.PRODUCER_AGREEMENT,
    ),
    Role.ARTIST: RoleConfiguration(
        role=Role.ARTIST,
        publishing_eligible=True,
        master_eligible=True,
        master_revenue_scope=MasterRevenueScope.FULL,
        contract_type=ContractType.DIGITAL_MASTER_ONLY,
    ),
    Role.VOCALIST: RoleConfiguration(
        role=Role.VOCALIST,
        publishing_eligible=False,
        master_eligible=True,
        master_revenue_scope=MasterRevenueScope.DIGITAL_ONLY,
        contract_type=ContractType.DIGITAL_MASTER_ONLY,
    ),
    Role.LABEL: RoleConfiguration(
        role=Role.LABEL,
        publishing_eligible=True,
        master_eligible=True,
        master_revenue_scope=MasterRevenueScope.FULL,
        contract_type=ContractType.LABEL_RECORD,
    ),
})


REVENUE_STREAMS = (
    ('digital_streaming', 'Digital Streaming', 'Spotify, Apple Music, etc.'),
    ('digital_downloads', 'Digital Downloads', 'iTunes, Amazon, etc.'),
    ('physical_sales', 'Physical Sales', 'CDs, vinyl, merch bundles'),
    ('sync_licensing', 'Sync Licensing', 'Film, TV, advertising'),
    ('publishing_income', 'Publishing Income', 'PRO royalties, mechanicals'),
    ('catalog_sales', 'Catalog Sales', 'Catalog exploitation and acquisitions'),
    ('platform_ad_revenue', 'Platform Ad Revenue', 'YouTube, etc.'),
)

_DIGITAL_ONLY_STREAMS = frozenset({'digital_streaming', 'digital_downloads', 'platform_ad_revenue'})
_ALL_STREAMS = frozenset(stream_id for stream_id, _, _ in REVENUE_STREAMS)

REVENUE_ELIGIBILITY = MappingProxyType({
    Role.MUSICIAN: _DIGITAL_ONLY_STREAMS,
    Role.VOCALIST: _DIGITAL_ONLY_STREAMS,
    Role.WRITER: frozenset({'sync_licensing', 'publishing_income'}),
    Role.PRODUCER: _ALL_STREAMS - {'publishing_income'},
    Role.ARTIST: _ALL_STREAMS,
    Role.LABEL: _ALL_STREAMS,
})


def _coerce(role) -> Optional[Role]:
    if role is None or role == '':
        return None
    try:
        return Role(role)
    except ValueError:
        return None


def get_role_configuration(role) -> Optional[RoleConfiguration]:
    """Return the configuration for a role, or None for unknown roles."""
    coerced = _coerce(role)
    if coerced is None:
        return None
    return ROLE_CONFIGURATIONS[coerced]


def is_publishing_eligible(role) -> bool:
    config = get_role_configuration(role)
    return bool(config and config.publishing_eligible)


def is_master_eligible(role) -> bool:
    config = get_role_configuration(role)
    return bool(config and config.master_eligible)


def get_master_revenue_scope(role) -> Optional[str]:
    config = get_role_configuration(role)
    if config is None or config.master_revenue_scope is None:
        return None
    return config.master_revenue_scope.value


def get_contract_type(role) -> Optional[str]:
    config = get_role_configuration(role)
    return config.contract_type.value if config else None


def is_revenue_eligible(role, revenue_stream_id: str) -> bool:
    coerced = _coerce(role)
    if coerced is None:
        return False
    return revenue_stream_id in REVENUE_ELIGIBILITY[coerced]


def get_allowed_revenue_streams(role) -> List[Dict[str, str]]:
    return [
        {'id': stream_id, 'name': name, 'description': description}
        for stream_id, name, description in REVENUE_STREAMS
        if is_revenue_eligible(role, stream_id)
    ]

"""
Split validation rules for the publishing and master ownership ledgers.

All functions here are pure: they take percentages (0..100), never touch
the database and never raise for a rule violation. Failures are reported
as SplitError entries on the returned SplitValidationResult.
"""
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .percentages import HUNDRED, format_percentage, to_decimal, totals_match
from .roles import Role, is_master_eligible, is_publishing_eligible

WRITER_SHARE = Decimal('50')
PUBLISHER_SHARE = Decimal('50')
FULL_SHARE = Decimal('100')

# Roles that may never carry publishing ownership on their own row
PUBLISHING_FORBIDDEN = {
    Role.MUSICIAN.value: (
        'MUSICIAN_PUBLISHING_FORBIDDEN',
        'Musicians cannot receive publishing ownership. Must be 0%.',
    ),
    Role.VOCALIST.value: (
        'VOCALIST_PUBLISHING_FORBIDDEN',
        'Vocalists cannot receive publishing ownership. Must be 0%.',
    ),
    Role.PRODUCER.value: (
        'PRODUCER_PUBLISHING_FORBIDDEN',
        'Producers cannot receive publishing ownership unless also credited as writer.',
    ),
}


@dataclass(frozen=True)
class SplitError:
    field: str
    message: str
    code: str

    def as_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'message': self.message, 'code': self.code}


@dataclass
class SplitValidationResult:
    is_valid: bool
    errors: List[SplitError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def error_codes(self) -> List[str]:
        return [error.code for error in self.errors]


@dataclass(frozen=True)
class CollaboratorSplit:
    """One role-specific share. song_collaborator_id identifies the row when known."""
    role: Optional[str]
    percentage: Decimal
    song_collaborator_id: Optional[int] = None
    collaborator_id: Optional[int] = None


@dataclass(frozen=True)
class EntitySplit:
    publishing_entity_id: int
    percentage: Decimal


def _result(errors, warnings=None) -> SplitValidationResult:
    return SplitValidationResult(is_valid=not errors, errors=list(errors), warnings=list(warnings or []))


def _bounds_errors(percentage: Decimal, field_name: str, ledger: str) -> List[SplitError]:
    errors = []
    if percentage < 0:
        errors.append(SplitError(field_name, f'{ledger} percentage cannot be negative', 'NEGATIVE_VALUE'))
    if percentage > HUNDRED:
        errors.append(SplitError(field_name, f'{ledger} percentage cannot exceed 100%', 'EXCEEDS_MAX'))
    return errors


def _duplicates(keys) -> List:
    counts = Counter(keys)
    seen = []
    for key in keys:
        if counts[key] > 1 and key not in seen:
            seen.append(key)
    return seen


def _duplicate_errors(splits: Sequence[CollaboratorSplit]) -> List[SplitError]:
    """
    Each SongCollaborator row may appear once. Without row ids, fall back
    to (collaborator, role) pairs since one person can hold several roles.
    """
    row_ids = [s.song_collaborator_id for s in splits if s.song_collaborator_id is not None]
    if row_ids:
        duplicates = _duplicates(row_ids)
        if duplicates:
            return [SplitError(
                'collaborators',
                f"Duplicate song collaborator entries found: {', '.join(str(d) for d in duplicates)}",
                'DUPLICATE_SONG_COLLABORATORS',
            )]
        return []

    keys = [f'{s.collaborator_id}-{s.role}' for s in splits]
    duplicates = _duplicates(keys)
    if duplicates:
        return [SplitError(
            'collaborators',
            f"Duplicate collaborator roles found: {', '.join(duplicates)}",
            'DUPLICATE_COLLABORATOR_ROLES',
        )]
    return []


def validate_publishing_splits(splits: Sequence[CollaboratorSplit], allow_partial: bool = False) -> SplitValidationResult:
    """
    Validate collaborator publishing shares as a single 100% pool.

    With allow_partial the total is not checked, only per-row rules.
    """
    errors: List[SplitError] = []
    warnings: List[str] = []

    total = sum((to_decimal(s.percentage) for s in splits), Decimal('0'))
    if not allow_partial and not totals_match(total, FULL_SHARE):
        errors.append(SplitError(
            'total',
            f'Publishing splits must total exactly 100%. Current total: {format_percentage(total)}%',
            'INVALID_TOTAL',
        ))

    for index, split in enumerate(splits):
        if split.role is None or split.role == '':
            errors.append(SplitError(f'splits[{index}].role', 'Role is missing for this split', 'MISSING_ROLE'))
            continue

        field_name = f'splits[{index}].publishingOwnership'
        percentage = to_decimal(split.percentage)

        # A 0% row for an ineligible role is simply "no publishing share"
        if percentage > 0 and not is_publishing_eligible(split.role):
            errors.append(SplitError(
                field_name,
                f'Role "{split.role}" is not eligible for publishing ownership. Publishing percentage must be 0%.',
                'ROLE_NOT_ELIGIBLE',
            ))

        errors.extend(_bounds_errors(percentage, field_name, 'Publishing'))

        forbidden = PUBLISHING_FORBIDDEN.get(split.role)
        if forbidden and percentage > 0:
            code, message = forbidden
            errors.append(SplitError(field_name, message, code))

    errors.extend(_duplicate_errors(splits))
    return _result(errors, warnings)


def validate_combined_publishing_splits(
    collaborators: Sequence[CollaboratorSplit],
    entities: Sequence[EntitySplit],
    allow_partial: bool = False,
) -> SplitValidationResult:
    """
    Validate the writer's share and publisher's share as two separate 50% pools.

    Collaborator rows make up the writer's share, publishing entities the
    publisher's share. The pools are never merged into one 100% check, so
    either can be edited while the other is still incomplete.
    """
    errors: List[SplitError] = []
    warnings: List[str] = []

    with_roles = [s for s in collaborators if s.role not in (None, '')]
    if len(with_roles) != len(collaborators):
        errors.append(SplitError('collaborators', 'Some collaborators have invalid or missing roles', 'INVALID_ROLE'))

    row_result = validate_publishing_splits(with_roles, allow_partial=True)
    errors.extend(e for e in row_result.errors if e.code != 'INVALID_TOTAL')
    warnings.extend(row_result.warnings)

    for index, entity in enumerate(entities):
        errors.extend(_bounds_errors(to_decimal(entity.percentage), f'entities[{index}].percentage', 'Publishing entity'))

    duplicate_entities = _duplicates([e.publishing_entity_id for e in entities])
    if duplicate_entities:
        errors.append(SplitError(
            'entities',
            f"Duplicate publishing entities found: {', '.join(str(d) for d in duplicate_entities)}",
            'DUPLICATE_ENTITIES',
        ))

    if not allow_partial:
        writer_total = sum((to_decimal(s.percentage) for s in collaborators), Decimal('0'))
        publisher_total = sum((to_decimal(e.percentage) for e in entities), Decimal('0'))

        if not totals_match(writer_total, WRITER_SHARE):
            errors.append(SplitError(
                'writers',
                f"Writer's share must total exactly 50%. Current total: {format_percentage(writer_total)}%",
                'INVALID_WRITER_SHARE',
            ))
        if not totals_match(publisher_total, PUBLISHER_SHARE):
            errors.append(SplitError(
                'publishers',
                f"Publisher's share must total exactly 50%. Current total: {format_percentage(publisher_total)}%",
                'INVALID_PUBLISHER_SHARE',
            ))

    return _result(errors, warnings)


def validate_master_splits(
    splits: Sequence[CollaboratorSplit],
    label_share=None,
    allow_partial: bool = False,
) -> SplitValidationResult:
    """
    Validate the master ledger: collaborator shares plus the label's share
    form one pool that must reach 100%.

    label_share is the song-level label percentage and is kept apart from
    the collaborator rows. Rows with the label role should not be passed in.
    """
    errors: List[SplitError] = []
    warnings: List[str] = []

    label = to_decimal(label_share)
    collaborator_total = sum((to_decimal(s.percentage) for s in splits), Decimal('0'))
    total = collaborator_total + label

    if not allow_partial and not totals_match(total, FULL_SHARE):
        errors.append(SplitError(
            'total',
            f'Master splits must total exactly 100%. Current total: {format_percentage(total)}% '
            f'(Collaborators: {format_percentage(collaborator_total)}%, Label: {format_percentage(label)}%)',
            'INVALID_TOTAL',
        ))

    if label_share is not None:
        errors.extend(_bounds_errors(label, 'labelMasterShare', 'Label master'))

    for index, split in enumerate(splits):
        if split.role is None or split.role == '':
            errors.append(SplitError(f'splits[{index}].role', 'Role is missing for this split', 'MISSING_ROLE'))
            continue

        field_name = f'splits[{index}].masterOwnership'
        percentage = to_decimal(split.percentage)

        if percentage > 0 and not is_master_eligible(split.role):
            errors.append(SplitError(
                field_name,
                f'Role "{split.role}" is not eligible for master ownership.',
                'ROLE_NOT_ELIGIBLE',
            ))

        errors.extend(_bounds_errors(percentage, field_name, 'Master'))

    errors.extend(_duplicate_errors(splits))
    return _result(errors, warnings)


def validate_split_workflow(publishing_locked: bool, master_locked: bool) -> List[SplitError]:
    """Master may only be locked on top of locked publishing."""
    if master_locked and not publishing_locked:
        return [SplitError(
            'workflow',
            'Master splits cannot be locked before publishing splits are locked',
            'INVALID_WORKFLOW',
        )]
    return []

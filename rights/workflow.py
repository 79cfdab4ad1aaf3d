"""
Split workflow: saving ownership percentages and locking the two ledgers.

Publishing and master each move between unlocked and locked. Master can
only be locked while publishing is locked, and unlocking publishing also
unlocks master. Every operation runs in a transaction holding a row lock
on the song, so validation and the flag change see the same ledger.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from catalog.models import PublishingEntity, Song, SongCollaborator, SongPublishingEntity
from .exceptions import (
    PreconditionFailed,
    SplitsLocked,
    SplitValidationFailed,
    UnknownPublishingEntity,
    UnknownSongCollaborator,
)
from .percentages import fraction_to_percentage, format_percentage, percentage_to_fraction, to_decimal
from .roles import Role, is_master_eligible, is_publishing_eligible
from .validators import (
    CollaboratorSplit,
    EntitySplit,
    SplitError,
    validate_combined_publishing_splits,
    validate_master_splits,
    validate_publishing_splits,
)

logger = logging.getLogger(__name__)

PUBLISHING = 'publishing'
MASTER = 'master'
LOCK = 'lock'
UNLOCK = 'unlock'


@dataclass(frozen=True)
class LockState:
    publishing_locked: bool = False
    publishing_locked_at: Optional[datetime] = None
    master_locked: bool = False
    master_locked_at: Optional[datetime] = None

    @classmethod
    def from_song(cls, song):
        return cls(
            publishing_locked=song.publishing_locked,
            publishing_locked_at=song.publishing_locked_at,
            master_locked=song.master_locked,
            master_locked_at=song.master_locked_at,
        )

    def apply_to(self, song):
        song.publishing_locked = self.publishing_locked
        song.publishing_locked_at = self.publishing_locked_at
        song.master_locked = self.master_locked
        song.master_locked_at = self.master_locked_at
        return ['publishing_locked', 'publishing_locked_at', 'master_locked', 'master_locked_at', 'updated_at']


def transition(state: LockState, ledger: str, action: str, now: datetime) -> LockState:
    """
    Return the lock state after applying ``action`` to ``ledger``.

    Raises PreconditionFailed when the transition is not allowed from
    ``state``. Split totals are not checked here.
    """
    if ledger == PUBLISHING:
        if action == LOCK:
            if state.publishing_locked:
                raise PreconditionFailed('Publishing splits are already locked')
            return replace(state, publishing_locked=True, publishing_locked_at=now)
        if action == UNLOCK:
            # Master allocations depend on the publishing ledger, so they go too
            return LockState()
    elif ledger == MASTER:
        if action == LOCK:
            if not state.publishing_locked:
                raise PreconditionFailed('Publishing splits must be locked first')
            if state.master_locked:
                raise PreconditionFailed('Master splits are already locked')
            return replace(state, master_locked=True, master_locked_at=now)
        if action == UNLOCK:
            return replace(state, master_locked=False, master_locked_at=None)
    raise ValueError(f"Unknown transition {action!r} for ledger {ledger!r}")


def _lock_song(song_id) -> Song:
    """Load the song under a row lock. Must be called inside transaction.atomic()."""
    return Song.objects.select_for_update().get(pk=song_id)


def _song_collaborators_by_id(song) -> dict:
    return {sc.id: sc for sc in song.song_collaborators.select_related('collaborator')}


def _resolve_rows(song, splits: Iterable[Tuple[int, Decimal]]) -> List[Tuple[SongCollaborator, Decimal]]:
    rows = _song_collaborators_by_id(song)
    resolved = []
    for song_collaborator_id, percentage in splits:
        row = rows.get(song_collaborator_id)
        if row is None:
            raise UnknownSongCollaborator(
                f'SongCollaborator with id {song_collaborator_id} not found',
                details=f'Song collaborator {song_collaborator_id} is not on song {song.id}',
            )
        resolved.append((row, to_decimal(percentage)))
    return resolved


def _raise_if_invalid(result, message, song, ledger):
    if not result.is_valid:
        logger.warning(f"Rejected {ledger} splits for song {song.id}: {', '.join(result.error_codes)}")
        raise SplitValidationFailed(message, details=[error.as_dict() for error in result.errors])


def _apply_transition(song, ledger, action, now=None) -> LockState:
    state = transition(LockState.from_song(song), ledger, action, now or timezone.now())
    song.save(update_fields=state.apply_to(song))
    logger.info(f"Song {song.id}: {ledger} splits {action}ed")
    return state


# Ledger snapshots

def publishing_ledger(song) -> Tuple[List[CollaboratorSplit], List[EntitySplit]]:
    """Writer's share rows (publishing-eligible roles) and publisher's share rows."""
    collaborators = [
        CollaboratorSplit(
            role=sc.role_in_song,
            percentage=fraction_to_percentage(sc.publishing_ownership),
            song_collaborator_id=sc.id,
            collaborator_id=sc.collaborator_id,
        )
        for sc in song.song_collaborators.all()
        if is_publishing_eligible(sc.role_in_song)
    ]
    entities = [
        EntitySplit(
            publishing_entity_id=spe.publishing_entity_id,
            percentage=fraction_to_percentage(spe.ownership_percentage),
        )
        for spe in song.song_publishing_entities.all()
    ]
    return collaborators, entities


def master_ledger(song) -> Tuple[List[CollaboratorSplit], Decimal]:
    """Master-eligible collaborator rows (label rows excluded) and the label share."""
    collaborators = [
        CollaboratorSplit(
            role=sc.role_in_song,
            percentage=fraction_to_percentage(sc.master_ownership),
            song_collaborator_id=sc.id,
            collaborator_id=sc.collaborator_id,
        )
        for sc in song.song_collaborators.all()
        if is_master_eligible(sc.role_in_song) and sc.role_in_song != Role.LABEL.value
    ]
    return collaborators, fraction_to_percentage(song.label_master_share)


# Publishing ledger

def save_publishing_splits(song_id, splits: Iterable[Tuple[int, Decimal]]) -> Song:
    """
    Persist writer's share percentages per song collaborator row.

    The 50% total is not required here; it is enforced when locking.
    """
    with transaction.atomic():
        song = _lock_song(song_id)
        if song.publishing_locked:
            raise SplitsLocked('Publishing splits are locked and cannot be modified')

        rows = _resolve_rows(song, splits)
        result = validate_publishing_splits(
            [
                CollaboratorSplit(
                    role=row.role_in_song,
                    percentage=percentage,
                    song_collaborator_id=row.id,
                    collaborator_id=row.collaborator_id,
                )
                for row, percentage in rows
            ],
            allow_partial=True,
        )
        _raise_if_invalid(result, 'Validation failed', song, PUBLISHING)

        for row, percentage in rows:
            row.publishing_ownership = percentage_to_fraction(percentage)
            row.save(update_fields=['publishing_ownership', 'updated_at'])

    logger.info(f"Saved {len(rows)} publishing splits for song {song.id}")
    return song


def replace_publishing_entities(song_id, entities: Iterable[Tuple[int, Decimal]]) -> Song:
    """Replace the song's publisher's share rows."""
    entities = [(entity_id, to_decimal(percentage)) for entity_id, percentage in entities]
    with transaction.atomic():
        song = _lock_song(song_id)
        if song.publishing_locked:
            raise SplitsLocked('Publishing splits are locked and cannot be modified')

        known = set(
            PublishingEntity.objects.filter(pk__in=[entity_id for entity_id, _ in entities]).values_list('pk', flat=True)
        )
        missing = [entity_id for entity_id, _ in entities if entity_id not in known]
        if missing:
            raise UnknownPublishingEntity(
                'Publishing entity not found',
                details=f"Unknown publishing entity ids: {', '.join(str(m) for m in missing)}",
            )

        result = validate_combined_publishing_splits(
            [],
            [EntitySplit(publishing_entity_id=entity_id, percentage=percentage) for entity_id, percentage in entities],
            allow_partial=True,
        )
        _raise_if_invalid(result, 'Validation failed', song, PUBLISHING)

        song.song_publishing_entities.all().delete()
        SongPublishingEntity.objects.bulk_create([
            SongPublishingEntity(
                song=song,
                publishing_entity_id=entity_id,
                ownership_percentage=percentage_to_fraction(percentage),
            )
            for entity_id, percentage in entities
        ])

    logger.info(f"Replaced publishing entities for song {song.id} ({len(entities)} rows)")
    return song


def lock_publishing(song_id, now=None) -> LockState:
    with transaction.atomic():
        song = _lock_song(song_id)
        if song.publishing_locked:
            raise PreconditionFailed('Publishing splits are already locked')

        collaborators, entities = publishing_ledger(song)
        result = validate_combined_publishing_splits(collaborators, entities, allow_partial=False)
        _raise_if_invalid(result, 'Cannot lock: validation failed', song, PUBLISHING)

        return _apply_transition(song, PUBLISHING, LOCK, now)


def unlock_publishing(song_id) -> LockState:
    with transaction.atomic():
        song = _lock_song(song_id)
        if song.master_locked:
            logger.info(f"Song {song.id}: unlocking publishing also unlocks master splits")
        return _apply_transition(song, PUBLISHING, UNLOCK)


# Master ledger

def _require_master_editable(song):
    if not song.publishing_locked:
        raise PreconditionFailed('Publishing splits must be locked before master splits can be set')
    if song.master_locked:
        raise SplitsLocked('Master splits are locked and cannot be modified')


def save_master_splits(song_id, splits: Iterable[Tuple[int, Decimal]], label_master_share=None) -> Song:
    """
    Persist master percentages per song collaborator row and, when given,
    the label's share on the song. A partial total is allowed until lock.
    """
    with transaction.atomic():
        song = _lock_song(song_id)
        _require_master_editable(song)

        rows = _resolve_rows(song, splits)
        label_rows = [
            SplitError(
                f'splits[{index}].songCollaboratorId',
                'The label share is set with labelMasterShare, not on a label collaborator row',
                'LABEL_SHARE_ON_SONG',
            )
            for index, (row, percentage) in enumerate(rows)
            if row.role_in_song == Role.LABEL.value and percentage > 0
        ]
        result = validate_master_splits(
            [
                CollaboratorSplit(
                    role=row.role_in_song,
                    percentage=percentage,
                    song_collaborator_id=row.id,
                    collaborator_id=row.collaborator_id,
                )
                for row, percentage in rows
            ],
            label_share=label_master_share,
            allow_partial=True,
        )
        if label_rows:
            result.errors.extend(label_rows)
            result.is_valid = False
        _raise_if_invalid(result, 'Validation failed', song, MASTER)

        for row, percentage in rows:
            row.master_ownership = percentage_to_fraction(percentage)
            row.save(update_fields=['master_ownership', 'updated_at'])

        if label_master_share is not None:
            song.label_master_share = percentage_to_fraction(label_master_share)
            song.save(update_fields=['label_master_share', 'updated_at'])

    logger.info(f"Saved {len(rows)} master splits for song {song.id}")
    return song


def set_label_master_share(song_id, label_master_share) -> Song:
    with transaction.atomic():
        song = _lock_song(song_id)
        _require_master_editable(song)

        result = validate_master_splits([], label_share=label_master_share, allow_partial=True)
        _raise_if_invalid(result, 'Validation failed', song, MASTER)

        song.label_master_share = percentage_to_fraction(label_master_share)
        song.save(update_fields=['label_master_share', 'updated_at'])

    logger.info(f"Set label master share for song {song.id}")
    return song


def lock_master(song_id, now=None) -> LockState:
    with transaction.atomic():
        song = _lock_song(song_id)
        # Ordering checks first so a stale total never masks them
        transition(LockState.from_song(song), MASTER, LOCK, now or timezone.now())

        collaborators, label_share = master_ledger(song)
        result = validate_master_splits(collaborators, label_share=label_share, allow_partial=False)
        message = 'Cannot lock: validation failed'
        if 'INVALID_TOTAL' in result.error_codes:
            message = 'Cannot lock: Master splits must total exactly 100%'
        _raise_if_invalid(result, message, song, MASTER)

        return _apply_transition(song, MASTER, LOCK, now)


def unlock_master(song_id) -> LockState:
    with transaction.atomic():
        song = _lock_song(song_id)
        return _apply_transition(song, MASTER, UNLOCK)


# Song collaborator rows

def _ledger_locked_for_role(song, role) -> Optional[str]:
    if song.publishing_locked and is_publishing_eligible(role):
        return PUBLISHING
    if song.master_locked and is_master_eligible(role):
        return MASTER
    return None


def add_song_collaborator(song_id, collaborator, roles: List[str],
                          publishing_ownership=None, master_ownership=None) -> List[SongCollaborator]:
    """
    Credit a collaborator on a song with one row per role.

    A given percentage is applied to every role and goes through the same
    split rules as a ledger save, so it is refused for a role that cannot
    hold that kind of ownership. Positive percentages are refused for a
    ledger that is already locked; None leaves the share unset.
    """
    with transaction.atomic():
        song = _lock_song(song_id)
        if publishing_ownership is not None and to_decimal(publishing_ownership) > 0 and song.publishing_locked:
            raise SplitsLocked('Publishing splits are locked and cannot be modified')
        if master_ownership is not None and to_decimal(master_ownership) > 0 and song.master_locked:
            raise SplitsLocked('Master splits are locked and cannot be modified')

        if publishing_ownership is not None:
            result = validate_publishing_splits(
                [CollaboratorSplit(role=role, percentage=to_decimal(publishing_ownership), collaborator_id=collaborator.id)
                 for role in roles],
                allow_partial=True,
            )
            _raise_if_invalid(result, 'Validation failed', song, PUBLISHING)

        if master_ownership is not None:
            splits = [
                CollaboratorSplit(role=role, percentage=to_decimal(master_ownership), collaborator_id=collaborator.id)
                for role in roles
            ]
            result = validate_master_splits(splits, allow_partial=True)
            label_rows = [
                SplitError(
                    f'rolesInSong[{index}]',
                    'The label share is set with labelMasterShare, not on a label collaborator row',
                    'LABEL_SHARE_ON_SONG',
                )
                for index, split in enumerate(splits)
                if split.role == Role.LABEL.value and split.percentage > 0
            ]
            if label_rows:
                result.errors.extend(label_rows)
                result.is_valid = False
            _raise_if_invalid(result, 'Validation failed', song, MASTER)

        created = []
        for role in roles:
            created.append(SongCollaborator.objects.create(
                song=song,
                collaborator=collaborator,
                role_in_song=role,
                publishing_ownership=percentage_to_fraction(publishing_ownership) if publishing_ownership is not None else None,
                master_ownership=percentage_to_fraction(master_ownership) if master_ownership is not None else None,
            ))

    logger.info(f"Added collaborator {collaborator.id} to song {song.id} as {', '.join(roles)}")
    return created


def remove_song_collaborator(song_id, song_collaborator_id) -> None:
    with transaction.atomic():
        song = _lock_song(song_id)
        row = SongCollaborator.objects.get(pk=song_collaborator_id)
        if row.song_id != song.id:
            raise UnknownSongCollaborator('Song collaborator does not belong to this song')

        locked = _ledger_locked_for_role(song, row.role_in_song)
        if locked:
            raise SplitsLocked(f'{locked.capitalize()} splits are locked; unlock them before removing this collaborator')
        row.delete()

    logger.info(f"Removed song collaborator {song_collaborator_id} from song {song_id}")


# Summaries

def publishing_summary(song) -> dict:
    collaborators, entities = publishing_ledger(song)
    writer_total = sum((s.percentage for s in collaborators), Decimal('0'))
    publisher_total = sum((e.percentage for e in entities), Decimal('0'))
    return {
        'songId': song.id,
        'locked': song.publishing_locked,
        'lockedAt': song.publishing_locked_at,
        'collaborators': [
            {
                'songCollaboratorId': s.song_collaborator_id,
                'collaboratorId': s.collaborator_id,
                'role': s.role,
                'percentage': format_percentage(s.percentage),
            }
            for s in collaborators
        ],
        'entities': [
            {'publishingEntityId': e.publishing_entity_id, 'percentage': format_percentage(e.percentage)}
            for e in entities
        ],
        'writerTotal': format_percentage(writer_total),
        'publisherTotal': format_percentage(publisher_total),
        'isComplete': validate_combined_publishing_splits(collaborators, entities).is_valid,
    }


def master_summary(song) -> dict:
    collaborators, label_share = master_ledger(song)
    collaborator_total = sum((s.percentage for s in collaborators), Decimal('0'))
    return {
        'songId': song.id,
        'locked': song.master_locked,
        'lockedAt': song.master_locked_at,
        'publishingLocked': song.publishing_locked,
        'collaborators': [
            {
                'songCollaboratorId': s.song_collaborator_id,
                'collaboratorId': s.collaborator_id,
                'role': s.role,
                'percentage': format_percentage(s.percentage),
            }
            for s in collaborators
        ],
        'labelMasterShare': format_percentage(label_share),
        'collaboratorTotal': format_percentage(collaborator_total),
        'total': format_percentage(collaborator_total + label_share),
        'isComplete': validate_master_splits(collaborators, label_share=label_share).is_valid,
    }

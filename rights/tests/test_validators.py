"""
Tests for split validation.

Covers:
- Combined writer's share / publisher's share checks
- Role-based publishing restrictions
- Duplicate detection
- Master ledger totals including the label share
"""
from decimal import Decimal

from django.test import SimpleTestCase

from rights.percentages import fraction_to_percentage, format_percentage, percentage_to_fraction
from rights.validators import (
    CollaboratorSplit,
    EntitySplit,
    validate_combined_publishing_splits,
    validate_master_splits,
    validate_publishing_splits,
    validate_split_workflow,
)


def split(role, percentage, song_collaborator_id=None, collaborator_id=None):
    return CollaboratorSplit(
        role=role,
        percentage=Decimal(str(percentage)),
        song_collaborator_id=song_collaborator_id,
        collaborator_id=collaborator_id,
    )


def entity(entity_id, percentage):
    return EntitySplit(publishing_entity_id=entity_id, percentage=Decimal(str(percentage)))


class PublishingSplitsTestCase(SimpleTestCase):

    def test_total_must_be_100_unless_partial(self):
        splits = [split('writer', 60, 1), split('writer', 30, 2)]

        result = validate_publishing_splits(splits)
        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_codes, ['INVALID_TOTAL'])
        self.assertIn('Current total: 90.00%', result.errors[0].message)

        self.assertTrue(validate_publishing_splits(splits, allow_partial=True).is_valid)

    def test_total_within_epsilon_is_accepted(self):
        splits = [split('writer', '33.33', 1), split('writer', '33.33', 2), split('writer', '33.34', 3)]
        self.assertTrue(validate_publishing_splits(splits).is_valid)

        splits = [split('writer', '33.33', 1), split('writer', '33.33', 2), split('writer', '33.335', 3)]
        self.assertTrue(validate_publishing_splits(splits).is_valid)

        splits = [split('writer', '33.33', 1), split('writer', '33.33', 2), split('writer', '33.30', 3)]
        self.assertFalse(validate_publishing_splits(splits).is_valid)

    def test_musician_with_publishing_share_is_forbidden(self):
        result = validate_publishing_splits([split('musician', 10, 1)], allow_partial=True)

        self.assertFalse(result.is_valid)
        self.assertIn('MUSICIAN_PUBLISHING_FORBIDDEN', result.error_codes)
        self.assertIn('ROLE_NOT_ELIGIBLE', result.error_codes)

    def test_vocalist_and_producer_with_publishing_share_are_forbidden(self):
        result = validate_publishing_splits(
            [split('vocalist', 5, 1), split('producer', 5, 2)],
            allow_partial=True
        )

        self.assertIn('VOCALIST_PUBLISHING_FORBIDDEN', result.error_codes)
        self.assertIn('PRODUCER_PUBLISHING_FORBIDDEN', result.error_codes)

    def test_ineligible_role_at_zero_is_allowed(self):
        result = validate_publishing_splits([split('musician', 0, 1), split('writer', 100, 2)])
        self.assertTrue(result.is_valid)

    def test_missing_role(self):
        result = validate_publishing_splits([split(None, 50, 1)], allow_partial=True)

        self.assertEqual(result.error_codes, ['MISSING_ROLE'])
        self.assertEqual(result.errors[0].field, 'splits[0].role')

    def test_bounds(self):
        result = validate_publishing_splits(
            [split('writer', -1, 1), split('writer', 101, 2)],
            allow_partial=True
        )

        self.assertIn('NEGATIVE_VALUE', result.error_codes)
        self.assertIn('EXCEEDS_MAX', result.error_codes)
        self.assertEqual(result.errors[0].field, 'splits[0].publishingOwnership')

    def test_duplicate_song_collaborators(self):
        result = validate_publishing_splits(
            [split('writer', 25, 7), split('writer', 25, 7)],
            allow_partial=True
        )

        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_codes, ['DUPLICATE_SONG_COLLABORATORS'])
        self.assertIn('7', result.errors[0].message)

    def test_same_collaborator_in_two_roles_is_not_a_duplicate(self):
        result = validate_publishing_splits(
            [split('writer', 50, collaborator_id=3), split('artist', 50, collaborator_id=3)]
        )
        self.assertTrue(result.is_valid)

    def test_duplicate_collaborator_roles_without_row_ids(self):
        result = validate_publishing_splits(
            [split('writer', 50, collaborator_id=3), split('writer', 50, collaborator_id=3)]
        )

        self.assertEqual(result.error_codes, ['DUPLICATE_COLLABORATOR_ROLES'])
        self.assertIn('3-writer', result.errors[0].message)


class CombinedPublishingSplitsTestCase(SimpleTestCase):

    def test_writer_and_publisher_shares_balance(self):
        result = validate_combined_publishing_splits(
            [split('writer', 30, 1), split('writer', 20, 2)],
            [entity(1, 50)],
        )

        self.assertTrue(result.is_valid)
        self.assertEqual(result.errors, [])

    def test_publisher_share_short(self):
        result = validate_combined_publishing_splits(
            [split('writer', 30, 1), split('writer', 20, 2)],
            [entity(1, 40)],
        )

        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_codes, ['INVALID_PUBLISHER_SHARE'])
        self.assertIn('40.00%', result.errors[0].message)

    def test_writer_share_short(self):
        result = validate_combined_publishing_splits([split('writer', 45, 1)], [entity(1, 50)])

        self.assertEqual(result.error_codes, ['INVALID_WRITER_SHARE'])
        self.assertEqual(
            result.errors[0].message,
            "Writer's share must total exactly 50%. Current total: 45.00%"
        )

    def test_pools_are_not_merged(self):
        # 70 + 30 is 100 overall but neither pool is 50
        result = validate_combined_publishing_splits([split('writer', 70, 1)], [entity(1, 30)])

        self.assertIn('INVALID_WRITER_SHARE', result.error_codes)
        self.assertIn('INVALID_PUBLISHER_SHARE', result.error_codes)

    def test_partial_skips_pool_totals(self):
        result = validate_combined_publishing_splits(
            [split('writer', 10, 1)], [entity(1, 5)], allow_partial=True
        )
        self.assertTrue(result.is_valid)

    def test_partial_still_checks_rows(self):
        result = validate_combined_publishing_splits(
            [split('musician', 10, 1)], [entity(1, -5), entity(1, 5)], allow_partial=True
        )

        self.assertIn('MUSICIAN_PUBLISHING_FORBIDDEN', result.error_codes)
        self.assertIn('NEGATIVE_VALUE', result.error_codes)
        self.assertIn('DUPLICATE_ENTITIES', result.error_codes)
        self.assertNotIn('INVALID_TOTAL', result.error_codes)

    def test_rows_without_roles(self):
        result = validate_combined_publishing_splits(
            [split('writer', 50, 1), split(None, 0, 2)], [entity(1, 50)]
        )

        self.assertEqual(result.error_codes, ['INVALID_ROLE'])

    def test_repeated_validation_is_stable(self):
        collaborators = [split('writer', 30, 1), split('writer', 20, 2)]
        entities = [entity(1, 40)]

        first = validate_combined_publishing_splits(collaborators, entities)
        second = validate_combined_publishing_splits(collaborators, entities)

        self.assertEqual(first.is_valid, second.is_valid)
        self.assertEqual(first.errors, second.errors)


class MasterSplitsTestCase(SimpleTestCase):

    def test_collaborators_plus_label_reach_100(self):
        result = validate_master_splits([split('producer', 60, 1)], label_share=Decimal('40'))
        self.assertTrue(result.is_valid)

    def test_total_message_breaks_down_label(self):
        result = validate_master_splits([split('producer', 60, 1)], label_share=Decimal('30'))

        self.assertEqual(result.error_codes, ['INVALID_TOTAL'])
        self.assertIn('Current total: 90.00% (Collaborators: 60.00%, Label: 30.00%)', result.errors[0].message)

    def test_writer_cannot_hold_master(self):
        result = validate_master_splits([split('writer', 10, 1)], allow_partial=True)

        self.assertEqual(result.error_codes, ['ROLE_NOT_ELIGIBLE'])
        self.assertEqual(result.errors[0].field, 'splits[0].masterOwnership')

    def test_duplicates_and_bounds(self):
        result = validate_master_splits(
            [split('musician', 120, 4), split('musician', -20, 4)],
            allow_partial=True
        )

        self.assertIn('EXCEEDS_MAX', result.error_codes)
        self.assertIn('NEGATIVE_VALUE', result.error_codes)
        self.assertIn('DUPLICATE_SONG_COLLABORATORS', result.error_codes)

    def test_label_share_bounds(self):
        result = validate_master_splits([], label_share=Decimal('150'), allow_partial=True)

        self.assertEqual(result.error_codes, ['EXCEEDS_MAX'])
        self.assertEqual(result.errors[0].field, 'labelMasterShare')


class SplitWorkflowRuleTestCase(SimpleTestCase):

    def test_master_locked_without_publishing(self):
        errors = validate_split_workflow(publishing_locked=False, master_locked=True)
        self.assertEqual([e.code for e in errors], ['INVALID_WORKFLOW'])

    def test_valid_combinations(self):
        self.assertEqual(validate_split_workflow(False, False), [])
        self.assertEqual(validate_split_workflow(True, False), [])
        self.assertEqual(validate_split_workflow(True, True), [])


class PercentageConversionTestCase(SimpleTestCase):

    def test_round_trip_boundaries(self):
        self.assertEqual(percentage_to_fraction(30), Decimal('0.300000'))
        self.assertEqual(percentage_to_fraction('33.3333333'), Decimal('0.333333'))
        self.assertEqual(fraction_to_percentage(Decimal('0.25')), Decimal('25.00'))
        self.assertEqual(fraction_to_percentage(None), Decimal('0'))

    def test_format(self):
        self.assertEqual(format_percentage(Decimal('40')), '40.00')
        self.assertEqual(format_percentage(0.1 + 0.2), '0.30')

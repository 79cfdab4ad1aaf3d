"""
Tests for the role eligibility table.
"""
from django.test import SimpleTestCase

from rights.roles import (
    ROLE_CONFIGURATIONS,
    Role,
    get_allowed_revenue_streams,
    get_contract_type,
    get_master_revenue_scope,
    is_master_eligible,
    is_publishing_eligible,
    is_revenue_eligible,
)


class RoleEligibilityTestCase(SimpleTestCase):

    def test_every_role_is_configured(self):
        self.assertEqual(set(ROLE_CONFIGURATIONS), set(Role))

    def test_publishing_eligibility(self):
        self.assertTrue(is_publishing_eligible('writer'))
        self.assertTrue(is_publishing_eligible('artist'))
        self.assertTrue(is_publishing_eligible('label'))
        self.assertFalse(is_publishing_eligible('musician'))
        self.assertFalse(is_publishing_eligible('producer'))
        self.assertFalse(is_publishing_eligible('vocalist'))

    def test_master_eligibility(self):
        self.assertTrue(is_master_eligible('musician'))
        self.assertTrue(is_master_eligible('producer'))
        self.assertTrue(is_master_eligible('artist'))
        self.assertTrue(is_master_eligible('vocalist'))
        self.assertTrue(is_master_eligible('label'))
        self.assertFalse(is_master_eligible('writer'))

    def test_unknown_or_missing_role_is_never_eligible(self):
        for role in (None, '', 'drummer'):
            self.assertFalse(is_publishing_eligible(role))
            self.assertFalse(is_master_eligible(role))
            self.assertIsNone(get_contract_type(role))

    def test_contract_types(self):
        self.assertEqual(get_contract_type('writer'), 'songwriter_publishing')
        self.assertEqual(get_contract_type('producer'), 'producer_agreement')
        self.assertEqual(get_contract_type('musician'), 'digital_master_only')
        self.assertEqual(get_contract_type('artist'), 'digital_master_only')
        self.assertEqual(get_contract_type(Role.LABEL), 'label_record')

    def test_master_revenue_scope(self):
        self.assertEqual(get_master_revenue_scope('musician'), 'digital_only')
        self.assertEqual(get_master_revenue_scope('producer'), 'full')
        self.assertIsNone(get_master_revenue_scope('writer'))

    def test_table_cannot_be_mutated(self):
        with self.assertRaises(TypeError):
            ROLE_CONFIGURATIONS[Role.WRITER] = None

    def test_revenue_eligibility(self):
        self.assertTrue(is_revenue_eligible('musician', 'digital_streaming'))
        self.assertFalse(is_revenue_eligible('musician', 'sync_licensing'))
        self.assertFalse(is_revenue_eligible('producer', 'publishing_income'))
        self.assertEqual(
            [stream['id'] for stream in get_allowed_revenue_streams('writer')],
            ['sync_licensing', 'publishing_income']
        )

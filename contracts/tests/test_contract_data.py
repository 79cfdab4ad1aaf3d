"""
Tests for contract types, the contract data builder and template rendering.
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings

from catalog.models import Collaborator, Song, SongCollaborator
from contracts.contract_types import get_contract_type_label, get_required_contract_types
from contracts.services.contract_data_builder import (
    build_contract_data,
    calculate_in_kind_total,
    format_effective_date,
    format_writers_list,
)
from contracts.services.contract_generator import contract_title, generate_contract_html
from contracts.services.contract_templates import (
    ContractTemplateNotFound,
    has_template,
    hide_text_tags,
    load_template,
    render_contract_template,
)

TODAY = date(2026, 10, 19)


class ContractDataTestCase(TestCase):

    def setUp(self):
        self.song = Song.objects.create(
            title='Low Tide',
            catalog_number='00001',
            isrc_code='USRC17607839',
            label_master_share=Decimal('0.600000'),
            notes='Radio edit included',
        )
        self.writer = Collaborator.objects.create(
            first_name='Mara', last_name='Quinn', email='mara@test.com',
            capable_roles=['writer', 'producer'], pro_affiliation='BMI', ipi_number='00123456789',
            address='12 Shore Rd',
        )
        self.cowriter = Collaborator.objects.create(
            first_name='Theo', last_name='Banks', email='theo@test.com', capable_roles=['writer']
        )
        self.producer = Collaborator.objects.create(
            first_name='Ivy', last_name='Cole', email='ivy@test.com', capable_roles=['producer']
        )
        self.writer_row = SongCollaborator.objects.create(
            song=self.song, collaborator=self.writer, role_in_song='writer',
            publishing_ownership=Decimal('0.250000')
        )
        self.cowriter_row = SongCollaborator.objects.create(
            song=self.song, collaborator=self.cowriter, role_in_song='writer',
            publishing_ownership=Decimal('0.250000')
        )
        self.producer_row = SongCollaborator.objects.create(
            song=self.song, collaborator=self.producer, role_in_song='producer',
            master_ownership=Decimal('0.400000')
        )


class ContractTypeTest(ContractDataTestCase):

    def test_required_types_follow_shares(self):
        self.assertEqual(get_required_contract_types(self.writer_row), ['songwriter_publishing'])
        self.assertEqual(get_required_contract_types(self.producer_row), ['digital_master_only'])

        self.producer_row.publishing_ownership = Decimal('0.100000')
        self.assertEqual(
            get_required_contract_types(self.producer_row),
            ['songwriter_publishing', 'digital_master_only']
        )

    def test_no_shares_no_contracts(self):
        row = SongCollaborator(song=self.song, collaborator=self.writer, role_in_song='musician')
        self.assertEqual(get_required_contract_types(row), [])

    def test_labels(self):
        self.assertEqual(get_contract_type_label('songwriter_publishing'), 'Publishing Assignment')
        self.assertEqual(get_contract_type_label('unknown'), 'unknown')


class DataBuilderTest(ContractDataTestCase):

    def test_effective_date(self):
        self.assertEqual(format_effective_date(TODAY), 'October 19, 2026')
        self.assertEqual(format_effective_date(date(2026, 3, 5)), 'March 5, 2026')

    def test_writers_list(self):
        rows = self.song.song_collaborators.select_related('collaborator')
        self.assertEqual(format_writers_list(rows), 'Mara Quinn (25.00%), Theo Banks (25.00%)')
        self.assertEqual(format_writers_list([self.producer_row]), 'N/A')

    @override_settings(CONTRACT_CONFIG={'in_kind_services': {'studio_value': 500, 'admin_value': 250}})
    def test_in_kind_total(self):
        self.assertEqual(calculate_in_kind_total(), 750)
        self.assertEqual(calculate_in_kind_total({'studio_value': 100}), 350)
        self.assertEqual(calculate_in_kind_total({'marketing_value': 50}), 800)

    def test_publishing_assignment_context(self):
        data = build_contract_data(self.song, self.writer_row, 'songwriter_publishing', today=TODAY)

        self.assertEqual(data['effective_date'], 'October 19, 2026')
        self.assertEqual(data['writer_full_name'], 'Mara Quinn')
        self.assertEqual(data['publishing_share_percentage'], '25.00')
        self.assertEqual(data['all_writers'], 'Mara Quinn (25.00%), Theo Banks (25.00%)')
        self.assertEqual(data['compositions'][0]['writers'], 'Mara Quinn (25.00%)')
        self.assertEqual(data['compositions'][0]['isrc'], 'USRC17607839')
        self.assertEqual(data['pro_affiliation'], 'BMI')
        self.assertEqual(data['publisher_name'], 'River and Ember, LLC')
        self.assertIsNone(data['advance_amount'])

    def test_master_revenue_share_context(self):
        data = build_contract_data(self.song, self.producer_row, 'digital_master_only', today=TODAY)

        self.assertEqual(data['collaborator_share_percentage'], '40.00')
        self.assertEqual(data['label_share_percentage'], '60.00')
        self.assertEqual(data['collaborator_role'], 'Producer')
        self.assertEqual(data['credit_wording'], 'Produced by Ivy Cole')
        self.assertEqual(data['special_terms'], 'Radio edit included')
        self.assertTrue(data['is_producer'])
        self.assertFalse(data['is_writer'])

    def test_other_types_get_common_fields(self):
        data = build_contract_data(self.song, self.producer_row, 'producer_agreement', today=TODAY)
        self.assertEqual(data['song_title'], 'Low Tide')
        self.assertNotIn('credit_wording', data)


class ContractTemplateTest(ContractDataTestCase):

    def test_templates_registered(self):
        self.assertTrue(has_template('songwriter_publishing'))
        self.assertTrue(has_template('digital_master_only'))
        self.assertFalse(has_template('label_record'))
        with self.assertRaises(ContractTemplateNotFound):
            load_template('label_record')

    def test_hide_text_tags(self):
        html = hide_text_tags('<p>Signature: [sig|req|signer1]</p>')
        self.assertEqual(
            html,
            '<p>Signature: <span class="text-tag" style="color: white; background: white;">'
            '[sig|req|signer1]</span></p>'
        )

    def test_publishing_assignment_renders(self):
        data = build_contract_data(self.song, self.writer_row, 'songwriter_publishing', today=TODAY)
        html = render_contract_template('songwriter_publishing', data)

        self.assertIn('<h1>PUBLISHING ASSIGNMENT AGREEMENT</h1>', html)
        self.assertIn('<strong>October 19, 2026</strong>', html)
        self.assertIn('<td>Low Tide</td><td>Mara Quinn (25.00%)</td><td>USRC17607839</td><td>N/A</td>', html)
        self.assertIn('<strong>BMI</strong>, IPI number 00123456789', html)
        self.assertIn('[sig|req|signer1]</span>', html)
        self.assertNotIn('{%', html)
        self.assertNotIn('{{', html)

    def test_master_revenue_share_renders(self):
        data = build_contract_data(self.song, self.producer_row, 'digital_master_only', today=TODAY)
        html = render_contract_template('digital_master_only', data)

        self.assertIn('<td>Ivy Cole (Producer)</td><td>40.00%</td>', html)
        self.assertIn('<td>River and Ember, LLC</td><td>60.00%</td>', html)
        self.assertIn('<em>Produced by Ivy Cole</em>', html)
        self.assertIn('final mixes and stems', html)

    def test_generate_contract_html_wraps_document(self):
        html = generate_contract_html(self.song, self.writer_row, 'songwriter_publishing')

        self.assertIn('<title>Publishing Assignment - Low Tide - Mara Quinn</title>', html)
        self.assertIn('<h1>PUBLISHING ASSIGNMENT AGREEMENT</h1>', html)
        self.assertEqual(
            contract_title(self.song, self.producer_row, 'digital_master_only'),
            'Master Revenue Share Agreement - Low Tide - Ivy Cole'
        )

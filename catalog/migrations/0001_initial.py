import catalog.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


def ownership_field(**kwargs):
    return models.DecimalField(
        blank=True,
        decimal_places=6,
        max_digits=7,
        null=True,
        validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(1)],
        **kwargs
    )


ROLE_CHOICES = [
    ('musician', 'Musician'),
    ('writer', 'Writer'),
    ('producer', 'Producer'),
    ('artist', 'Artist'),
    ('vocalist', 'Vocalist'),
    ('label', 'Label'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Collaborator',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('middle_name', models.CharField(blank=True, max_length=100, null=True)),
                ('last_name', models.CharField(db_index=True, max_length=100)),
                ('email', models.EmailField(blank=True, help_text='Contact address; required for e-signature and broadcast email', max_length=254, null=True, unique=True)),
                ('phone', models.CharField(blank=True, max_length=50, null=True)),
                ('address', models.TextField(blank=True, null=True)),
                ('capable_roles', models.JSONField(blank=True, default=list, help_text='Roles this person can be assigned on a song')),
                ('pro_affiliation', models.CharField(blank=True, help_text='Performing rights organization (ASCAP, BMI, ...)', max_length=20, null=True, validators=[catalog.validators.validate_pro_affiliation])),
                ('ipi_number', models.CharField(blank=True, help_text='IPI/CAE number', max_length=20, null=True)),
                ('tax_id', models.CharField(blank=True, max_length=50, null=True)),
                ('publishing_company', models.CharField(blank=True, max_length=255, null=True)),
                ('manager_name', models.CharField(blank=True, max_length=255, null=True)),
                ('manager_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('manager_phone', models.CharField(blank=True, max_length=50, null=True)),
                ('royalty_account_info', models.TextField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], db_index=True, default='active', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['last_name', 'first_name'],
            },
        ),
        migrations.CreateModel(
            name='PublishingEntity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, unique=True)),
                ('is_internal', models.BooleanField(default=False, help_text="The label's own publishing company")),
                ('contact_name', models.CharField(blank=True, max_length=255, null=True)),
                ('contact_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('pro_affiliation', models.CharField(blank=True, max_length=20, null=True, validators=[catalog.validators.validate_pro_affiliation])),
                ('ipi_number', models.CharField(blank=True, max_length=20, null=True)),
                ('address', models.TextField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'verbose_name_plural': 'Publishing entities',
            },
        ),
        migrations.CreateModel(
            name='Song',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(db_index=True, max_length=255)),
                ('isrc_code', models.CharField(blank=True, help_text='ISRC in CC-XXX-YY-NNNNN form', max_length=15, null=True, validators=[catalog.validators.validate_isrc])),
                ('iswc_code', models.CharField(blank=True, max_length=20, null=True)),
                ('catalog_number', models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ('release_date', models.DateField(blank=True, null=True)),
                ('pro_work_registration_number', models.CharField(blank=True, max_length=50, null=True)),
                ('publishing_admin', models.CharField(blank=True, max_length=255, null=True)),
                ('master_owner', models.CharField(blank=True, max_length=255, null=True)),
                ('genre', models.CharField(blank=True, max_length=50, null=True)),
                ('sub_genre', models.CharField(blank=True, max_length=50, null=True)),
                ('duration', models.PositiveIntegerField(blank=True, help_text='Duration in seconds', null=True)),
                ('recording_date', models.DateField(blank=True, null=True)),
                ('recording_location', models.CharField(blank=True, max_length=255, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('archived', 'Archived')], db_index=True, default='draft', max_length=10)),
                ('publishing_locked', models.BooleanField(default=False)),
                ('publishing_locked_at', models.DateTimeField(blank=True, null=True)),
                ('master_locked', models.BooleanField(default=False)),
                ('master_locked_at', models.DateTimeField(blank=True, null=True)),
                ('label_master_share', ownership_field(help_text="Label's master share as a fraction")),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['title'],
            },
        ),
        migrations.CreateModel(
            name='SongCollaborator',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role_in_song', models.CharField(choices=ROLE_CHOICES, max_length=20)),
                ('publishing_ownership', ownership_field()),
                ('master_ownership', ownership_field()),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('collaborator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='song_collaborations', to='catalog.collaborator')),
                ('song', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='song_collaborators', to='catalog.song')),
            ],
            options={
                'ordering': ['song', 'created_at'],
                'constraints': [models.UniqueConstraint(fields=('song', 'collaborator', 'role_in_song'), name='unique_song_collaborator_role')],
            },
        ),
        migrations.CreateModel(
            name='SongPublishingEntity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ownership_percentage', ownership_field()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('publishing_entity', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='song_links', to='catalog.publishingentity')),
                ('song', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='song_publishing_entities', to='catalog.song')),
            ],
            options={
                'ordering': ['song', 'publishing_entity__name'],
                'verbose_name_plural': 'Song publishing entities',
                'constraints': [models.UniqueConstraint(fields=('song', 'publishing_entity'), name='unique_song_publishing_entity')],
            },
        ),
    ]

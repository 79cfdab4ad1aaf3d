import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Contract',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('template_type', models.CharField(choices=[('songwriter_publishing', 'Publishing Assignment'), ('digital_master_only', 'Master Revenue Share Agreement'), ('producer_agreement', 'Producer Agreement'), ('label_record', 'Label Record')], max_length=30)),
                ('esignature_status', models.CharField(choices=[('pending', 'Pending'), ('draft', 'Draft'), ('sent', 'Sent'), ('signed', 'Signed'), ('declined', 'Declined')], db_index=True, default='pending', max_length=10)),
                ('esignature_doc_id', models.CharField(blank=True, db_index=True, help_text='Dropbox Sign signature request ID', max_length=255, null=True)),
                ('signer_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('signed_at', models.DateTimeField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('collaborator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contracts', to='catalog.collaborator')),
                ('song', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contracts', to='catalog.song')),
                ('song_collaborator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contracts', to='catalog.songcollaborator')),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(fields=('song_collaborator', 'template_type'), name='unique_contract_per_song_collaborator_type')],
            },
        ),
    ]

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SmartLink',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slug', models.SlugField(help_text="Public path segment, e.g. 'low-tide'", max_length=200, unique=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('image_url', models.CharField(blank=True, help_text='Cover image, absolute or relative (e.g. /media/covers/low-tide.jpg)', max_length=500, null=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('song', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='smart_links', to='catalog.song')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='SmartLinkDestination',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('service_key', models.CharField(help_text="Service identifier used in redirect URLs, e.g. 'spotify'", max_length=50)),
                ('label', models.CharField(max_length=100)),
                ('url', models.URLField(max_length=1000)),
                ('sort_order', models.IntegerField(default=0)),
                ('smart_link', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='destinations', to='smartlinks.smartlink')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'constraints': [models.UniqueConstraint(fields=('smart_link', 'service_key'), name='unique_smart_link_service')],
            },
        ),
        migrations.CreateModel(
            name='SmartLinkClick',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('service_key', models.CharField(db_index=True, max_length=50)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('referrer', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('smart_link', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='clicks', to='smartlinks.smartlink')),
            ],
            options={
                'ordering': ['created_at', 'id'],
            },
        ),
    ]

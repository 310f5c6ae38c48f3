from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='IntegrationSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('platform_name', models.CharField(blank=True, max_length=100)),
                ('platform_url', models.URLField(blank=True, max_length=500)),
                ('api_key', models.CharField(blank=True, max_length=255)),
                ('restaurant_external_id', models.CharField(blank=True, max_length=100)),
                ('restaurant_address', models.CharField(blank=True, max_length=255)),
                ('restaurant_phone', models.CharField(blank=True, max_length=50)),
                ('currency', models.CharField(default='PLN', max_length=3)),
                ('last_sync_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'integration_settings',
                'verbose_name_plural': 'Integration settings',
            },
        ),
    ]

from decimal import Decimal

import django.core.validators
from django.db import migrations, models


PAYMENT_METHODS = [
    ('cash', 'Cash'),
    ('card', 'Card'),
    ('blik', 'BLIK'),
    ('transfer', 'Bank transfer'),
]


def seed_payment_methods(apps, schema_editor):
    PaymentMethod = apps.get_model('configuration', 'PaymentMethod')
    for name, display_name in PAYMENT_METHODS:
        PaymentMethod.objects.get_or_create(
            name=name,
            defaults={'display_name': display_name, 'is_enabled': True},
        )


def remove_payment_methods(apps, schema_editor):
    PaymentMethod = apps.get_model('configuration', 'PaymentMethod')
    PaymentMethod.objects.filter(name__in=[name for name, _ in PAYMENT_METHODS]).delete()


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='PaymentMethod',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=50, unique=True)),
                ('display_name', models.CharField(max_length=100)),
                ('is_enabled', models.BooleanField(default=True)),
            ],
            options={
                'db_table': 'payment_methods',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='DeliverySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_enabled', models.BooleanField(default=False)),
                ('min_order_amount', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))],
                )),
                ('delivery_fee', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))],
                )),
            ],
            options={
                'db_table': 'delivery_settings',
                'verbose_name_plural': 'Delivery settings',
            },
        ),
        migrations.CreateModel(
            name='OrderingSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_enabled', models.BooleanField(default=True)),
                ('disabled_message', models.CharField(blank=True, max_length=255)),
            ],
            options={
                'db_table': 'ordering_settings',
                'verbose_name_plural': 'Ordering settings',
            },
        ),
        migrations.RunPython(seed_payment_methods, remove_payment_methods),
    ]

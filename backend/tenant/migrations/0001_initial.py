import decimal
import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text="Display name for the restaurant (e.g., Joe's Pizza)", max_length=255)),
                ('slug', models.SlugField(help_text='URL-safe identifier, also accepted in the X-Tenant header', unique=True)),
                ('is_active', models.BooleanField(default=True, help_text='Inactive tenants cannot take orders or access the system')),
                ('dine_in_enabled', models.BooleanField(default=True)),
                ('pickup_enabled', models.BooleanField(default=True)),
                ('delivery_enabled', models.BooleanField(default=True)),
                ('delivery_fee', models.DecimalField(decimal_places=2, default=decimal.Decimal('0.00'), help_text='Flat fee added to delivery orders', max_digits=10, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.00'))])),
                ('estimated_prep_minutes', models.PositiveIntegerField(default=20, help_text='Used to stamp estimated_ready_at when an order is confirmed')),
                ('loyalty_enabled', models.BooleanField(default=False)),
                ('loyalty_points_per_dollar', models.DecimalField(decimal_places=2, default=decimal.Decimal('10.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.00'))])),
                ('loyalty_redeem_threshold', models.PositiveIntegerField(default=100, help_text='Points required for one redemption')),
                ('loyalty_redeem_value', models.DecimalField(decimal_places=2, default=decimal.Decimal('5.00'), help_text='Currency value of one redemption', max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'tenants',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['slug'], name='tenant_slug_idx'),
                    models.Index(fields=['is_active'], name='tenant_active_idx'),
                ],
            },
        ),
    ]

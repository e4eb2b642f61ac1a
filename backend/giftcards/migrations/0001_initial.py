import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GiftCard',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(help_text='Unique gift card code (per tenant)', max_length=20)),
                ('initial_amount', models.DecimalField(decimal_places=2, help_text='Balance when the gift card was issued', max_digits=10, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))])),
                ('remaining_amount', models.DecimalField(decimal_places=2, help_text='Current remaining balance on the gift card', max_digits=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('used', 'Fully Redeemed'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('purchaser_name', models.CharField(blank=True, max_length=255)),
                ('purchaser_email', models.EmailField(blank=True, max_length=254)),
                ('recipient_name', models.CharField(blank=True, max_length=255)),
                ('recipient_email', models.EmailField(blank=True, max_length=254)),
                ('message', models.TextField(blank=True)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='gift_cards', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Gift Card',
                'verbose_name_plural': 'Gift Cards',
                'db_table': 'gift_cards',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['tenant', 'status'], name='gift_card_tenant_status_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'code'), name='unique_gift_card_code_per_tenant'),
                    models.CheckConstraint(condition=models.Q(('remaining_amount__gte', 0), ('remaining_amount__lte', models.F('initial_amount'))), name='gift_card_balance_in_range'),
                ],
            },
        ),
    ]

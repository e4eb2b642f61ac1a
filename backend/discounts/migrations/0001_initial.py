import decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Promotion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='Customer-facing code, stored uppercase (unique per tenant)', max_length=50)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('discount_type', models.CharField(choices=[('percentage', 'Percentage'), ('fixed', 'Fixed Amount')], max_length=20)),
                ('discount_value', models.DecimalField(decimal_places=2, help_text='Percentage (0-100) or fixed currency amount', max_digits=10)),
                ('min_order_amount', models.DecimalField(decimal_places=2, default=decimal.Decimal('0.00'), help_text='The minimum recomputed subtotal required for the promotion to apply.', max_digits=10)),
                ('max_uses', models.PositiveIntegerField(blank=True, help_text='Leave blank for unlimited', null=True)),
                ('current_uses', models.PositiveIntegerField(default=0)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='promotions', to='tenant.tenant')),
            ],
            options={
                'db_table': 'promotions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['tenant', 'code'], name='promo_tenant_code_idx'),
                    models.Index(fields=['tenant', 'is_active'], name='promo_tenant_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'code'), name='unique_promotion_code_per_tenant'),
                    models.CheckConstraint(condition=models.Q(('max_uses__isnull', True), ('current_uses__lte', models.F('max_uses')), _connector='OR'), name='promotion_uses_within_cap'),
                ],
            },
        ),
    ]

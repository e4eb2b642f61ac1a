import decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LoyaltyCustomer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(max_length=30)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('total_points', models.IntegerField(default=0)),
                ('total_spent', models.DecimalField(decimal_places=2, default=decimal.Decimal('0.00'), max_digits=12)),
                ('total_orders', models.PositiveIntegerField(default=0)),
                ('last_order_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='loyalty_customers', to='tenant.tenant')),
            ],
            options={
                'db_table': 'loyalty_customers',
                'ordering': ['-total_points'],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'phone'), name='unique_loyalty_phone_per_tenant'),
                    models.CheckConstraint(condition=models.Q(('total_points__gte', 0)), name='loyalty_points_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LoyaltyTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transaction_type', models.CharField(choices=[('earn', 'Earned'), ('bonus', 'Bonus'), ('redeem', 'Redeemed')], max_length=10)),
                ('points', models.IntegerField(help_text='Signed: negative for redemptions')),
                ('description', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to='loyalty.loyaltycustomer')),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='loyalty_transactions', to='orders.order')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='tenant.tenant')),
            ],
            options={
                'db_table': 'loyalty_transactions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['tenant', 'customer'], name='loyalty_txn_tenant_cust_idx')],
            },
        ),
    ]

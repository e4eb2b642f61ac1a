import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('orders', '0001_initial'),
        ('seating', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='table',
            name='current_order',
            field=models.ForeignKey(blank=True, help_text='Order currently seated here (informational only)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='orders.order'),
        ),
    ]

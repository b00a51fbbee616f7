from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('campaigns', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='conversion',
            name='order_id',
            field=models.CharField(max_length=64, unique=True),
        ),
    ]

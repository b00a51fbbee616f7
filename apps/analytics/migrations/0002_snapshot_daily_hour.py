import django.core.validators
from django.db import migrations, models
from django.db.models import Max

DAILY_HOUR = -1


def daily_rows_to_sentinel(apps, schema_editor):
    CampaignSnapshot = apps.get_model('analytics', 'CampaignSnapshot')
    daily = CampaignSnapshot.objects.filter(hour__isnull=True)
    # MySQL never enforced the partial constraint, so keep the newest row per day
    latest = daily.values('campaign_id', 'date').annotate(keep=Max('id')).order_by()
    keep_ids = [row['keep'] for row in latest]
    daily.exclude(id__in=keep_ids).delete()
    CampaignSnapshot.objects.filter(hour__isnull=True).update(hour=DAILY_HOUR)


def sentinel_to_daily_rows(apps, schema_editor):
    CampaignSnapshot = apps.get_model('analytics', 'CampaignSnapshot')
    CampaignSnapshot.objects.filter(hour=DAILY_HOUR).update(hour=None)


class Migration(migrations.Migration):

    dependencies = [
        ('analytics', '0001_initial'),
    ]

    operations = [
        migrations.RemoveConstraint(
            model_name='campaignsnapshot',
            name='unique_campaign_daily_snapshot',
        ),
        migrations.RunPython(daily_rows_to_sentinel, sentinel_to_daily_rows),
        migrations.AlterField(
            model_name='campaignsnapshot',
            name='hour',
            field=models.SmallIntegerField(default=-1, validators=[django.core.validators.MinValueValidator(-1), django.core.validators.MaxValueValidator(23)]),
        ),
    ]

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('platform', models.CharField(choices=[('instagram', 'Instagram'), ('facebook', 'Facebook'), ('tiktok', 'TikTok'), ('youtube', 'YouTube'), ('twitter', 'Twitter'), ('multi', 'Multi-platform'), ('other', 'Other')], max_length=20)),
                ('campaign_type', models.CharField(choices=[('post', 'Post'), ('reel', 'Reel'), ('story', 'Story'), ('video', 'Video'), ('ad', 'Ad'), ('campaign', 'Campaign')], max_length=20)),
                ('post_url', models.URLField(blank=True, default='', max_length=500)),
                ('tracking_code', models.CharField(max_length=64, unique=True)),
                ('cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('budget', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('is_active', models.BooleanField(default=True)),
                ('starts_at', models.DateTimeField(blank=True, null=True)),
                ('ends_at', models.DateTimeField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='campaigns.campaign')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['is_active'], name='campaign_active_idx'),
                    models.Index(fields=['platform'], name='campaign_platform_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Visit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('session_id', models.CharField(max_length=128)),
                ('customer_id', models.CharField(blank=True, max_length=64, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('referrer', models.TextField(blank=True, null=True)),
                ('landing_page', models.TextField(blank=True, null=True)),
                ('country', models.CharField(blank=True, max_length=64, null=True)),
                ('city', models.CharField(blank=True, max_length=128, null=True)),
                ('device_type', models.CharField(blank=True, choices=[('mobile', 'Mobile'), ('tablet', 'Tablet'), ('desktop', 'Desktop'), ('other', 'Other')], max_length=10, null=True)),
                ('visited_at', models.DateTimeField()),
                ('last_activity_at', models.DateTimeField()),
                ('expires_at', models.DateTimeField()),
                ('converted', models.BooleanField(default=False)),
                ('conversion_at', models.DateTimeField(blank=True, null=True)),
                ('attributed_order_id', models.CharField(blank=True, max_length=64, null=True)),
                ('campaign', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visits', to='campaigns.campaign')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['session_id', 'expires_at'], name='visit_session_expiry_idx'),
                    models.Index(fields=['campaign', 'visited_at'], name='visit_campaign_time_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Conversion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(max_length=64)),
                ('customer_id', models.CharField(max_length=64)),
                ('revenue', models.DecimalField(decimal_places=2, max_digits=12)),
                ('converted_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('campaign', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='conversions', to='campaigns.campaign')),
                ('visit', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='conversion', to='campaigns.visit')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['campaign', 'converted_at'], name='conversion_campaign_time_idx'),
                ],
            },
        ),
    ]

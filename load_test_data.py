#!/usr/bin/env python
"""
Seed a parent campaign with three children and attributed traffic for load tests and demos
"""
import os
import sys
import django
import random
from decimal import Decimal

# Setup Django
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings.local')
django.setup()

from django.contrib.auth import get_user_model
from apps.campaigns.models import Campaign
from apps.tracking import services as tracking

CHILDREN = [
    # tracking code, platform, type, cost, visits, orders, order total
    ('SEED_IG_REEL', 'instagram', 'reel', Decimal('250.00'), 50, 5, Decimal('150.00')),
    ('SEED_TT_VIDEO', 'tiktok', 'video', Decimal('120.00'), 80, 4, Decimal('45.00')),
    ('SEED_YT_VIDEO', 'youtube', 'video', Decimal('300.00'), 30, 2, Decimal('210.00')),
]


def create_test_data():
    print("🚀 Creating attribution test data...")

    # 1. API user for locust and manual testing
    User = get_user_model()
    user, created = User.objects.get_or_create(
        username=os.getenv('LOCUST_USERNAME', 'testuser'),
        defaults={'email': 'test@example.com'},
    )
    if created:
        user.set_password(os.getenv('LOCUST_PASSWORD', 'testpass123'))
        user.save()
        print(f"✅ Created test user: {user.username}")

    # 2. Parent campaign
    parent, created = Campaign.objects.get_or_create(
        tracking_code='SEED_LAUNCH',
        defaults={
            'name': 'Seed Launch',
            'platform': 'multi',
            'campaign_type': 'campaign',
            'cost': Decimal('100.00'),
        },
    )
    if created:
        print(f"✅ Created parent campaign: {parent.name}")

    # 3. Children with visits and attributed orders
    for code, platform, campaign_type, cost, visits, orders, total in CHILDREN:
        campaign, created = Campaign.objects.get_or_create(
            tracking_code=code,
            defaults={
                'name': code.replace('_', ' ').title(),
                'platform': platform,
                'campaign_type': campaign_type,
                'cost': cost,
                'parent': parent,
            },
        )
        if not created:
            print(f"⏭️  {code} already seeded")
            continue

        sessions = [f"{code.lower()}-{n}" for n in range(visits)]
        for session in sessions:
            tracking.track_visit(
                code,
                session,
                device_type=random.choice(['mobile', 'mobile', 'desktop', 'tablet']),
                country=random.choice(['CO', 'MX', 'US', None]),
            )
        for n, session in enumerate(sessions[:orders]):
            tracking.attribute_order(session, f"{code}-ORD-{n}", f"customer-{n}", total)
        print(f"✅ {code}: {visits} visits, {orders} orders of ${total}")

    print(f"\n🧪 Ready for load testing:")
    print(f"   - Parent campaign id: {parent.id}")
    print(f"   - Tracking codes: {', '.join(c[0] for c in CHILDREN)}")


if __name__ == '__main__':
    create_test_data()

"""
Dashboard analytics for administrators. Every aggregation runs on its own
and its rows are returned as the database produced them.
"""
import logging
from collections import Counter
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils import timezone

from businesses.models import Business, HalalCertification
from mosques.models import Mosque
from user.models import Role, UserProfile
from volunteers.models import Volunteer, VolunteerApplication

logger = logging.getLogger(__name__)

User = get_user_model()

TIME_RANGES = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
    '1y': 365,
}
DEFAULT_TIME_RANGE = '30d'

CAPACITY_BUCKETS = [
    ('small', 0, 100),
    ('medium', 101, 500),
    ('large', 501, 1000),
]


def grouped(queryset, *fields, limit=None):
    """Row counts per distinct value of fields, largest first."""
    rows = queryset.order_by().values(*fields).annotate(count=Count('pk')).order_by('-count', *fields)
    if limit:
        rows = rows[:limit]
    return list(rows)


def distribution(queryset, field):
    return {row[field]: row['count'] for row in grouped(queryset, field)}


def growth_rate(current, previous):
    if previous == 0:
        return 0
    return round((current - previous) / previous * 100)


def top_services(mosques, limit=10):
    counts = Counter()
    for services in mosques.values_list('services', flat=True):
        counts.update(services or [])
    return [{'service': name, 'count': count} for name, count in counts.most_common(limit)]


class AnalyticsService:

    def __init__(self, time_range=DEFAULT_TIME_RANGE):
        if time_range not in TIME_RANGES:
            time_range = DEFAULT_TIME_RANGE
        self.time_range = time_range
        self.now = timezone.now()
        self.period = timedelta(days=TIME_RANGES[time_range])
        self.start = self.now - self.period
        self.previous_start = self.start - self.period

    def _growth(self, queryset, field='created_at'):
        current = queryset.filter(**{f'{field}__gte': self.start, f'{field}__lte': self.now}).count()
        previous = queryset.filter(**{f'{field}__gte': self.previous_start, f'{field}__lt': self.start}).count()
        return growth_rate(current, previous)

    def overview(self):
        return {
            'total_users': User.objects.count(),
            'total_mosques': Mosque.objects.count(),
            'total_businesses': Business.objects.count(),
            'total_volunteers': Volunteer.objects.count(),
            'active_users': UserProfile.objects.filter(updated_at__gte=self.start).count(),
            'pending_approvals': (
                Business.objects.filter(verification_status=Business.VerificationStatus.PENDING).count()
                + Mosque.objects.filter(status=Mosque.Status.PENDING).count()
            ),
            'growth': {
                'users': self._growth(User.objects.all(), field='date_joined'),
                'mosques': self._growth(Mosque.objects.all()),
                'businesses': self._growth(Business.objects.all()),
                'volunteers': self._growth(Volunteer.objects.all()),
            },
        }

    def user_analytics(self):
        profiles = UserProfile.objects.all()
        return {
            'by_role': grouped(profiles, 'role'),
            'top_cities': grouped(profiles.exclude(city=''), 'city', limit=10),
            'verified': profiles.filter(is_verified=True).count(),
            'unverified': profiles.filter(is_verified=False).count(),
        }

    def mosque_analytics(self):
        mosques = Mosque.objects.all()
        return {
            'top_locations': grouped(mosques, 'city', 'state', limit=10),
            'status_distribution': grouped(mosques, 'status'),
            'services_popularity': top_services(mosques),
        }

    def business_analytics(self):
        businesses = Business.objects.all()
        return {
            'by_category': grouped(businesses, 'category'),
            'top_locations': grouped(businesses, 'city', 'state', limit=10),
            'verification_status': grouped(businesses, 'verification_status'),
        }

    def volunteer_analytics(self):
        applications = VolunteerApplication.objects.all()
        return {
            'applications_by_category': grouped(applications, 'category'),
            'applications_by_status': grouped(applications, 'status'),
            'top_mosques': grouped(applications, 'mosque__name', limit=5),
        }

    def report(self):
        return {
            'time_range': self.time_range,
            'overview': self.overview(),
            'users': self.user_analytics(),
            'mosques': self.mosque_analytics(),
            'businesses': self.business_analytics(),
            'volunteers': self.volunteer_analytics(),
        }


def dashboard_stats():
    """Headline counts for the admin dashboard."""
    profiles = UserProfile.objects.all()
    businesses = Business.objects.all()

    cities = Counter()
    for queryset in (profiles, Mosque.objects.all(), businesses):
        for row in grouped(queryset.exclude(city=''), 'city'):
            cities[row['city']] += row['count']

    return {
        'users': profiles.count(),
        'imams': profiles.filter(role=Role.IMAM).count(),
        'businesses': {
            'total': businesses.count(),
            'verified': businesses.filter(verification_status=Business.VerificationStatus.VERIFIED).count(),
            'categories': distribution(businesses, 'category'),
        },
        'volunteers': Volunteer.objects.count(),
        'mosques': Mosque.objects.count(),
        'top_cities': [{'city': city, 'count': count} for city, count in cities.most_common(10)],
        'halal_certifications': distribution(HalalCertification.objects.all(), 'status'),
    }


def mosque_statistics():
    mosques = Mosque.objects.all()

    capacity = {name: mosques.filter(capacity__gte=low, capacity__lte=high).count()
                for name, low, high in CAPACITY_BUCKETS}
    capacity['very_large'] = mosques.filter(capacity__gt=CAPACITY_BUCKETS[-1][2]).count()
    capacity['unknown'] = mosques.filter(capacity__isnull=True).count()

    return {
        'total': mosques.count(),
        'by_status': distribution(mosques, 'status'),
        'by_city': grouped(mosques.exclude(city=''), 'city', limit=10),
        'services': top_services(mosques, limit=None),
        'capacity': capacity,
    }


def pending_approvals(limit=10):
    """Businesses and volunteers awaiting review, newest first."""
    businesses = Business.objects.select_related('owner').filter(
        verification_status=Business.VerificationStatus.PENDING
    ).order_by('-created_at')[:limit]
    volunteers = Volunteer.objects.filter(status=Volunteer.Status.PENDING).order_by('-created_at')[:limit]

    items = [
        {
            'id': str(business.pk),
            'type': 'business',
            'name': business.name,
            'email': business.email or business.owner.email,
            'created_at': business.created_at,
        }
        for business in businesses
    ]
    items += [
        {
            'id': str(volunteer.pk),
            'type': 'volunteer',
            'name': volunteer.name,
            'email': volunteer.email,
            'created_at': volunteer.created_at,
        }
        for volunteer in volunteers
    ]
    return sorted(items, key=lambda item: item['created_at'], reverse=True)


def recent_activity(limit=20, per_source=5):
    """
    A feed of the latest registrations and mosque status changes, built
    from the records themselves rather than the audit trail.
    """
    events = []
    for profile in UserProfile.objects.select_related('user').order_by('-created_at')[:per_source]:
        events.append({
            'id': f'user-{profile.pk}',
            'type': 'user_registered',
            'description': f"New user {profile.name} registered",
            'timestamp': profile.created_at,
        })
    for mosque in Mosque.objects.order_by('-updated_at')[:per_source]:
        events.append({
            'id': f'mosque-{mosque.pk}',
            'type': f'mosque_{mosque.status}',
            'description': f"Mosque {mosque.name} is {mosque.status}",
            'timestamp': mosque.updated_at,
        })
    for business in Business.objects.order_by('-created_at')[:per_source]:
        events.append({
            'id': f'business-{business.pk}',
            'type': 'business_registered',
            'description': f"Business {business.name} registered",
            'timestamp': business.created_at,
        })
    for volunteer in Volunteer.objects.order_by('-created_at')[:per_source]:
        events.append({
            'id': f'volunteer-{volunteer.pk}',
            'type': 'volunteer_applied',
            'description': f"{volunteer.name} applied to volunteer",
            'timestamp': volunteer.created_at,
        })

    events.sort(key=lambda event: event['timestamp'], reverse=True)
    return events[:limit]

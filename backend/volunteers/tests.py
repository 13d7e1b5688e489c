from unittest.mock import patch

from django.db.models import QuerySet
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import ConflictError, InvalidStatusTransition
from core.testing import make_user
from mosques.models import Mosque
from notifications.models import Notification, NotificationVerb
from user.models import Role
from .models import NeedApplicant, Volunteer, VolunteerApplication, VolunteerNeed, VolunteerOffer


def make_mosque(imam, **fields):
    defaults = {
        'name': 'Islamic Center',
        'street': '200 Elm Street',
        'city': 'Houston',
        'state': 'TX',
        'zip_code': '77002',
        'status': Mosque.Status.APPROVED,
    }
    defaults.update(fields)
    return Mosque.objects.create(imam=imam, **defaults)


def make_need(mosque, **fields):
    defaults = {
        'posted_by': mosque.imam,
        'title': 'Friday setup crew',
        'description': 'Help arrange the prayer hall before Jumma',
        'category': 'events',
        'time_commitment': '2 hours weekly',
        'volunteers_needed': 1,
    }
    defaults.update(fields)
    return VolunteerNeed.objects.create(mosque=mosque, **defaults)


def application_payload(mosque, /, **overrides):
    payload = {
        'mosque': str(mosque.id),
        'title': 'Weekend teacher',
        'description': 'Arabic classes for children',
        'motivation': 'I want to give back',
        'category': 'education',
        'availability': 'Weekends',
        'time_commitment': '4 hours weekly',
        'contact_email': 'helper@example.com',
    }
    payload.update(overrides)
    return payload


class VolunteerNeedModelTests(TestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.need = make_need(make_mosque(self.imam), volunteers_needed=1)
        self.first = make_user('first@example.com')
        self.second = make_user('second@example.com')

    def test_accepting_up_to_capacity_fills_need(self):
        applicant = self.need.apply(self.first)
        other = self.need.apply(self.second)

        self.need.review_applicant(applicant, NeedApplicant.Status.ACCEPTED)
        self.need.refresh_from_db()
        self.assertEqual(self.need.status, VolunteerNeed.Status.FILLED)

        with self.assertRaises(ConflictError):
            self.need.review_applicant(other, NeedApplicant.Status.ACCEPTED)

    def test_rejecting_accepted_applicant_reopens_need(self):
        applicant = self.need.apply(self.first)
        self.need.review_applicant(applicant, NeedApplicant.Status.ACCEPTED)
        self.need.review_applicant(applicant, NeedApplicant.Status.REJECTED)
        self.need.refresh_from_db()
        self.assertEqual(self.need.status, VolunteerNeed.Status.ACTIVE)

    def test_apply_rules(self):
        self.need.apply(self.first)
        with self.assertRaises(InvalidStatusTransition):
            self.need.apply(self.first)

        self.need.status = VolunteerNeed.Status.CANCELLED
        self.need.save()
        with self.assertRaises(InvalidStatusTransition):
            self.need.apply(self.second)

    def test_concurrent_duplicate_apply_is_rejected(self):
        self.need.apply(self.first)
        with patch.object(QuerySet, 'exists', return_value=False):
            with self.assertRaises(InvalidStatusTransition):
                self.need.apply(self.first)
        self.assertEqual(self.need.applicants.filter(user=self.first).count(), 1)


class VolunteerApplicationModelTests(TestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.mosque = make_mosque(self.imam)
        self.application = VolunteerApplication.objects.create(
            user=make_user('helper@example.com'),
            mosque=self.mosque,
            title='Cleaning',
            description='Weekly cleaning',
            motivation='Service',
            category='cleaning',
            availability='Saturdays',
            time_commitment='2 hours',
            contact_email='helper@example.com',
        )

    def test_acceptance_counts_volunteer_once(self):
        self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam, 'Welcome')
        self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam)
        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 1)
        self.assertEqual(self.application.response_message, 'Welcome')
        self.assertEqual(self.application.responded_by, self.imam)

    def test_volunteer_count_follows_acceptance(self):
        self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam)
        self.application.respond(VolunteerApplication.Status.REJECTED, self.imam)
        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 0)

        self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam)
        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 1)

        self.application.respond(VolunteerApplication.Status.REVIEWED, self.imam)
        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 0)

    def test_volunteer_count_never_goes_negative(self):
        self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam)
        Mosque.objects.filter(pk=self.mosque.pk).update(total_volunteers=0)
        self.application.respond(VolunteerApplication.Status.REJECTED, self.imam)
        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 0)

    def test_withdraw(self):
        self.application.withdraw()
        self.assertEqual(self.application.status, VolunteerApplication.Status.WITHDRAWN)
        with self.assertRaises(InvalidStatusTransition):
            self.application.respond(VolunteerApplication.Status.ACCEPTED, self.imam)
        with self.assertRaises(InvalidStatusTransition):
            self.application.withdraw()

    def test_respond_rejects_unknown_status(self):
        with self.assertRaises(InvalidStatusTransition):
            self.application.respond(VolunteerApplication.Status.WITHDRAWN, self.imam)


class VolunteerRegistrationAPITests(APITestCase):
    def setUp(self):
        self.user = make_user('amina@example.com', name='Amina')
        self.url = reverse('volunteers:volunteer-register')

    def test_register_and_status(self):
        self.assertEqual(self.client.post(self.url, {}).status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.user)
        status_url = reverse('volunteers:volunteer-status')
        self.assertFalse(self.client.get(status_url).data['registered'])

        response = self.client.post(self.url, {'skills': ['teaching'], 'availability': 'Evenings'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['volunteer']['name'], 'Amina')
        self.assertEqual(response.data['volunteer']['email'], 'amina@example.com')
        self.assertEqual(response.data['volunteer']['status'], 'pending')

        response = self.client.get(status_url)
        self.assertTrue(response.data['registered'])
        self.assertEqual(response.data['status'], 'pending')

        response = self.client.post(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)


class VolunteerNeedAPITests(APITestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.other_imam = make_user('other@example.com', Role.IMAM)
        self.member = make_user('member@example.com')
        self.mosque = make_mosque(self.imam)
        self.list_url = reverse('volunteers:volunteer-need-list')

    def need_payload(self, **overrides):
        payload = {
            'mosque': str(self.mosque.id),
            'title': 'Iftar servers',
            'description': 'Serve community iftar',
            'category': 'events',
            'time_commitment': 'Evenings in Ramadan',
            'urgency': 'high',
            'volunteers_needed': 2,
        }
        payload.update(overrides)
        return payload

    def test_create_restricted_to_mosque_imam(self):
        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.post(self.list_url, self.need_payload()).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.other_imam)
        self.assertEqual(self.client.post(self.list_url, self.need_payload()).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.imam)
        response = self.client.post(self.list_url, self.need_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')

        response = self.client.post(self.list_url, self.need_payload(volunteers_needed=0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_list_filters_active(self):
        make_need(self.mosque, category='cleaning')
        make_need(self.mosque, title='Old', status=VolunteerNeed.Status.CANCELLED)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get(self.list_url, {'category': 'education'})
        self.assertEqual(response.data['pagination']['total'], 0)

    def test_apply_and_review(self):
        need = make_need(self.mosque)
        self.client.force_authenticate(user=self.member)
        apply_url = reverse('volunteers:volunteer-need-apply', kwargs={'pk': need.id})

        response = self.client.post(apply_url, {'message': 'Happy to help'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.client.post(apply_url, {}).status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Notification.objects.filter(recipient__user=self.imam, verb=NotificationVerb.APPLICATION).exists())

        applicant = NeedApplicant.objects.get()
        review_url = reverse(
            'volunteers:need-applicant-review', kwargs={'pk': need.id, 'applicant_id': applicant.id}
        )
        self.assertEqual(
            self.client.patch(review_url, {'status': 'accepted'}, format='json').status_code,
            status.HTTP_403_FORBIDDEN
        )

        self.client.force_authenticate(user=self.imam)
        response = self.client.patch(review_url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['need_status'], 'filled')

        applicants = self.client.get(reverse('volunteers:volunteer-need-applicants', kwargs={'pk': need.id}))
        self.assertEqual(applicants.data[0]['status'], 'accepted')

    def test_edit_restricted_to_poster(self):
        need = make_need(self.mosque)
        url = reverse('volunteers:volunteer-need-detail', kwargs={'pk': need.id})
        self.client.force_authenticate(user=self.other_imam)
        self.assertEqual(self.client.patch(url, {'title': 'Hijacked'}).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.imam)
        response = self.client.patch(url, {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')


class VolunteerOfferAPITests(APITestCase):
    def setUp(self):
        self.user = make_user('helper@example.com')
        self.mosque = make_mosque(make_user('imam@example.com', Role.IMAM))
        self.list_url = reverse('volunteers:volunteer-offer-list')

    def test_create_and_filter(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.list_url, {
            'title': 'IT support',
            'description': 'Website and network help',
            'category': 'technical',
            'availability': 'Evenings',
            'time_commitment': '3 hours weekly',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_general_offer'])

        VolunteerOffer.objects.create(
            user=self.user, title='Tutor', description='Math', category='education',
            availability='Weekends', time_commitment='2 hours', target_mosque=self.mosque,
        )
        self.client.force_authenticate(user=None)
        response = self.client.get(self.list_url, {'mosque': str(self.mosque.id)})
        self.assertEqual([o['title'] for o in response.data['results']], ['Tutor'])
        response = self.client.get(self.list_url, {'category': 'technical'})
        self.assertEqual([o['title'] for o in response.data['results']], ['IT support'])

    def test_only_owner_edits(self):
        offer = VolunteerOffer.objects.create(
            user=self.user, title='Tutor', description='Math', category='education',
            availability='Weekends', time_commitment='2 hours',
        )
        self.client.force_authenticate(user=make_user('stranger@example.com'))
        url = reverse('volunteers:volunteer-offer-detail', kwargs={'pk': offer.id})
        self.assertEqual(self.client.patch(url, {'status': 'inactive'}).status_code, status.HTTP_403_FORBIDDEN)


class VolunteerApplicationAPITests(APITestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.applicant = make_user('helper@example.com')
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.mosque = make_mosque(self.imam)
        self.list_url = reverse('volunteers:volunteer-application-list')

    def apply(self, **overrides):
        self.client.force_authenticate(user=self.applicant)
        return self.client.post(self.list_url, application_payload(self.mosque, **overrides), format='json')

    def test_pending_mosque_rejects_applications(self):
        pending = make_mosque(self.imam, name='New Masjid', status=Mosque.Status.PENDING)
        response = self.apply(mosque=str(pending.id))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('mosque', response.data['details'])

    def test_visibility_by_role(self):
        self.apply()
        response = self.client.get(self.list_url)
        self.assertEqual(response.data['pagination']['total'], 1)

        self.client.force_authenticate(user=make_user('other@example.com'))
        self.assertEqual(self.client.get(self.list_url).data['pagination']['total'], 0)

        self.client.force_authenticate(user=self.imam)
        self.assertEqual(self.client.get(self.list_url).data['pagination']['total'], 1)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(self.list_url).data['pagination']['total'], 1)

    def test_applicant_may_only_withdraw(self):
        application_id = self.apply().data['id']
        url = reverse('volunteers:volunteer-application-detail', kwargs={'pk': application_id})

        response = self.client.patch(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.patch(url, {'status': 'withdrawn'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['application']['status'], 'withdrawn')

    def test_imam_accepts_application(self):
        application_id = self.apply().data['id']
        url = reverse('volunteers:volunteer-application-detail', kwargs={'pk': application_id})

        self.client.force_authenticate(user=self.imam)
        response = self.client.patch(url, {
            'status': 'accepted', 'response_message': 'See you Saturday', 'priority': 'high',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Application accepted successfully')
        self.assertEqual(response.data['application']['priority'], 'high')

        self.mosque.refresh_from_db()
        self.assertEqual(self.mosque.total_volunteers, 1)
        self.assertTrue(Notification.objects.filter(
            recipient__user=self.applicant, verb=NotificationVerb.APPLICATION
        ).exists())


class ImamVolunteerAPITests(APITestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        mosque = make_mosque(self.imam)
        other_mosque = make_mosque(make_user('other@example.com', Role.IMAM), name='Elsewhere')
        self.volunteer = Volunteer.objects.create(
            user=make_user('v1@example.com'), name='Bilal', email='v1@example.com', mosque=mosque
        )
        Volunteer.objects.create(user=make_user('v2@example.com'), name='Zaid', email='v2@example.com', mosque=other_mosque)

    def test_lists_own_mosque_volunteers(self):
        self.client.force_authenticate(user=self.imam)
        response = self.client.get(reverse('volunteers:imam-volunteers'))
        self.assertEqual([v['name'] for v in response.data], ['Bilal'])

    def test_review_volunteer(self):
        self.client.force_authenticate(user=self.imam)
        url = reverse('volunteers:imam-volunteer-detail', kwargs={'pk': self.volunteer.id})
        response = self.client.patch(url, {
            'status': 'approved', 'notes': 'Interviewed', 'currentAssignment': 'Library desk',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Volunteer approved successfully')

        self.volunteer.refresh_from_db()
        self.assertEqual(self.volunteer.status, Volunteer.Status.APPROVED)
        self.assertEqual(self.volunteer.current_assignment, 'Library desk')
        self.assertEqual(self.volunteer.reviewed_by, self.imam)

    def test_other_mosque_volunteer_not_found(self):
        self.client.force_authenticate(user=self.imam)
        other = Volunteer.objects.get(name='Zaid')
        url = reverse('volunteers:imam-volunteer-detail', kwargs={'pk': other.id})
        self.assertEqual(self.client.patch(url, {'status': 'approved'}).status_code, status.HTTP_404_NOT_FOUND)

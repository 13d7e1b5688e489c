from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import OfferNotRedeemable
from core.testing import make_user
from notifications.models import Notification, NotificationVerb
from user.models import Role
from .models import Business, HalalCertification, Offer, Product


def make_business(owner, **fields):
    defaults = {
        'name': 'Barakah Grocery',
        'category': Business.Category.GROCERY,
        'street': '45 Market Street',
        'city': 'Dearborn',
        'state': 'MI',
        'zip_code': '48126',
        'verification_status': Business.VerificationStatus.VERIFIED,
    }
    defaults.update(fields)
    return Business.objects.create(owner=owner, **defaults)


def make_offer(business, **fields):
    now = timezone.now()
    defaults = {
        'title': 'Ramadan Special',
        'discount_type': Offer.DiscountType.PERCENTAGE,
        'discount_value': Decimal('20'),
        'valid_from': now - timedelta(days=1),
        'valid_to': now + timedelta(days=10),
    }
    defaults.update(fields)
    return Offer.objects.create(business=business, **defaults)


class BusinessModelTests(TestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', Role.BUSINESS)

    def test_tags_and_coordinates_cleaned(self):
        business = make_business(
            self.owner, tags=[' Halal ', '', 'MEAT'], latitude=120.0, longitude=10.0, email=' Shop@Example.com '
        )
        self.assertEqual(business.tags, ['halal', 'meat'])
        self.assertIsNone(business.latitude)
        self.assertEqual(business.geohash, '')
        self.assertEqual(business.email, 'shop@example.com')

    def test_is_currently_open(self):
        business = make_business(self.owner)
        monday_morning = datetime(2024, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        monday_evening = datetime(2024, 1, 1, 18, 0, tzinfo=dt_timezone.utc)
        sunday = datetime(2024, 1, 7, 10, 0, tzinfo=dt_timezone.utc)
        self.assertTrue(business.is_currently_open(monday_morning))
        self.assertFalse(business.is_currently_open(monday_evening))
        self.assertFalse(business.is_currently_open(sunday))

    def test_update_product_count_counts_active_only(self):
        business = make_business(self.owner)
        Product.objects.create(business=business, name='Dates', price=Decimal('5.00'), category='food', stock=3)
        Product.objects.create(business=business, name='Honey', price=Decimal('8.00'), category='food', stock=0)
        self.assertEqual(business.update_product_count(), 1)
        business.refresh_from_db()
        self.assertEqual(business.total_products, 1)


class ProductModelTests(TestCase):
    def setUp(self):
        self.business = make_business(make_user('owner@example.com', Role.BUSINESS))

    def test_slug_unique_per_name(self):
        first = Product.objects.create(business=self.business, name='Olive Oil', price=Decimal('10'), category='food', stock=1)
        second = Product.objects.create(business=self.business, name='Olive Oil', price=Decimal('12'), category='food', stock=1)
        self.assertTrue(first.slug.startswith('olive-oil-'))
        self.assertNotEqual(first.slug, second.slug)

    def test_zero_stock_marks_out_of_stock(self):
        product = Product.objects.create(business=self.business, name='Rice', price=Decimal('3'), category='food')
        self.assertEqual(product.status, Product.Status.OUT_OF_STOCK)
        self.assertFalse(product.is_in_stock())

        unlimited = Product.objects.create(
            business=self.business, name='Gift card', price=Decimal('25'), category='gifts', unlimited=True
        )
        self.assertEqual(unlimited.status, Product.Status.ACTIVE)
        self.assertTrue(unlimited.is_in_stock(100))

    def test_discount_percentage_and_compare_price(self):
        product = Product.objects.create(
            business=self.business, name='Abaya', price=Decimal('75'), compare_at_price=Decimal('100'),
            category='clothing', stock=20, low_stock_threshold=5,
        )
        self.assertEqual(product.discount_percentage, 25)
        self.assertFalse(product.is_low_stock)

        product.compare_at_price = Decimal('50')
        product.save()
        self.assertIsNone(product.compare_at_price)
        self.assertEqual(product.discount_percentage, 0)


class OfferModelTests(TestCase):
    def setUp(self):
        self.business = make_business(make_user('owner@example.com', Role.BUSINESS))

    def test_draft_inside_window_becomes_active(self):
        offer = make_offer(self.business)
        self.assertEqual(offer.status, Offer.Status.ACTIVE)
        self.assertTrue(offer.is_valid)
        self.assertEqual(len(offer.code), 9)
        self.assertEqual(offer.code, offer.code.upper())

    def test_active_past_window_expires(self):
        now = timezone.now()
        offer = make_offer(
            self.business, status=Offer.Status.ACTIVE,
            valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1),
        )
        self.assertEqual(offer.status, Offer.Status.EXPIRED)
        self.assertFalse(offer.is_valid)

    def test_percentage_clamped_and_free_shipping_without_code(self):
        offer = make_offer(self.business, discount_value=Decimal('150'))
        self.assertEqual(offer.discount_value, Decimal('100'))

        shipping = make_offer(self.business, discount_type=Offer.DiscountType.FREE_SHIPPING, discount_value=Decimal('1'))
        self.assertIsNone(shipping.code)

    def test_calculate_discount(self):
        percentage = make_offer(self.business, discount_value=Decimal('10'))
        self.assertEqual(percentage.calculate_discount('50.00'), Decimal('5'))

        fixed = make_offer(self.business, discount_type=Offer.DiscountType.FIXED_AMOUNT, discount_value=Decimal('30'))
        self.assertEqual(fixed.calculate_discount('20'), Decimal('20'))

    def test_days_remaining_rounds_up(self):
        offer = make_offer(self.business, valid_to=timezone.now() + timedelta(days=1, hours=12))
        self.assertEqual(offer.days_remaining, 2)

    def test_redeem_respects_usage_limit(self):
        offer = make_offer(self.business, usage_limit=2)
        self.assertEqual(offer.redeem(), 1)
        self.assertEqual(offer.redeem(), 2)
        self.assertEqual(offer.usage_percentage, 100)
        with self.assertRaises(OfferNotRedeemable):
            offer.redeem()
        offer.refresh_from_db()
        self.assertEqual(offer.used_count, 2)

    def test_applicable_to_product(self):
        product = Product.objects.create(business=self.business, name='Dates', price=Decimal('5'), category='food', stock=3)
        other = Product.objects.create(business=self.business, name='Scarf', price=Decimal('9'), category='clothing', stock=3)

        everything = make_offer(self.business)
        self.assertTrue(everything.is_applicable_to_product(other))

        by_category = make_offer(self.business, applicable_categories=['food'])
        self.assertTrue(by_category.is_applicable_to_product(product))
        self.assertFalse(by_category.is_applicable_to_product(other))

        by_product = make_offer(self.business)
        by_product.applicable_products.add(other)
        self.assertFalse(by_product.is_applicable_to_product(product))


class BusinessOwnerAPITests(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.member = make_user('member@example.com', Role.USER)

    def register(self, **overrides):
        payload = {
            'name': 'Noor Books',
            'category': 'books',
            'street': '9 Library Lane',
            'city': 'Paterson',
            'state': 'NJ',
        }
        payload.update(overrides)
        return self.client.post(reverse('businesses:business-register'), payload, format='json')

    def test_register_once(self):
        self.assertEqual(self.register().status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.register().status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.owner)
        response = self.register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['business']['verification_status'], 'pending')

        response = self.register(name='Second Shop')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('error', response.data)

    def test_register_rejects_bad_hours(self):
        self.client.force_authenticate(user=self.owner)
        response = self.register(hours={'monday': {'open': '9am', 'close': '17:00'}})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('hours', response.data['details'])

    def test_profile_requires_business(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse('businesses:business-profile'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.register()
        response = self.client.patch(
            reverse('businesses:business-profile'),
            {'description': 'Islamic books and gifts', 'verification_status': 'verified'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Islamic books and gifts')
        self.assertEqual(response.data['verification_status'], 'pending')

    def test_products_crud_refreshes_count(self):
        self.client.force_authenticate(user=self.owner)
        self.register()
        list_url = reverse('businesses:business-product-list')

        response = self.client.post(list_url, {
            'name': 'Quran Stand', 'price': '24.99', 'category': 'books', 'stock': 4,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        business = Business.objects.get(owner=self.owner)
        self.assertEqual(business.total_products, 1)

        detail_url = reverse('businesses:business-product-detail', kwargs={'pk': response.data['id']})
        response = self.client.patch(detail_url, {'status': 'inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        business.refresh_from_db()
        self.assertEqual(business.total_products, 0)

        stats = self.client.get(reverse('businesses:business-product-stats')).data
        self.assertEqual(stats['total'], 1)
        self.assertEqual(stats['by_status']['inactive'], 1)

        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.exists())

    def test_cannot_see_other_owners_products(self):
        other_owner = make_user('other@example.com', Role.BUSINESS)
        product = Product.objects.create(
            business=make_business(other_owner), name='Dates', price=Decimal('5'), category='food', stock=3
        )
        self.client.force_authenticate(user=self.owner)
        self.register()
        url = reverse('businesses:business-product-detail', kwargs={'pk': product.id})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)


class OfferAPITests(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.business = make_business(self.owner)
        self.client.force_authenticate(user=self.owner)
        self.list_url = reverse('businesses:business-offer-list')
        now = timezone.now()
        self.window = {
            'valid_from': (now - timedelta(hours=1)).isoformat(),
            'valid_to': (now + timedelta(days=7)).isoformat(),
        }

    def test_create_validation(self):
        response = self.client.post(self.list_url, {
            'title': 'Too much', 'discount_type': 'percentage', 'discount_value': '150', **self.window,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('discount_value', response.data['details'])

        response = self.client.post(self.list_url, {
            'title': 'Backwards', 'discount_type': 'fixed_amount', 'discount_value': '5',
            'valid_from': self.window['valid_to'], 'valid_to': self.window['valid_from'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('valid_to', response.data['details'])

        response = self.client.post(self.list_url, {
            'title': 'Zero', 'discount_type': 'fixed_amount', 'discount_value': '0', **self.window,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_and_duplicate_code(self):
        response = self.client.post(self.list_url, {
            'title': 'Eid sale', 'discount_type': 'percentage', 'discount_value': '15', 'code': 'eid15', **self.window,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'EID15')
        self.assertEqual(response.data['status'], 'active')

        response = self.client.post(self.list_url, {
            'title': 'Copy', 'discount_type': 'percentage', 'discount_value': '5', 'code': 'EID15', **self.window,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['code'], ['Offer code already exists'])

    def test_list_filters(self):
        make_offer(self.business, title='Dates discount', featured=True)
        make_offer(self.business, title='Book bundle', status=Offer.Status.INACTIVE)

        response = self.client.get(self.list_url, {'status': 'all'})
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get(self.list_url, {'featured': 'true'})
        self.assertEqual([o['title'] for o in response.data['results']], ['Dates discount'])

        response = self.client.get(self.list_url, {'search': 'bundle'})
        self.assertEqual([o['title'] for o in response.data['results']], ['Book bundle'])

    def test_redeem_until_limit(self):
        offer = make_offer(self.business, usage_limit=1)
        url = reverse('businesses:business-offer-redeem', kwargs={'pk': offer.id})

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['used_count'], 1)

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'error': 'Offer usage limit exceeded'})

    def test_stats_and_analytics(self):
        make_offer(self.business, used_count=3)
        make_offer(self.business, status=Offer.Status.INACTIVE)
        Product.objects.create(business=self.business, name='Dates', price=Decimal('5'), category='food', stock=3, views=7)

        stats = self.client.get(reverse('businesses:business-offer-stats')).data
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['valid'], 1)
        self.assertEqual(stats['total_redemptions'], 3)

        analytics = self.client.get(reverse('businesses:business-analytics')).data
        self.assertEqual(analytics['products']['views'], 7)
        self.assertEqual(analytics['top_products'][0]['name'], 'Dates')


class PublicShopAPITests(APITestCase):
    def setUp(self):
        owner = make_user('owner@example.com', Role.BUSINESS)
        self.business = make_business(owner, latitude=42.3223, longitude=-83.1763)
        self.pending = make_business(
            make_user('pending@example.com', Role.BUSINESS),
            name='Pending Shop',
            verification_status=Business.VerificationStatus.PENDING,
        )
        self.product = Product.objects.create(
            business=self.business, name='Medjool Dates', price=Decimal('12.50'), category='food', stock=30
        )
        Product.objects.create(
            business=self.business, name='Hidden', price=Decimal('1'), category='food', stock=3,
            status=Product.Status.INACTIVE,
        )
        make_offer(self.business)

    def test_directory_lists_verified_only(self):
        response = self.client.get(reverse('businesses:business-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['name'] for b in response.data['results']], ['Barakah Grocery'])

        response = self.client.get(reverse('businesses:business-list'), {'category': 'restaurant'})
        self.assertEqual(response.data['results'], [])

    def test_nearby(self):
        response = self.client.get(reverse('businesses:business-nearby'), {
            'latitude': 42.3223, 'longitude': -83.1763, 'radius': 500,
        })
        self.assertEqual(response.data['count'], 1)

    def test_shop_page_counts_views(self):
        url = reverse('businesses:shop', kwargs={'business_id': self.business.id})
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data['products']], ['Medjool Dates'])
        self.assertEqual(len(response.data['offers']), 1)
        self.client.get(url)
        self.business.refresh_from_db()
        self.assertEqual(self.business.views, 2)

    def test_unverified_shop_not_found(self):
        url = reverse('businesses:shop', kwargs={'business_id': self.pending.id})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_shop_products_and_views(self):
        response = self.client.get(reverse('businesses:shop-products', kwargs={'business_id': self.business.id}))
        self.assertEqual(response.data['pagination']['total'], 1)

        kwargs = {'business_id': self.business.id, 'product_id': self.product.id}
        response = self.client.post(reverse('businesses:shop-product-view', kwargs=kwargs))
        self.assertEqual(response.data['views'], 1)
        response = self.client.get(reverse('businesses:shop-product-detail', kwargs=kwargs))
        self.assertEqual(response.data['views'], 1)

    def test_shop_offers(self):
        response = self.client.get(reverse('businesses:shop-offers', kwargs={'business_id': self.business.id}))
        self.assertEqual(len(response.data), 1)
        response = self.client.get(
            reverse('businesses:shop-offers', kwargs={'business_id': self.business.id}), {'featured': 'true'}
        )
        self.assertEqual(response.data, [])


class HalalCertificationAPITests(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.business = make_business(self.owner)

    def request_certification(self):
        self.client.force_authenticate(user=self.owner)
        return self.client.post(reverse('businesses:business-halal-certifications'), {
            'contact_name': 'Yusuf Ali',
            'contact_email': 'Yusuf@Example.com',
            'supplier_info': 'Local farms',
        }, format='json')

    def test_owner_request_prefilled_from_business(self):
        response = self.request_certification()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        certification = HalalCertification.objects.get()
        self.assertEqual(certification.business_name, 'Barakah Grocery')
        self.assertEqual(certification.postcode, '48126')
        self.assertEqual(certification.contact_email, 'yusuf@example.com')
        self.assertEqual(certification.status, HalalCertification.Status.PENDING)

        response = self.client.get(reverse('businesses:business-halal-certifications'))
        self.assertEqual(len(response.data), 1)

    def test_imam_approval_certifies_business(self):
        self.request_certification()
        certification = HalalCertification.objects.get()

        self.client.force_authenticate(user=self.imam)
        response = self.client.get(reverse('businesses:imam-halal-requests'), {'status': 'pending'})
        self.assertEqual(len(response.data), 1)

        url = reverse('businesses:imam-halal-request-detail', kwargs={'pk': certification.id})
        response = self.client.patch(url, {'status': 'approved', 'review_notes': 'Suppliers verified'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Certification request status updated successfully')
        self.assertEqual(response.data['request']['certificate_url'], f'/certificates/halal/{certification.id}.pdf')

        certification.refresh_from_db()
        self.assertEqual(certification.reviewer, self.imam)
        self.assertIsNotNone(certification.expiry_date)
        self.business.refresh_from_db()
        self.assertTrue(self.business.is_halal_certified)
        self.assertTrue(Notification.objects.filter(
            recipient__user=self.owner, verb=NotificationVerb.CERTIFICATION
        ).exists())

        response = self.client.patch(url, {'status': 'rejected'}, format='json')
        self.business.refresh_from_db()
        self.assertFalse(self.business.is_halal_certified)

    def test_invalid_status_rejected(self):
        self.request_certification()
        certification = HalalCertification.objects.get()
        self.client.force_authenticate(user=self.imam)
        url = reverse('businesses:imam-halal-request-detail', kwargs={'pk': certification.id})
        response = self.client.patch(url, {'status': 'bogus'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_business_owner_cannot_review(self):
        self.request_certification()
        certification = HalalCertification.objects.get()
        url = reverse('businesses:imam-halal-request-detail', kwargs={'pk': certification.id})
        response = self.client.patch(url, {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

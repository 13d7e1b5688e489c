from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase
from rest_framework import serializers, status
from rest_framework.exceptions import NotFound
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory, APITestCase

from user.models import Role
from .exceptions import ConflictError, GeocodingError, OfferNotRedeemable, api_exception_handler
from .pagination import paginate
from .permissions import IsAdmin, IsBusinessOwner, IsImam
from .testing import make_user


class ExceptionHandlerTests(TestCase):

    def test_domain_errors_keep_status(self):
        response = api_exception_handler(ConflictError('Already registered'), {})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'error': 'Already registered'})

        self.assertEqual(api_exception_handler(OfferNotRedeemable(), {}).status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(api_exception_handler(GeocodingError(), {}).status_code, status.HTTP_502_BAD_GATEWAY)

    def test_not_found(self):
        response = api_exception_handler(NotFound('Mosque not found'), {})
        self.assertEqual(response.data, {'error': 'Mosque not found'})

    def test_validation_errors_carry_details(self):
        response = api_exception_handler(serializers.ValidationError({'name': ['This field is required.']}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('name', response.data['details'])

    def test_model_validation_errors_become_400(self):
        response = api_exception_handler(DjangoValidationError({'zip_code': ['Invalid postcode']}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('zip_code', response.data['details'])

    def test_unexpected_errors_become_500(self):
        with self.assertLogs('core.exceptions', level='ERROR'):
            response = api_exception_handler(RuntimeError('boom'), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Internal server error'})


class PaginateTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.items = list(range(25))

    def page_of(self, query, **kwargs):
        return paginate(QuerySetStub(self.items), Request(self.factory.get('/', query)), **kwargs)

    def test_defaults(self):
        items, pagination = self.page_of({})
        self.assertEqual(items, list(range(10)))
        self.assertEqual(pagination, {'total': 25, 'page': 1, 'limit': 10, 'pages': 3})

    def test_page_and_limit(self):
        items, pagination = self.page_of({'page': 3, 'limit': 10})
        self.assertEqual(items, [20, 21, 22, 23, 24])
        self.assertEqual(pagination['pages'], 3)

    def test_bad_values_fall_back(self):
        items, pagination = self.page_of({'page': 'x', 'limit': '-4'})
        self.assertEqual(pagination['page'], 1)
        self.assertEqual(pagination['limit'], 10)

    def test_limit_is_capped(self):
        _, pagination = self.page_of({'limit': 1000}, max_limit=20)
        self.assertEqual(pagination['limit'], 20)

    def test_empty(self):
        self.items = []
        items, pagination = self.page_of({})
        self.assertEqual(items, [])
        self.assertEqual(pagination['pages'], 0)


class QuerySetStub(list):
    def count(self):
        return len(self)


class RolePermissionTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def allowed(self, permission, user):
        request = self.factory.get('/')
        request.user = user
        return permission().has_permission(request, None)

    def test_roles(self):
        imam = make_user('imam@example.com', Role.IMAM)
        owner = make_user('owner@example.com', Role.BUSINESS)
        admin = make_user('admin@example.com', Role.ADMIN)

        self.assertTrue(self.allowed(IsImam, imam))
        self.assertFalse(self.allowed(IsImam, owner))
        self.assertTrue(self.allowed(IsBusinessOwner, owner))
        self.assertTrue(self.allowed(IsBusinessOwner, admin))
        self.assertFalse(self.allowed(IsAdmin, imam))
        self.assertTrue(self.allowed(IsAdmin, admin))


class ApiRootTests(APITestCase):
    def test_root(self):
        response = self.client.get('/api/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')

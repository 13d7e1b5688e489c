"""
Domain exceptions and the project-wide DRF exception handler.

Every error response leaves the API as ``{"error": "<message>"}``; validation
failures additionally carry the per-field messages under ``details``.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'domain_error'


class InvalidStatusTransition(DomainError):
    default_detail = 'Invalid status'
    default_code = 'invalid_status'


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists'
    default_code = 'conflict'


class OfferNotRedeemable(ConflictError):
    default_detail = 'Offer is not valid'
    default_code = 'offer_not_redeemable'


class GeocodingError(DomainError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Geocoding service unavailable'
    default_code = 'geocoding_error'


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.message_dict if hasattr(exc, 'error_dict') else exc.messages)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, ValidationError):
        response.data = {'error': 'Validation failed', 'details': response.data}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}

    return response

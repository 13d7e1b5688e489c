"""
API views for business owners, the public shop and halal certification review.
"""
import logging

from django.db.models import Count, F, Q, Sum
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ConflictError
from core.pagination import paginate
from core.permissions import IsBusinessOwner, IsImam
from moderation.services import ModerationService
from mosques.services import GeoService
from mosques.views import geocode_into, parse_floats
from .models import Business, HalalCertification, Offer, Product
from .serializers import (
    BusinessPublicSerializer,
    BusinessSerializer,
    HalalCertificationSerializer,
    HalalReviewSerializer,
    OfferSerializer,
    ProductSerializer,
)

logger = logging.getLogger(__name__)


def owned_business(user):
    business = Business.objects.filter(owner=user).first()
    if business is None:
        raise NotFound('Business not found. Register your business first.')
    return business


def public_business(business_id):
    return get_object_or_404(
        Business,
        pk=business_id,
        verification_status=Business.VerificationStatus.VERIFIED,
        status=Business.Status.ACTIVE,
    )


class BusinessRegisterView(APIView):
    permission_classes = [IsBusinessOwner]

    def post(self, request):
        if Business.objects.filter(owner=request.user).exists():
            raise ConflictError('You already have a registered business')

        serializer = BusinessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        geocode_into(serializer.validated_data)
        business = serializer.save(owner=request.user)
        logger.info("Business %s registered by %s", business.id, request.user.pk)
        return Response({
            'message': 'Business registered successfully. Awaiting verification.',
            'business': BusinessSerializer(business).data,
        }, status=status.HTTP_201_CREATED)


class BusinessProfileView(APIView):
    permission_classes = [IsBusinessOwner]

    def get(self, request):
        return Response(BusinessSerializer(owned_business(request.user)).data)

    def patch(self, request):
        business = owned_business(request.user)
        serializer = BusinessSerializer(business, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        geocode_into(serializer.validated_data, instance=business)
        serializer.save()
        return Response(serializer.data)


class ProductViewSet(viewsets.ModelViewSet):
    """
    Products of the requesting owner's business. The business product
    count is refreshed after every write.
    """
    permission_classes = [IsBusinessOwner]
    serializer_class = ProductSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Product.objects.filter(business=owned_business(self.request.user))
        params = self.request.query_params
        if params.get('status') in Product.Status.values:
            queryset = queryset.filter(status=params['status'])
        if params.get('category'):
            queryset = queryset.filter(category__iexact=params['category'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        business = owned_business(self.request.user)
        serializer.save(business=business)
        business.update_product_count()

    def perform_update(self, serializer):
        product = serializer.save()
        product.business.update_product_count()

    def perform_destroy(self, instance):
        business = instance.business
        instance.delete()
        business.update_product_count()

    @action(detail=False, methods=['get'])
    def stats(self, request):
        products = Product.objects.filter(business=owned_business(request.user))
        by_status = dict(products.order_by().values_list('status').annotate(count=Count('id')))
        low_stock = products.filter(
            track_inventory=True,
            unlimited=False,
            stock__gt=0,
            stock__lte=F('low_stock_threshold'),
        ).count()
        totals = products.aggregate(views=Sum('views'), orders=Sum('orders'), revenue=Sum('revenue'))
        return Response({
            'total': products.count(),
            'by_status': {value: by_status.get(value, 0) for value in Product.Status.values},
            'featured': products.filter(featured=True).count(),
            'low_stock': low_stock,
            'total_views': totals['views'] or 0,
            'total_orders': totals['orders'] or 0,
            'total_revenue': totals['revenue'] or 0,
        })


class OfferViewSet(viewsets.ModelViewSet):
    permission_classes = [IsBusinessOwner]
    serializer_class = OfferSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Offer.objects.filter(business=owned_business(self.request.user))
        params = self.request.query_params
        if params.get('status') and params['status'] != 'all':
            queryset = queryset.filter(status=params['status'])
        if params.get('featured') is not None:
            queryset = queryset.filter(featured=params['featured'].lower() == 'true')
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(
                Q(title__icontains=term) | Q(description__icontains=term) | Q(code__icontains=term)
            )
        return queryset.prefetch_related('applicable_products').order_by('-priority', '-created_at')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.user.is_authenticated:
            context['business'] = Business.objects.filter(owner=self.request.user).first()
        return context

    def perform_create(self, serializer):
        serializer.save(business=owned_business(self.request.user))

    @action(detail=False, methods=['get'])
    def stats(self, request):
        offers = Offer.objects.filter(business=owned_business(request.user))
        by_status = dict(offers.order_by().values_list('status').annotate(count=Count('id')))
        return Response({
            'total': offers.count(),
            'by_status': {value: by_status.get(value, 0) for value in Offer.Status.values},
            'valid': offers.valid().count(),
            'featured': offers.filter(featured=True).count(),
            'total_redemptions': offers.aggregate(total=Sum('used_count'))['total'] or 0,
        })

    @action(detail=True, methods=['post'])
    def redeem(self, request, pk=None):
        offer = self.get_object()
        used_count = offer.redeem()
        logger.info("Offer %s redeemed (%s uses)", offer.id, used_count)
        return Response({'message': 'Offer redeemed successfully', 'used_count': used_count})


class BusinessAnalyticsView(APIView):
    permission_classes = [IsBusinessOwner]

    def get(self, request):
        business = owned_business(request.user)
        products = business.products.all()
        offers = business.offers.all()
        top_products = products.order_by('-views')[:5]
        return Response({
            'business_views': business.views,
            'products': {
                'total': products.count(),
                'active': products.filter(status=Product.Status.ACTIVE).count(),
                'views': products.aggregate(total=Sum('views'))['total'] or 0,
            },
            'offers': {
                'total': offers.count(),
                'active': offers.valid().count(),
                'redemptions': offers.aggregate(total=Sum('used_count'))['total'] or 0,
            },
            'top_products': [
                {'id': product.id, 'name': product.name, 'views': product.views, 'orders': product.orders}
                for product in top_products
            ],
        })


class HalalCertificationRequestView(APIView):
    """Owner side of halal certification: request one, list previous requests."""
    permission_classes = [IsBusinessOwner]

    def get(self, request):
        business = owned_business(request.user)
        certifications = business.halal_certifications.order_by('-requested_at')
        return Response(HalalCertificationSerializer(certifications, many=True).data)

    def post(self, request):
        business = owned_business(request.user)
        serializer = HalalCertificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        certification = serializer.save(
            business=business,
            business_name=data.get('business_name') or business.name,
            business_type=data.get('business_type') or business.get_category_display(),
            address=data.get('address') or business.street,
            city=data.get('city') or business.city,
            postcode=data.get('postcode') or business.zip_code,
            status=HalalCertification.Status.PENDING,
        )
        logger.info("Halal certification %s requested for business %s", certification.id, business.id)
        return Response({
            'message': 'Halal certification request submitted successfully',
            'request': HalalCertificationSerializer(certification).data,
        }, status=status.HTTP_201_CREATED)


class BusinessDirectoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Verified, active businesses for the public directory."""
    permission_classes = [AllowAny]
    serializer_class = BusinessPublicSerializer

    def get_queryset(self):
        queryset = Business.objects.filter(
            verification_status=Business.VerificationStatus.VERIFIED,
            status=Business.Status.ACTIVE,
        )
        params = self.request.query_params
        if params.get('category'):
            queryset = queryset.filter(category=params['category'])
        if params.get('city'):
            queryset = queryset.filter(city__icontains=params['city'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        if params.get('featured') is not None:
            queryset = queryset.filter(featured=params['featured'].lower() == 'true')
        return queryset.order_by('-featured', '-created_at')

    @action(detail=False, methods=['get'])
    def nearby(self, request):
        try:
            lat, lon = parse_floats(request.query_params, 'latitude', 'longitude')
            radius = int(request.query_params.get('radius', 5000))
        except (TypeError, ValueError):
            return Response(
                {'error': 'Invalid parameters. Required: latitude, longitude (float), radius (int)'},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not GeoService.is_location_valid(lat, lon) or radius <= 0:
            return Response({'error': 'Invalid coordinates'}, status=status.HTTP_400_BAD_REQUEST)

        businesses = GeoService.find_nearby(self.get_queryset(), lat, lon, radius)
        return Response({
            'count': len(businesses),
            'results': BusinessPublicSerializer(businesses, many=True).data
        })


class ShopView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, business_id):
        business = public_business(business_id)
        Business.objects.filter(pk=business.pk).update(views=F('views') + 1)
        business.refresh_from_db(fields=['views'])

        products = business.products.filter(status=Product.Status.ACTIVE).order_by('-featured', '-created_at')
        offers = Offer.objects.active_for(business)
        return Response({
            'business': BusinessPublicSerializer(business).data,
            'products': ProductSerializer(products, many=True).data,
            'offers': OfferSerializer(offers, many=True).data,
        })


class ShopProductsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, business_id):
        business = public_business(business_id)
        queryset = business.products.filter(status=Product.Status.ACTIVE)
        params = request.query_params
        if params.get('category'):
            queryset = queryset.filter(category__iexact=params['category'])
        if params.get('featured') is not None:
            queryset = queryset.filter(featured=params['featured'].lower() == 'true')
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))

        products, pagination = paginate(queryset.order_by('-featured', '-created_at'), request, default_limit=20)
        return Response({
            'results': ProductSerializer(products, many=True).data,
            'pagination': pagination,
        })


class ShopProductDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, business_id, product_id):
        business = public_business(business_id)
        product = get_object_or_404(business.products, pk=product_id, status=Product.Status.ACTIVE)
        return Response(ProductSerializer(product).data)


class ShopProductViewCountView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, business_id, product_id):
        business = public_business(business_id)
        product = get_object_or_404(business.products, pk=product_id)
        Product.objects.filter(pk=product.pk).update(views=F('views') + 1)
        product.refresh_from_db(fields=['views'])
        return Response({'views': product.views})


class ShopOffersView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, business_id):
        business = public_business(business_id)
        featured = request.query_params.get('featured', '').lower() == 'true'
        offers = Offer.objects.active_for(business, featured=featured)
        return Response(OfferSerializer(offers, many=True).data)


class ImamHalalRequestsView(APIView):
    permission_classes = [IsImam]

    def get(self, request):
        queryset = HalalCertification.objects.select_related('business').order_by('-requested_at')
        requested = request.query_params.get('status')
        if requested in HalalCertification.Status.values:
            queryset = queryset.filter(status=requested)
        return Response(HalalCertificationSerializer(queryset, many=True).data)


class ImamHalalRequestDetailView(APIView):
    permission_classes = [IsImam]

    def get(self, request, pk):
        certification = get_object_or_404(HalalCertification, pk=pk)
        return Response(HalalCertificationSerializer(certification).data)

    def patch(self, request, pk):
        certification = get_object_or_404(HalalCertification, pk=pk)
        serializer = HalalReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ModerationService.set_status(
            certification,
            serializer.validated_data['status'],
            request.user,
            note=serializer.validated_data['review_notes'],
            request=request,
        )
        return Response({
            'message': 'Certification request status updated successfully',
            'request': HalalCertificationSerializer(certification).data,
        })

"""
URL routing for businesses app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    BusinessAnalyticsView,
    BusinessDirectoryViewSet,
    BusinessProfileView,
    BusinessRegisterView,
    HalalCertificationRequestView,
    ImamHalalRequestDetailView,
    ImamHalalRequestsView,
    OfferViewSet,
    ProductViewSet,
    ShopOffersView,
    ShopProductDetailView,
    ShopProductsView,
    ShopProductViewCountView,
    ShopView,
)

router = DefaultRouter()
router.include_root_view = False
router.register(r'business/products', ProductViewSet, basename='business-product')
router.register(r'business/offers', OfferViewSet, basename='business-offer')
router.register(r'businesses', BusinessDirectoryViewSet, basename='business')

app_name = 'businesses'

urlpatterns = [
    path('business/register/', BusinessRegisterView.as_view(), name='business-register'),
    path('business/profile/', BusinessProfileView.as_view(), name='business-profile'),
    path('business/analytics/', BusinessAnalyticsView.as_view(), name='business-analytics'),
    path(
        'business/halal-certifications/',
        HalalCertificationRequestView.as_view(),
        name='business-halal-certifications'
    ),
    path('shop/<uuid:business_id>/', ShopView.as_view(), name='shop'),
    path('shop/<uuid:business_id>/products/', ShopProductsView.as_view(), name='shop-products'),
    path(
        'shop/<uuid:business_id>/products/<uuid:product_id>/',
        ShopProductDetailView.as_view(),
        name='shop-product-detail'
    ),
    path(
        'shop/<uuid:business_id>/products/<uuid:product_id>/view/',
        ShopProductViewCountView.as_view(),
        name='shop-product-view'
    ),
    path('shop/<uuid:business_id>/offers/', ShopOffersView.as_view(), name='shop-offers'),
    path(
        'imam/halal-certification-requests/',
        ImamHalalRequestsView.as_view(),
        name='imam-halal-requests'
    ),
    path(
        'imam/halal-certification-requests/<uuid:pk>/',
        ImamHalalRequestDetailView.as_view(),
        name='imam-halal-request-detail'
    ),
    path('', include(router.urls)),
]

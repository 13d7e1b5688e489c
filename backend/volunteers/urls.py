"""
URL routing for volunteers app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    ImamVolunteerDetailView,
    ImamVolunteersView,
    NeedApplicantReviewView,
    VolunteerApplicationViewSet,
    VolunteerNeedViewSet,
    VolunteerOfferViewSet,
    VolunteerRegisterView,
    VolunteerStatusView,
)

router = DefaultRouter()
router.include_root_view = False
router.register(r'volunteers/needs', VolunteerNeedViewSet, basename='volunteer-need')
router.register(r'volunteers/offers', VolunteerOfferViewSet, basename='volunteer-offer')
router.register(r'volunteers/applications', VolunteerApplicationViewSet, basename='volunteer-application')

app_name = 'volunteers'

urlpatterns = [
    path('volunteer/register/', VolunteerRegisterView.as_view(), name='volunteer-register'),
    path('user/volunteer/status/', VolunteerStatusView.as_view(), name='volunteer-status'),
    path(
        'volunteers/needs/<uuid:pk>/applicants/<uuid:applicant_id>/',
        NeedApplicantReviewView.as_view(),
        name='need-applicant-review'
    ),
    path('imam/volunteers/', ImamVolunteersView.as_view(), name='imam-volunteers'),
    path('imam/volunteers/<uuid:pk>/', ImamVolunteerDetailView.as_view(), name='imam-volunteer-detail'),
    path('', include(router.urls)),
]

# config/urls.py
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core import views as cv
from leasing import views as lv

router = DefaultRouter()
router.register(r"me", cv.MeViewSet, basename="me")
router.register(r"users", cv.UserViewSet)
router.register(r"companies", cv.CompanyViewSet)
router.register(r"properties", cv.PropertyViewSet)
router.register(r"units", cv.UnitViewSet)
router.register(r"activity-logs", cv.ActivityLogViewSet, basename="activitylog")
router.register(r"leases", lv.LeaseViewSet)
router.register(r"payments", lv.PaymentViewSet)
router.register(r"documents", lv.DocumentViewSet)

urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("api/reports/dashboard-stats/", lv.DashboardStatsView.as_view(), name="dashboard-stats"),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),

    path("api/", include(router.urls)),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

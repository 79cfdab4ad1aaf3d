from django.urls import path
from rest_framework.routers import DefaultRouter
from .views import SmartLinkViewSet, public_smart_link

router = DefaultRouter()
router.register(r'smart-links', SmartLinkViewSet, basename='smart-link')

app_name = 'smartlinks'
urlpatterns = [
    path('public/smart-links/<slug:slug>/', public_smart_link, name='public-smart-link'),
] + router.urls

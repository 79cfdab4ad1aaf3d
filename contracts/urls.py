from django.urls import path
from rest_framework.routers import DefaultRouter
from .views import ContractViewSet, dropbox_sign_webhook

router = DefaultRouter()
router.register(r'contracts', ContractViewSet, basename='contract')

app_name = 'contracts'
urlpatterns = [
    path('contracts/webhook/dropbox-sign/<str:secret_token>/', dropbox_sign_webhook, name='dropbox-sign-webhook'),
] + router.urls

from django.urls import path
from rest_framework.routers import DefaultRouter
from .views import EmailLogViewSet, EmailTemplateViewSet, send_email

router = DefaultRouter()
router.register(r'email-templates', EmailTemplateViewSet, basename='email-template')
router.register(r'email-history', EmailLogViewSet, basename='email-log')

app_name = 'notifications'
urlpatterns = [
    path('emails/send/', send_email, name='send-email'),
] + router.urls

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import SongViewSet, CollaboratorViewSet, PublishingEntityViewSet, catalog_search

router = DefaultRouter()
router.register(r'songs', SongViewSet, basename='song')
router.register(r'collaborators', CollaboratorViewSet, basename='collaborator')
router.register(r'publishing-entities', PublishingEntityViewSet, basename='publishing-entity')

app_name = 'catalog'
urlpatterns = [
    path('', include(router.urls)),
    path('catalog/search/', catalog_search, name='catalog-search'),
]

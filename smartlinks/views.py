import logging

from django.http import HttpResponseRedirect
from django_filters import rest_framework as django_filters
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdministrator
from .models import SmartLink, SmartLinkDestination
from .serializers import PublicSmartLinkSerializer, SmartLinkSerializer
from .services import click_summary, record_click

logger = logging.getLogger(__name__)


class SmartLinkViewSet(viewsets.ModelViewSet):
    """
    ViewSet for smart links (admin only).

    GET /smart-links/?song=14 returns the links of one song.
    """

    queryset = SmartLink.objects.select_related('song').prefetch_related('destinations')
    serializer_class = SmartLinkSerializer
    permission_classes = [IsAuthenticated, IsAdministrator]
    filter_backends = [
        django_filters.DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_fields = ['song', 'is_active']
    search_fields = ['title', 'slug', 'song__title']
    ordering_fields = ['created_at', 'title']
    ordering = ['-created_at']

    def perform_create(self, serializer):
        smart_link = serializer.save()
        logger.info(f"Smart link {smart_link.id} created for song {smart_link.song_id} by {self.request.user.email}")

    @action(detail=True, methods=['get'])
    def analytics(self, request, pk=None):
        """
        Click totals by service and by day.

        Query params: range (e.g. 7d, 30d, all; default 30d) and humanOnly
        (default true; false counts every raw click).
        """
        smart_link = self.get_object()
        human_only = request.query_params.get('humanOnly', 'true').lower() != 'false'
        return Response(click_summary(smart_link, request.query_params.get('range'), human_only))


@api_view(['GET'])
@permission_classes([AllowAny])
def public_smart_link(request, slug):
    """Public landing page data. Inactive links are reported as missing."""
    smart_link = (
        SmartLink.objects.prefetch_related('destinations')
        .filter(slug=slug, is_active=True)
        .first()
    )
    if smart_link is None:
        return Response({'error': 'Smart link not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PublicSmartLinkSerializer(smart_link).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def smart_link_redirect(request, smart_link_id, service):
    """Record the click and send the visitor on to the service (302)."""
    destination = (
        SmartLinkDestination.objects.select_related('smart_link')
        .filter(smart_link_id=smart_link_id, service_key=service, smart_link__is_active=True)
        .first()
    )
    if destination is None:
        return Response({'error': 'Destination not found'}, status=status.HTTP_404_NOT_FOUND)

    record_click(
        destination,
        user_agent=request.META.get('HTTP_USER_AGENT'),
        referrer=request.META.get('HTTP_REFERER'),
    )
    return HttpResponseRedirect(destination.url)

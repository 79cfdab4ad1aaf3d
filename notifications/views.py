import logging

from django.db.models import Q
from django_filters import rest_framework as django_filters
from rest_framework import filters, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdministrator
from rights.views import invalid_request_response
from .models import EmailLog, EmailTemplate
from .serializers import EmailLogListSerializer, EmailLogSerializer, EmailTemplateSerializer, SendEmailSerializer
from .services import BroadcastError, create_broadcast
from .tasks import send_broadcast_email

logger = logging.getLogger(__name__)


class EmailTemplateViewSet(viewsets.ModelViewSet):
    """ViewSet for broadcast email templates (admin only)."""

    queryset = EmailTemplate.objects.select_related('created_by')
    serializer_class = EmailTemplateSerializer
    permission_classes = [IsAuthenticated, IsAdministrator]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'subject']
    ordering_fields = ['name', 'created_at', 'updated_at']
    ordering = ['name']

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class EmailLogFilter(django_filters.FilterSet):
    """Filter for EmailLog model."""

    scope = django_filters.ChoiceFilter(choices=EmailLog.SCOPE_CHOICES)
    status = django_filters.ChoiceFilter(choices=EmailLog.STATUS_CHOICES)
    q = django_filters.CharFilter(method='filter_q')

    class Meta:
        model = EmailLog
        fields = ['scope', 'song', 'status']

    def filter_q(self, queryset, name, value):
        return queryset.filter(
            Q(subject__icontains=value) |
            Q(triggered_by__email__icontains=value)
        )


class EmailLogViewSet(viewsets.ReadOnlyModelViewSet):
    """Broadcast history, newest first (admin only)."""

    queryset = EmailLog.objects.select_related('template', 'song', 'triggered_by')
    permission_classes = [IsAuthenticated, IsAdministrator]
    filterset_class = EmailLogFilter
    filter_backends = [django_filters.DjangoFilterBackend]

    def get_serializer_class(self):
        if self.action == 'list':
            return EmailLogListSerializer
        return EmailLogSerializer


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdministrator])
def send_email(request):
    """
    Send a broadcast email to collaborators.

    POST /emails/send/
    {
        "templateId": 2,                  # optional
        "subject": "New release",         # overrides the template
        "bodyHtml": "<p>...</p>",
        "bodyText": "...",
        "scope": "song_collaborators",    # all_collaborators | song_collaborators | specific_collaborators
        "songId": 14,
        "collaboratorIds": [3, 5],
        "bccMode": "single_bcc"           # or per_recipient
    }
    """
    serializer = SendEmailSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_request_response(serializer)
    data = serializer.validated_data

    try:
        email_log = create_broadcast(
            request.user,
            data['scope'],
            bcc_mode=data['bccMode'],
            template_id=data.get('templateId'),
            subject=data.get('subject'),
            body_html=data.get('bodyHtml'),
            body_text=data.get('bodyText'),
            song_id=data.get('songId'),
            collaborator_ids=data.get('collaboratorIds'),
        )
    except BroadcastError as e:
        return Response({'error': e.message}, status=e.status_code)

    task = send_broadcast_email.delay(email_log.id)

    email_log.refresh_from_db()
    return Response({
        'success': email_log.status != 'failed',
        'recipients': email_log.recipient_count,
        'emailLogId': email_log.id,
        'status': email_log.status,
        'taskId': task.id,
    }, status=status.HTTP_202_ACCEPTED)

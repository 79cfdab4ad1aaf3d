import json
import logging

from django.conf import settings
from django.http import HttpResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django_filters import rest_framework as django_filters
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from api.permissions import IsAdministrator, can_access_song, get_collaborator_id, is_admin
from catalog.models import Song
from rights.views import invalid_request_response
from .contract_types import get_required_contract_types
from .models import Contract
from .serializers import ContractGenerationSerializer, ContractSerializer, SendForSignatureSerializer
from .services.contract_generator import generate_contract_html, upsert_contract
from .services.dropbox_sign import DropboxSignError, DropboxSignService, status_from_signature_request
from .tasks import send_for_signature_async

logger = logging.getLogger(__name__)

WEBHOOK_ACK = "Hello API Event Received"


class ContractFilter(django_filters.FilterSet):
    """Filter for Contract model."""

    esignature_status = django_filters.ChoiceFilter(choices=Contract.STATUS_CHOICES)
    template_type = django_filters.CharFilter()

    class Meta:
        model = Contract
        fields = ['song', 'collaborator', 'esignature_status', 'template_type']


class ContractViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for generated contracts.

    Admins see every contract; collaborators see their own.
    """
    queryset = Contract.objects.select_related('song', 'collaborator', 'song_collaborator')
    serializer_class = ContractSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = ContractFilter
    filter_backends = [
        django_filters.DjangoFilterBackend,
        filters.OrderingFilter
    ]
    ordering_fields = ['created_at', 'updated_at', 'signed_at']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if is_admin(user):
            return queryset
        collaborator_id = get_collaborator_id(user)
        if not collaborator_id:
            return queryset.none()
        return queryset.filter(collaborator_id=collaborator_id)

    @action(detail=False, methods=['post'])
    def generate(self, request):
        """
        Generate (or regenerate) a contract for one song collaborator row.

        POST /contracts/generate/
        {
            "songId": 1,
            "songCollaboratorId": 7,
            "contractType": "songwriter_publishing"
        }
        """
        serializer = ContractGenerationSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)
        data = serializer.validated_data

        try:
            song = Song.objects.get(pk=data['songId'])
        except Song.DoesNotExist:
            return Response({'error': 'Song not found'}, status=status.HTTP_404_NOT_FOUND)

        if not can_access_song(request.user, song):
            return Response(
                {'error': "Forbidden: You don't have access to this song"},
                status=status.HTTP_403_FORBIDDEN
            )

        song_collaborator = (
            song.song_collaborators.select_related('collaborator')
            .filter(pk=data['songCollaboratorId'])
            .first()
        )
        if song_collaborator is None:
            return Response({'error': 'Song collaborator record not found'}, status=status.HTTP_404_NOT_FOUND)

        if not song.master_locked:
            return Response(
                {'error': 'Master splits must be locked before generating contracts'},
                status=status.HTTP_400_BAD_REQUEST
            )

        contract_type = data['contractType']
        if contract_type not in get_required_contract_types(song_collaborator):
            return Response(
                {'error': f"Contract type {contract_type} is not valid for this collaborator's role and splits"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            html = generate_contract_html(song, song_collaborator, contract_type)
            contract = upsert_contract(song, song_collaborator, contract_type)
        except Exception as e:
            logger.error(f"Error generating contract for song {song.id}: {str(e)}", exc_info=True)
            return Response(
                {'error': 'Failed to generate contract', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({
            'contractId': contract.id,
            'html': html,
            'contractType': contract_type,
        })

    @action(detail=True, methods=['post'], url_path='send-for-signature',
            permission_classes=[IsAuthenticated, IsAdministrator])
    def send_for_signature(self, request, pk=None):
        """
        Send contract for signature via Dropbox Sign (async).

        POST /contracts/{id}/send-for-signature/
        {"draft": false}
        """
        contract = self.get_object()

        serializer = SendForSignatureSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)

        if not contract.collaborator.email:
            return Response({'error': 'Collaborator email is required'}, status=status.HTTP_400_BAD_REQUEST)

        if contract.esignature_status == 'signed':
            return Response(
                {'error': 'Contract has already been signed and cannot be re-sent'},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(f"Sending contract {contract.id} for signature (async)")
        task = send_for_signature_async.delay(contract.id, serializer.validated_data['draft'])

        contract.refresh_from_db()
        data = ContractSerializer(contract).data
        data['taskId'] = task.id
        return Response(data, status=status.HTTP_202_ACCEPTED)

    @action(detail=True, methods=['get'], url_path='signature-status',
            permission_classes=[IsAuthenticated, IsAdministrator])
    def signature_status(self, request, pk=None):
        """
        Get signature status from Dropbox Sign and sync it to the contract.
        """
        contract = self.get_object()

        if not contract.esignature_doc_id or contract.esignature_status == 'pending':
            return Response({
                'status': contract.esignature_status,
                'signedAt': contract.signed_at,
                'source': 'database',
            })

        try:
            signature_request = DropboxSignService().get_signature_request(contract.esignature_doc_id)
        except DropboxSignError as e:
            logger.error(f"Failed to get signature status for contract {contract.id}: {str(e)}", exc_info=True)
            return Response({
                'status': contract.esignature_status,
                'signedAt': contract.signed_at,
                'source': 'database',
                'error': str(e),
            })

        new_status = status_from_signature_request(signature_request)
        if new_status and new_status != contract.esignature_status:
            logger.info(f"Syncing contract {contract.id} status {contract.esignature_status} -> {new_status}")
            contract.esignature_status = new_status
            if new_status == 'signed' and not contract.signed_at:
                contract.signed_at = timezone.now()
            contract.save(update_fields=['esignature_status', 'signed_at', 'updated_at'])

        return Response({
            'status': contract.esignature_status,
            'signedAt': contract.signed_at,
            'source': 'dropbox_sign',
            'isComplete': bool(getattr(signature_request, 'is_complete', False)),
        })


def _callback_payload(request):
    """Dropbox Sign posts the event as a "json" form field; plain JSON bodies are accepted too."""
    data = request.data
    if 'json' in data:
        raw = data['json']
        return json.loads(raw) if isinstance(raw, str) else raw
    return data


@csrf_exempt
@api_view(['POST'])
@permission_classes([AllowAny])
def dropbox_sign_webhook(request, secret_token):
    """
    Webhook endpoint for Dropbox Sign callbacks.

    The secret path token hides the endpoint (404 on mismatch) and the
    event hash is checked against our API key. Unknown contracts are
    acknowledged so Dropbox Sign stops retrying.

    Configure this URL in your Dropbox Sign account settings:
    https://your-domain.com/api/v1/contracts/webhook/dropbox-sign/YOUR_SECRET_TOKEN/
    """
    expected_token = settings.DROPBOX_SIGN_WEBHOOK_SECRET
    if not expected_token or secret_token != expected_token:
        logger.warning("Webhook request with invalid token")
        return HttpResponse("Not Found", status=404)

    try:
        callback_data = _callback_payload(request)
    except ValueError as e:
        logger.error(f"Failed to parse Dropbox Sign callback: {str(e)}")
        return HttpResponse("Bad Request", status=400)

    if not callback_data or 'event' not in callback_data:
        logger.info("Received test ping or empty callback from Dropbox Sign")
        return HttpResponse(WEBHOOK_ACK, status=200)

    try:
        service = DropboxSignService()
        callback_event = service.parse_callback(callback_data)
        if not service.is_valid_callback(callback_event):
            logger.error("Invalid Dropbox Sign event hash")
            return HttpResponse("Unauthorized", status=401)
    except Exception as e:
        logger.error(f"Dropbox Sign callback verification failed: {str(e)}", exc_info=True)
        return HttpResponse("Unauthorized", status=401)

    event_type = callback_event.event.event_type
    signature_request = callback_event.signature_request
    signature_request_id = signature_request.signature_request_id if signature_request else None

    contract = Contract.objects.filter(esignature_doc_id=signature_request_id).first() if signature_request_id else None
    if contract is None:
        logger.warning(f"Contract not found for signature request: {signature_request_id}")
        return HttpResponse(WEBHOOK_ACK, status=200)

    logger.info(f"Processing {event_type} for contract {contract.id}")

    if event_type == 'signature_request_all_signed':
        contract.esignature_status = 'signed'
        contract.signed_at = timezone.now()
        contract.save(update_fields=['esignature_status', 'signed_at', 'updated_at'])
    elif event_type == 'signature_request_declined':
        contract.esignature_status = 'declined'
        contract.save(update_fields=['esignature_status', 'updated_at'])
    elif event_type == 'signature_request_canceled':
        # Back to pending so it can be sent again
        contract.esignature_status = 'pending'
        contract.esignature_doc_id = None
        contract.save(update_fields=['esignature_status', 'esignature_doc_id', 'updated_at'])
    else:
        logger.info(f"Unhandled event type: {event_type}")

    return HttpResponse(WEBHOOK_ACK, status=200)

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import IsAdministrator, can_access_song
from catalog.models import Song
from . import workflow
from .exceptions import SplitWorkflowError
from .serializers import LockActionSerializer, SaveSplitsSerializer, SongQuerySerializer

logger = logging.getLogger(__name__)


def workflow_error_response(exc):
    return Response(exc.as_response_data(), status=exc.status_code)


def song_not_found_response():
    return Response({'error': 'Song not found'}, status=status.HTTP_404_NOT_FOUND)


def invalid_request_response(serializer):
    return Response(
        {'error': 'Validation failed', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


class SplitLedgerView(APIView):
    """
    Shared handling for the publishing and master ledgers.

    GET returns the ledger summary, POST saves percentages and PATCH
    locks or unlocks. Mutations are admin-only.
    """
    ledger = None

    def get_permissions(self):
        if self.request.method == 'GET':
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdministrator()]

    def summarize(self, song):
        raise NotImplementedError

    def save(self, serializer):
        raise NotImplementedError

    def get(self, request):
        query = SongQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return invalid_request_response(query)

        try:
            song = Song.objects.get(pk=query.validated_data['songId'])
        except Song.DoesNotExist:
            return song_not_found_response()

        if not can_access_song(request.user, song):
            return Response(
                {'error': "Forbidden: You don't have access to this song"},
                status=status.HTTP_403_FORBIDDEN
            )
        return Response(self.summarize(song))

    def post(self, request):
        serializer = SaveSplitsSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)

        try:
            self.save(serializer)
        except Song.DoesNotExist:
            return song_not_found_response()
        except SplitWorkflowError as e:
            return workflow_error_response(e)
        except Exception as e:
            logger.error(f"Failed to update {self.ledger} splits: {e}", exc_info=True)
            return Response(
                {'error': f'Failed to update {self.ledger} splits', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return Response({'success': True})

    def patch(self, request):
        serializer = LockActionSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)

        song_id = serializer.validated_data['songId']
        action = serializer.validated_data['action']
        operation = getattr(workflow, f'{action}_{self.ledger}')

        try:
            state = operation(song_id)
        except Song.DoesNotExist:
            return song_not_found_response()
        except SplitWorkflowError as e:
            return workflow_error_response(e)
        except Exception as e:
            logger.error(f"Failed to {action} {self.ledger} splits for song {song_id}: {e}", exc_info=True)
            return Response(
                {'error': f'Failed to {action} {self.ledger} splits', 'details': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({
            'success': True,
            'publishingLocked': state.publishing_locked,
            'publishingLockedAt': state.publishing_locked_at,
            'masterLocked': state.master_locked,
            'masterLockedAt': state.master_locked_at,
        })


class PublishingSplitsView(SplitLedgerView):
    ledger = workflow.PUBLISHING

    def summarize(self, song):
        return workflow.publishing_summary(song)

    def save(self, serializer):
        workflow.save_publishing_splits(serializer.validated_data['songId'], serializer.validated_splits())


class MasterSplitsView(SplitLedgerView):
    ledger = workflow.MASTER

    def summarize(self, song):
        return workflow.master_summary(song)

    def save(self, serializer):
        workflow.save_master_splits(
            serializer.validated_data['songId'],
            serializer.validated_splits(),
            label_master_share=serializer.validated_data.get('labelMasterShare'),
        )

import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action, api_view
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters import rest_framework as django_filters
from django.db.models import Q
import requests

from api.permissions import (
    CanAccessSong,
    IsAdministrator,
    IsAdministratorOrReadOnly,
    get_collaborator_id,
    is_admin,
)
from rights import workflow
from rights.exceptions import SplitWorkflowError
from rights.views import invalid_request_response, workflow_error_response
from .models import Collaborator, PublishingEntity, Song, SongCollaborator
from .serializers import (
    AddSongCollaboratorSerializer,
    CollaboratorSerializer,
    LabelShareSerializer,
    PublishingEntitySerializer,
    ReplacePublishingEntitiesSerializer,
    SongCollaboratorSerializer,
    SongCreateUpdateSerializer,
    SongDetailSerializer,
    SongListSerializer,
    SongPublishingEntitySerializer,
)
from .spotify import SpotifyClient, SpotifyConfigurationError
from .utils import generate_next_catalog_number

logger = logging.getLogger(__name__)


class SongFilter(django_filters.FilterSet):
    """Filter for Song model."""

    status = django_filters.ChoiceFilter(choices=Song.STATUS_CHOICES)
    publishing_locked = django_filters.BooleanFilter()
    master_locked = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Song
        fields = ['status', 'publishing_locked', 'master_locked']

    def filter_search(self, queryset, name, value):
        """Search songs by title or catalog identifiers."""
        return queryset.filter(
            Q(title__icontains=value) |
            Q(isrc_code__icontains=value) |
            Q(iswc_code__icontains=value) |
            Q(catalog_number__icontains=value)
        )


class SongViewSet(viewsets.ModelViewSet):
    """
    ViewSet for songs.

    Admins see and edit every song. Collaborators only see songs they are
    credited on and cannot change them.
    """

    queryset = Song.objects.all()
    permission_classes = [IsAuthenticated, IsAdministratorOrReadOnly, CanAccessSong]
    filterset_class = SongFilter
    filter_backends = [
        django_filters.DjangoFilterBackend,
        filters.OrderingFilter
    ]
    ordering_fields = ['title', 'created_at', 'release_date', 'catalog_number']
    ordering = ['title']

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return SongListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return SongCreateUpdateSerializer
        return SongDetailSerializer

    def get_queryset(self):
        """Collaborators only see songs they are on."""
        queryset = super().get_queryset()
        user = self.request.user

        if not is_admin(user):
            collaborator_id = get_collaborator_id(user)
            if not collaborator_id:
                return queryset.none()
            queryset = queryset.filter(song_collaborators__collaborator_id=collaborator_id).distinct()

        return queryset.prefetch_related(
            'song_collaborators__collaborator',
            'song_publishing_entities__publishing_entity'
        )

    def perform_create(self, serializer):
        """Assign the next catalog number when none is given."""
        if not serializer.validated_data.get('catalog_number'):
            serializer.save(catalog_number=generate_next_catalog_number())
        else:
            serializer.save()
        logger.info(f"Created song {serializer.instance.id} ({serializer.instance.catalog_number})")

    def create(self, request, *args, **kwargs):
        """Create song and return full detail response."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)

        detail_serializer = SongDetailSerializer(serializer.instance, context={'request': request})
        headers = self.get_success_headers(detail_serializer.data)
        return Response(detail_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=['get', 'post', 'delete'], url_path='collaborators')
    def collaborators(self, request, pk=None):
        """
        List, add or remove the song's collaborator rows.

        POST /songs/{id}/collaborators/
        {
            "collaboratorId": 12,
            "rolesInSong": ["artist"],
            "publishingOwnership": 25,      # optional, 0..100
            "masterOwnership": 40           # optional, 0..100; every role must be eligible
        }

        DELETE /songs/{id}/collaborators/?songCollaboratorId=34
        """
        song = self.get_object()

        if request.method == 'GET':
            rows = song.song_collaborators.select_related('collaborator')
            return Response(SongCollaboratorSerializer(rows, many=True).data)

        if request.method == 'DELETE':
            return self._remove_collaborator(request, song)
        return self._add_collaborator(request, song)

    def _add_collaborator(self, request, song):
        serializer = AddSongCollaboratorSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)
        data = serializer.validated_data

        try:
            collaborator = Collaborator.objects.get(pk=data['collaboratorId'])
        except Collaborator.DoesNotExist:
            return Response({'error': 'Collaborator not found'}, status=status.HTTP_404_NOT_FOUND)

        roles = data['rolesInSong']
        capable = collaborator.capable_roles or []
        invalid_roles = [role for role in roles if role != 'label' and role not in capable]
        if invalid_roles:
            return Response(
                {'error': f"This collaborator is not capable of the following roles: {', '.join(invalid_roles)}. "
                          f"Their capable roles are: {', '.join(capable)}"},
                status=status.HTTP_400_BAD_REQUEST
            )

        existing = set(
            song.song_collaborators.filter(collaborator=collaborator, role_in_song__in=roles)
            .values_list('role_in_song', flat=True)
        )
        if existing:
            return Response(
                {'error': f"{collaborator.full_name} is already credited on this song as: {', '.join(sorted(existing))}"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            rows = workflow.add_song_collaborator(
                song.id,
                collaborator,
                roles,
                publishing_ownership=data.get('publishingOwnership'),
                master_ownership=data.get('masterOwnership'),
            )
        except SplitWorkflowError as e:
            return workflow_error_response(e)

        return Response(SongCollaboratorSerializer(rows, many=True).data, status=status.HTTP_201_CREATED)

    def _remove_collaborator(self, request, song):
        song_collaborator_id = request.query_params.get('songCollaboratorId')
        if not song_collaborator_id:
            return Response({'error': 'songCollaboratorId is required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            workflow.remove_song_collaborator(song.id, int(song_collaborator_id))
        except ValueError:
            return Response({'error': 'songCollaboratorId must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
        except SongCollaborator.DoesNotExist:
            return Response({'error': 'Song collaborator not found'}, status=status.HTTP_404_NOT_FOUND)
        except SplitWorkflowError as e:
            return workflow_error_response(e)

        return Response({'success': True})

    @action(detail=True, methods=['get', 'post'], url_path='publishing-entities')
    def publishing_entities(self, request, pk=None):
        """
        List or replace the publisher's share rows.

        POST /songs/{id}/publishing-entities/
        {
            "entities": [{"publishingEntityId": 3, "ownershipPercentage": 50}]
        }
        """
        song = self.get_object()

        if request.method == 'POST':
            serializer = ReplacePublishingEntitiesSerializer(data=request.data)
            if not serializer.is_valid():
                return invalid_request_response(serializer)

            entities = [
                (entry['publishingEntityId'], entry['ownershipPercentage'])
                for entry in serializer.validated_data['entities']
            ]
            try:
                workflow.replace_publishing_entities(song.id, entities)
            except SplitWorkflowError as e:
                return workflow_error_response(e)

        rows = song.song_publishing_entities.select_related('publishing_entity')
        response_status = status.HTTP_201_CREATED if request.method == 'POST' else status.HTTP_200_OK
        return Response(SongPublishingEntitySerializer(rows, many=True).data, status=response_status)

    @action(detail=True, methods=['post'], url_path='label-share', permission_classes=[IsAuthenticated, IsAdministrator])
    def label_share(self, request, pk=None):
        """
        Set the label's master share (0..100) on the song.

        POST /songs/{id}/label-share/
        {"labelMasterShare": 40}
        """
        song = self.get_object()

        serializer = LabelShareSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer)

        try:
            workflow.set_label_master_share(song.id, serializer.validated_data['labelMasterShare'])
        except SplitWorkflowError as e:
            return workflow_error_response(e)

        return Response({'success': True})


class CollaboratorFilter(django_filters.FilterSet):
    """Filter for Collaborator model."""

    status = django_filters.ChoiceFilter(choices=Collaborator.STATUS_CHOICES)
    role = django_filters.CharFilter(method='filter_role')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Collaborator
        fields = ['status', 'pro_affiliation']

    def filter_role(self, queryset, name, value):
        """Collaborators whose capable roles include the given role."""
        ids = [
            collaborator_id
            for collaborator_id, roles in queryset.values_list('id', 'capable_roles')
            if value in (roles or [])
        ]
        return queryset.filter(id__in=ids)

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(first_name__icontains=value) |
            Q(last_name__icontains=value) |
            Q(email__icontains=value)
        )


class CollaboratorViewSet(viewsets.ModelViewSet):
    """
    ViewSet for collaborators.

    Admins manage every record; a collaborator can read their own.
    """

    queryset = Collaborator.objects.all()
    serializer_class = CollaboratorSerializer
    permission_classes = [IsAuthenticated, IsAdministratorOrReadOnly]
    filterset_class = CollaboratorFilter
    filter_backends = [
        django_filters.DjangoFilterBackend,
        filters.OrderingFilter
    ]
    ordering_fields = ['last_name', 'first_name', 'created_at']
    ordering = ['last_name', 'first_name']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if is_admin(user):
            return queryset
        collaborator_id = get_collaborator_id(user)
        if not collaborator_id:
            return queryset.none()
        return queryset.filter(id=collaborator_id)

    @action(detail=True, methods=['get'])
    def songs(self, request, pk=None):
        """Songs this collaborator is credited on."""
        collaborator = self.get_object()
        songs = Song.objects.filter(song_collaborators__collaborator=collaborator).distinct()
        return Response(SongListSerializer(songs, many=True).data)


class PublishingEntityViewSet(viewsets.ModelViewSet):
    """ViewSet for publishing entities."""

    queryset = PublishingEntity.objects.all()
    serializer_class = PublishingEntitySerializer
    permission_classes = [IsAuthenticated, IsAdministratorOrReadOnly]
    filter_backends = [
        django_filters.DjangoFilterBackend,
        filters.SearchFilter,
    ]
    filterset_fields = ['is_internal']
    search_fields = ['name', 'contact_name', 'contact_email']


@api_view(['GET'])
def catalog_search(request):
    """
    Look a track up on Spotify by ISRC.

    GET /catalog/search/?isrc=US-S1Z-99-00001
    """
    isrc = (request.query_params.get('isrc') or '').strip()
    if not isrc:
        return Response({'error': 'isrc is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        match = SpotifyClient().search_track_by_isrc(isrc)
    except SpotifyConfigurationError as e:
        logger.error(f"Catalog search unavailable: {e}")
        return Response({'error': 'Catalog search is not configured'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except requests.RequestException as e:
        logger.error(f"Catalog search failed for ISRC {isrc}: {e}", exc_info=True)
        return Response(
            {'error': 'Failed to search catalog', 'details': str(e)},
            status=status.HTTP_502_BAD_GATEWAY
        )

    if match is None:
        return Response({'error': 'No track found for this ISRC'}, status=status.HTTP_404_NOT_FOUND)
    return Response(match)

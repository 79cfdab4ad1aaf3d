from rest_framework import serializers

from rights.roles import ASSIGNABLE_ROLES, ROLE_CHOICES, get_contract_type
from rights.serializers import OwnershipPercentageField, percentage_field
from .models import Collaborator, PublishingEntity, Song, SongCollaborator, SongPublishingEntity


class CollaboratorSerializer(serializers.ModelSerializer):
    """Serializer for Collaborator model."""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Collaborator
        fields = [
            'id', 'first_name', 'middle_name', 'last_name', 'full_name',
            'email', 'phone', 'address', 'capable_roles',
            'pro_affiliation', 'ipi_number', 'tax_id', 'publishing_company',
            'manager_name', 'manager_email', 'manager_phone',
            'royalty_account_info', 'notes', 'status',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_capable_roles(self, value):
        """At least one role; label is system-only and cannot be listed."""
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError('At least one capable role is required.')
        invalid = [role for role in value if role not in ASSIGNABLE_ROLES]
        if invalid:
            raise serializers.ValidationError(
                f"Invalid roles: {', '.join(str(role) for role in invalid)}. "
                f"Allowed roles are: {', '.join(ASSIGNABLE_ROLES)}"
            )
        # Keep order, drop repeats
        return list(dict.fromkeys(value))

    def validate_pro_affiliation(self, value):
        return value.upper() if value else value

    def validate_email(self, value):
        return value or None


class CollaboratorBriefSerializer(serializers.ModelSerializer):

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Collaborator
        fields = ['id', 'full_name', 'email', 'pro_affiliation', 'capable_roles', 'status']


class PublishingEntitySerializer(serializers.ModelSerializer):
    """Serializer for PublishingEntity model."""

    class Meta:
        model = PublishingEntity
        fields = [
            'id', 'name', 'is_internal', 'contact_name', 'contact_email',
            'pro_affiliation', 'ipi_number', 'address', 'notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_pro_affiliation(self, value):
        return value.upper() if value else value


class SongCollaboratorSerializer(serializers.ModelSerializer):
    """A role held on a song, with ownership shown as percentages."""

    collaborator = CollaboratorBriefSerializer(read_only=True)
    publishing_ownership = OwnershipPercentageField()
    master_ownership = OwnershipPercentageField()
    contract_type = serializers.SerializerMethodField()

    class Meta:
        model = SongCollaborator
        fields = [
            'id', 'song', 'collaborator', 'role_in_song',
            'publishing_ownership', 'master_ownership', 'contract_type',
            'created_at'
        ]
        read_only_fields = fields

    def get_contract_type(self, obj):
        return get_contract_type(obj.role_in_song)


class SongPublishingEntitySerializer(serializers.ModelSerializer):

    publishing_entity = PublishingEntitySerializer(read_only=True)
    ownership_percentage = OwnershipPercentageField()

    class Meta:
        model = SongPublishingEntity
        fields = ['id', 'song', 'publishing_entity', 'ownership_percentage', 'created_at']
        read_only_fields = fields


class SongListSerializer(serializers.ModelSerializer):
    """Light serializer for Song listing."""

    collaborators_count = serializers.SerializerMethodField()

    class Meta:
        model = Song
        fields = [
            'id', 'title', 'isrc_code', 'iswc_code', 'catalog_number',
            'release_date', 'status', 'publishing_locked', 'master_locked',
            'collaborators_count', 'created_at'
        ]

    def get_collaborators_count(self, obj):
        return obj.song_collaborators.count()


class SongDetailSerializer(serializers.ModelSerializer):
    """Detailed serializer for Song with its ledgers."""

    song_collaborators = SongCollaboratorSerializer(many=True, read_only=True)
    song_publishing_entities = SongPublishingEntitySerializer(many=True, read_only=True)
    label_master_share = OwnershipPercentageField()

    class Meta:
        model = Song
        fields = [
            'id', 'title', 'isrc_code', 'iswc_code', 'catalog_number',
            'release_date', 'pro_work_registration_number',
            'publishing_admin', 'master_owner', 'genre', 'sub_genre',
            'duration', 'recording_date', 'recording_location', 'notes', 'status',
            'publishing_locked', 'publishing_locked_at',
            'master_locked', 'master_locked_at', 'label_master_share',
            'song_collaborators', 'song_publishing_entities',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'publishing_locked', 'publishing_locked_at',
            'master_locked', 'master_locked_at',
            'created_at', 'updated_at'
        ]


class SongCreateUpdateSerializer(serializers.ModelSerializer):
    """Song metadata writes. Lock fields and shares change only through the split workflow."""

    class Meta:
        model = Song
        fields = [
            'id', 'title', 'isrc_code', 'iswc_code', 'catalog_number',
            'release_date', 'pro_work_registration_number',
            'publishing_admin', 'master_owner', 'genre', 'sub_genre',
            'duration', 'recording_date', 'recording_location', 'notes', 'status'
        ]

    def validate_isrc_code(self, value):
        return value or None

    def validate_catalog_number(self, value):
        return value or None


class AddSongCollaboratorSerializer(serializers.Serializer):
    """Body of POST /songs/{id}/collaborators/."""
    collaboratorId = serializers.IntegerField()
    rolesInSong = serializers.ListField(
        child=serializers.ChoiceField(choices=ROLE_CHOICES),
        min_length=1
    )
    publishingOwnership = percentage_field(required=False, allow_null=True)
    masterOwnership = percentage_field(required=False, allow_null=True)

    def validate_rolesInSong(self, value):
        return list(dict.fromkeys(value))


class PublishingEntityShareSerializer(serializers.Serializer):
    publishingEntityId = serializers.IntegerField()
    ownershipPercentage = percentage_field()


class ReplacePublishingEntitiesSerializer(serializers.Serializer):
    """Body of POST /songs/{id}/publishing-entities/."""
    entities = PublishingEntityShareSerializer(many=True)


class LabelShareSerializer(serializers.Serializer):
    """Body of POST /songs/{id}/label-share/."""
    labelMasterShare = percentage_field()

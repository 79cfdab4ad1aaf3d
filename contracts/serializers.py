from rest_framework import serializers

from .contract_types import CONTRACT_TYPE_CHOICES, get_contract_type_label
from .models import Contract


class ContractSerializer(serializers.ModelSerializer):
    """Serializer for Contract model."""
    song_title = serializers.CharField(source='song.title', read_only=True)
    collaborator_name = serializers.CharField(source='collaborator.full_name', read_only=True)
    role_in_song = serializers.CharField(source='song_collaborator.role_in_song', read_only=True)
    template_type_label = serializers.SerializerMethodField()

    class Meta:
        model = Contract
        fields = [
            'id', 'song', 'song_title', 'collaborator', 'collaborator_name',
            'song_collaborator', 'role_in_song', 'template_type', 'template_type_label',
            'esignature_status', 'esignature_doc_id', 'signer_email', 'signed_at',
            'error_message', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_template_type_label(self, obj):
        return get_contract_type_label(obj.template_type)


class ContractGenerationSerializer(serializers.Serializer):
    """Body of POST /contracts/generate/."""
    songId = serializers.IntegerField()
    songCollaboratorId = serializers.IntegerField()
    contractType = serializers.ChoiceField(choices=CONTRACT_TYPE_CHOICES)


class SendForSignatureSerializer(serializers.Serializer):
    draft = serializers.BooleanField(required=False, default=False)

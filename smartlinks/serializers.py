from django.db import transaction
from django.urls import reverse
from rest_framework import serializers

from .models import SmartLink, SmartLinkDestination


class SmartLinkDestinationSerializer(serializers.ModelSerializer):
    """Serializer for SmartLinkDestination model."""

    class Meta:
        model = SmartLinkDestination
        fields = ['id', 'service_key', 'label', 'url', 'sort_order']
        read_only_fields = ['id']


class SmartLinkSerializer(serializers.ModelSerializer):
    """
    Smart link with its destinations.

    Destinations are replaced as a whole when given on update and left
    untouched when omitted.
    """

    destinations = SmartLinkDestinationSerializer(many=True, required=False)
    song_title = serializers.CharField(source='song.title', read_only=True)

    class Meta:
        model = SmartLink
        fields = [
            'id', 'song', 'song_title', 'slug', 'title', 'description', 'image_url',
            'is_active', 'destinations', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_destinations(self, value):
        keys = [destination['service_key'] for destination in value]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise serializers.ValidationError(f"Duplicate services: {', '.join(duplicates)}")
        return value

    @transaction.atomic
    def create(self, validated_data):
        destinations = validated_data.pop('destinations', [])
        smart_link = SmartLink.objects.create(**validated_data)
        for destination in destinations:
            SmartLinkDestination.objects.create(smart_link=smart_link, **destination)
        return smart_link

    @transaction.atomic
    def update(self, instance, validated_data):
        destinations = validated_data.pop('destinations', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if destinations is not None:
            instance.destinations.all().delete()
            for destination in destinations:
                SmartLinkDestination.objects.create(smart_link=instance, **destination)

        return instance


class PublicSmartLinkSerializer(serializers.ModelSerializer):
    """What fans see: no target URLs, clicks go through the redirect endpoint."""

    destinations = serializers.SerializerMethodField()

    class Meta:
        model = SmartLink
        fields = ['id', 'slug', 'title', 'description', 'image_url', 'destinations']
        read_only_fields = fields

    def get_destinations(self, obj):
        return [
            {
                'id': destination.id,
                'service_key': destination.service_key,
                'label': destination.label,
                'redirect_url': reverse('smart-link-redirect', args=[obj.id, destination.service_key]),
            }
            for destination in obj.destinations.all()
        ]

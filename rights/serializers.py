from decimal import Decimal

from rest_framework import serializers

from .percentages import format_percentage, fraction_to_percentage


def percentage_field(**kwargs):
    """A 0..100 percentage as entered in the admin UI."""
    return serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        **kwargs
    )


class SplitEntrySerializer(serializers.Serializer):
    songCollaboratorId = serializers.IntegerField()
    percentage = percentage_field()


class SaveSplitsSerializer(serializers.Serializer):
    """Body of POST /splits/publishing/ and POST /splits/master/."""
    songId = serializers.IntegerField()
    splits = SplitEntrySerializer(many=True)
    labelMasterShare = percentage_field(required=False, allow_null=True)

    def validated_splits(self):
        return [(entry['songCollaboratorId'], entry['percentage']) for entry in self.validated_data['splits']]


class LockActionSerializer(serializers.Serializer):
    """Body of PATCH /splits/publishing/ and PATCH /splits/master/."""
    songId = serializers.IntegerField()
    action = serializers.ChoiceField(choices=['lock', 'unlock'], default='lock')


class SongQuerySerializer(serializers.Serializer):
    songId = serializers.IntegerField()


class OwnershipPercentageField(serializers.Field):
    """Renders a stored 0..1 ownership fraction as a 0..100 percentage string."""

    def __init__(self, **kwargs):
        kwargs['read_only'] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        if value is None:
            return None
        return format_percentage(fraction_to_percentage(value))

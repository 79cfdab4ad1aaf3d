from rest_framework import serializers

from .models import EmailLog, EmailTemplate


class EmailTemplateSerializer(serializers.ModelSerializer):
    """Serializer for EmailTemplate model."""

    class Meta:
        model = EmailTemplate
        fields = [
            'id', 'name', 'subject', 'body_html', 'body_text',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']


class EmailLogListSerializer(serializers.ModelSerializer):
    """Lighter serializer for the email history list."""

    template_name = serializers.CharField(source='template.name', read_only=True, default=None)
    song_title = serializers.CharField(source='song.title', read_only=True, default=None)
    triggered_by_email = serializers.CharField(source='triggered_by.email', read_only=True, default=None)

    class Meta:
        model = EmailLog
        fields = [
            'id', 'subject', 'scope', 'bcc_mode', 'template', 'template_name',
            'song', 'song_title', 'recipient_count', 'triggered_by_email',
            'status', 'sent_at', 'created_at'
        ]
        read_only_fields = fields


class EmailLogSerializer(EmailLogListSerializer):
    """Full email log entry including bodies and recipients."""

    class Meta(EmailLogListSerializer.Meta):
        fields = EmailLogListSerializer.Meta.fields + [
            'body_html', 'body_text', 'recipients', 'error_message', 'updated_at'
        ]
        read_only_fields = fields


class SendEmailSerializer(serializers.Serializer):
    """Body of POST /emails/send/."""
    templateId = serializers.IntegerField(required=False, allow_null=True)
    subject = serializers.CharField(required=False, allow_blank=True, max_length=500)
    bodyHtml = serializers.CharField(required=False, allow_blank=True)
    bodyText = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    scope = serializers.ChoiceField(choices=EmailLog.SCOPE_CHOICES)
    songId = serializers.IntegerField(required=False, allow_null=True)
    collaboratorIds = serializers.ListField(
        child=serializers.IntegerField(), required=False, allow_null=True
    )
    bccMode = serializers.ChoiceField(choices=EmailLog.BCC_MODE_CHOICES, default='single_bcc')

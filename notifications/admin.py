from django.contrib import admin
from .models import EmailLog, EmailTemplate


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'subject', 'created_by', 'updated_at']
    search_fields = ['name', 'subject']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'subject_preview', 'scope', 'bcc_mode', 'recipient_count', 'status', 'created_at']
    list_filter = ['scope', 'bcc_mode', 'status', 'created_at']
    search_fields = ['subject', 'triggered_by__email']
    readonly_fields = ['created_at', 'updated_at', 'sent_at']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def subject_preview(self, obj):
        return obj.subject[:80] + '...' if len(obj.subject) > 80 else obj.subject
    subject_preview.short_description = 'Subject'

    fieldsets = (
        ('Message', {
            'fields': ('template', 'subject', 'body_html', 'body_text')
        }),
        ('Audience', {
            'fields': ('scope', 'bcc_mode', 'song', 'recipient_count', 'recipients')
        }),
        ('Delivery', {
            'fields': ('triggered_by', 'status', 'error_message', 'sent_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

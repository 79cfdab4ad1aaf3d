from django.contrib import admin

from .models import Contract


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ['id', 'song', 'collaborator', 'template_type', 'esignature_status', 'signed_at', 'created_at']
    list_filter = ['template_type', 'esignature_status', 'created_at']
    search_fields = ['song__title', 'collaborator__first_name', 'collaborator__last_name', 'esignature_doc_id']
    autocomplete_fields = ['song', 'collaborator']
    raw_id_fields = ['song_collaborator']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('song', 'collaborator', 'song_collaborator', 'template_type')
        }),
        ('Signature Information', {
            'fields': ('esignature_status', 'esignature_doc_id', 'signer_email', 'signed_at', 'error_message')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

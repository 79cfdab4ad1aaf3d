from django.contrib import admin
from .models import Collaborator, PublishingEntity, Song, SongCollaborator, SongPublishingEntity


class SongCollaboratorInline(admin.TabularInline):
    model = SongCollaborator
    extra = 0
    fields = ['collaborator', 'role_in_song', 'publishing_ownership', 'master_ownership']
    autocomplete_fields = ['collaborator']


class SongPublishingEntityInline(admin.TabularInline):
    model = SongPublishingEntity
    extra = 0
    fields = ['publishing_entity', 'ownership_percentage']
    autocomplete_fields = ['publishing_entity']


@admin.register(Song)
class SongAdmin(admin.ModelAdmin):
    list_display = ['title', 'catalog_number', 'isrc_code', 'status',
                    'publishing_locked', 'master_locked', 'created_at']
    list_filter = ['status', 'publishing_locked', 'master_locked']
    search_fields = ['title', 'isrc_code', 'iswc_code', 'catalog_number']
    # Lock state is owned by the split workflow
    readonly_fields = ['publishing_locked', 'publishing_locked_at', 'master_locked',
                       'master_locked_at', 'label_master_share', 'created_at', 'updated_at']
    inlines = [SongCollaboratorInline, SongPublishingEntityInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'status', 'catalog_number', 'isrc_code', 'iswc_code',
                       'release_date', 'pro_work_registration_number')
        }),
        ('Details', {
            'fields': ('publishing_admin', 'master_owner', 'genre', 'sub_genre', 'duration',
                       'recording_date', 'recording_location', 'notes'),
            'classes': ('collapse',)
        }),
        ('Splits', {
            'fields': ('publishing_locked', 'publishing_locked_at', 'master_locked',
                       'master_locked_at', 'label_master_share')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Collaborator)
class CollaboratorAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'email', 'pro_affiliation', 'ipi_number', 'status', 'created_at']
    list_filter = ['status', 'pro_affiliation']
    search_fields = ['first_name', 'last_name', 'email', 'ipi_number']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PublishingEntity)
class PublishingEntityAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_internal', 'pro_affiliation', 'ipi_number', 'contact_email']
    list_filter = ['is_internal', 'pro_affiliation']
    search_fields = ['name', 'contact_name', 'contact_email']

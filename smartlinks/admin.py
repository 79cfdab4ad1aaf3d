from django.contrib import admin
from .models import SmartLink, SmartLinkClick, SmartLinkDestination


class SmartLinkDestinationInline(admin.TabularInline):
    model = SmartLinkDestination
    extra = 0
    fields = ['service_key', 'label', 'url', 'sort_order']


@admin.register(SmartLink)
class SmartLinkAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'song', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['title', 'slug', 'song__title']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [SmartLinkDestinationInline]


@admin.register(SmartLinkClick)
class SmartLinkClickAdmin(admin.ModelAdmin):
    list_display = ['smart_link', 'service_key', 'created_at']
    list_filter = ['service_key', 'created_at']
    readonly_fields = ['smart_link', 'service_key', 'user_agent', 'referrer', 'created_at']
    date_hierarchy = 'created_at'

from django.contrib import admin
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['title', 'city', 'market_sector', 'client', 'status', 'year', 'featured', 'created_at']
    list_filter = ['market_sector', 'status', 'featured', 'recent']
    search_fields = ['title', 'city', 'client', 'project_manager', 'building_type']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Project Information', {
            'fields': ('id', 'title', 'client', 'project_manager', 'status', 'year')
        }),
        ('Location', {
            'fields': ('address', 'city', 'latitude', 'longitude')
        }),
        ('Classification', {
            'fields': ('market_sector', 'building_type', 'featured', 'recent')
        }),
        ('Description', {
            'fields': ('description', 'mini_description', 'image_urls')
        }),
        ('Financials', {
            'fields': ('compensation',),
            'classes': ('collapse',)
        }),
        ('Audit Information', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

from django.contrib import admin

from .models import Booking, EscrowItem, Project, SavedSearch, Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['title', 'provider', 'category', 'hourly_rate', 'status', 'created_at']
    list_filter = ['status', 'category']
    search_fields = ['title', 'provider__username', 'provider__full_name']
    actions = ['suspend_services', 'activate_services']

    def suspend_services(self, request, queryset):
        updated = queryset.update(status=Service.Status.SUSPENDED)
        self.message_user(request, f'Suspended {updated} services.')
    suspend_services.short_description = 'Suspend selected services'

    def activate_services(self, request, queryset):
        updated = queryset.update(status=Service.Status.ACTIVE)
        self.message_user(request, f'Activated {updated} services.')
    activate_services.short_description = 'Activate selected services'


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['title', 'client', 'category', 'budget_hours', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['title', 'client__username']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['service', 'client', 'hours', 'status', 'created_at']
    list_filter = ['status']


@admin.register(EscrowItem)
class EscrowItemAdmin(admin.ModelAdmin):
    list_display = ['project_title', 'client', 'freelancer', 'amount', 'currency', 'status', 'auto_release_date']
    list_filter = ['status', 'currency']
    search_fields = ['project_title', 'client__full_name', 'freelancer__full_name']
    readonly_fields = ['resolved_at', 'resolved_by', 'created_at', 'updated_at']


@admin.register(SavedSearch)
class SavedSearchAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'category', 'notifications', 'is_public', 'result_count', 'last_run']
    list_filter = ['category', 'notifications', 'is_public']
    search_fields = ['name', 'query', 'user__username']

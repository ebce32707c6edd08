from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class WaqtiUserAdmin(UserAdmin):
    list_display = ['username', 'email', 'full_name', 'role', 'status', 'balance', 'email_verified', 'created_at']
    list_filter = ['role', 'status', 'email_verified', 'is_staff']
    search_fields = ['username', 'email', 'full_name', 'phone']
    fieldsets = UserAdmin.fieldsets + (
        ('Waqti', {
            'fields': ('full_name', 'phone', 'balance', 'role', 'status',
                       'email_verified', 'verification_email_sent_at', 'walkthrough_completed'),
        }),
    )
    actions = ['suspend_users', 'activate_users']

    def suspend_users(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).update(status=User.Status.SUSPENDED, is_active=False)
        self.message_user(request, f'Suspended {updated} users.')
    suspend_users.short_description = 'Suspend selected users'

    def activate_users(self, request, queryset):
        updated = queryset.update(status=User.Status.ACTIVE, is_active=True)
        self.message_user(request, f'Activated {updated} users.')
    activate_users.short_description = 'Activate selected users'

from django.contrib import admin

from .exceptions import ReviewError
from .models import FreelancerVerification, VerificationAttachment, VerificationReview
from .review import review_verification


class VerificationAttachmentInline(admin.TabularInline):
    model = VerificationAttachment
    extra = 0
    fields = ['kind', 'slot', 'original_name', 'content_type', 'size', 'file']
    readonly_fields = ['kind', 'slot', 'original_name', 'content_type', 'size', 'file']


class VerificationReviewInline(admin.TabularInline):
    model = VerificationReview
    extra = 0
    fields = ['decision', 'reviewer', 'comments', 'checklist', 'created_at']
    readonly_fields = ['decision', 'reviewer', 'comments', 'checklist', 'created_at']


@admin.register(FreelancerVerification)
class FreelancerVerificationAdmin(admin.ModelAdmin):
    list_display = ['username', 'user', 'status', 'admission_score', 'specialization', 'submitted_at']
    list_filter = ['status', 'specialization']
    search_fields = ['username', 'job_title', 'user__email', 'user__full_name']
    readonly_fields = ['steps', 'admission_score', 'submitted_at', 'reviewed_at', 'reviewed_by',
                       'created_at', 'updated_at']
    inlines = [VerificationAttachmentInline, VerificationReviewInline]
    actions = ['approve_selected']

    def approve_selected(self, request, queryset):
        approved = 0
        for verification in queryset:
            try:
                review_verification(verification, request.user, VerificationReview.Decision.APPROVED)
                approved += 1
            except ReviewError as exc:
                self.message_user(request, f'{verification}: {exc}', level='warning')
        self.message_user(request, f'Approved {approved} verifications.')
    approve_selected.short_description = 'Approve selected verifications'


@admin.register(VerificationReview)
class VerificationReviewAdmin(admin.ModelAdmin):
    list_display = ['verification', 'decision', 'reviewer', 'created_at']
    list_filter = ['decision']
    readonly_fields = ['created_at']

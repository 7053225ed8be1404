from django.contrib import admin, messages
from django.utils.html import format_html

from config.exceptions import ConflictError
from senders.models import SenderID
from senders.services import transition_sender_id


@admin.register(SenderID)
class SenderIDAdmin(admin.ModelAdmin):
    list_display = ['sender_id', 'user', 'company_name', 'status_badge', 'submitted_at', 'approved_at', 'rejected_at']
    list_filter = ['status']
    search_fields = ['sender_id', 'user__email', 'company_name']
    readonly_fields = [
        'id', 'user', 'sender_id', 'status', 'submitted_at', 'approved_at', 'rejected_at',
        'approved_by', 'updated_at',
    ]
    actions = ['approve_selected', 'reject_selected']

    fieldsets = (
        ('Request', {
            'fields': ('id', 'user', 'sender_id', 'company_name', 'purpose', 'sample_message'),
        }),
        ('Review', {
            'fields': ('status', 'admin_notes', 'approved_by', 'approved_at', 'rejected_at'),
        }),
        ('Timestamps', {
            'fields': ('submitted_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def status_badge(self, obj):
        colors = {'PENDING': '#d97706', 'APPROVED': '#059669', 'REJECTED': '#dc2626'}
        return format_html(
            '<span style="color:{}; font-weight:bold;">{}</span>',
            colors.get(obj.status, '#6b7280'), obj.status,
        )
    status_badge.short_description = 'Status'

    def _transition(self, request, queryset, target):
        done = 0
        for sender in queryset:
            try:
                transition_sender_id(sender.pk, target, request.user)
                done += 1
            except ConflictError as e:
                self.message_user(request, f'{sender.sender_id}: {e.detail}', level=messages.WARNING)
        if done:
            self.message_user(request, f'{done} sender ID(s) {target.lower()}.')

    @admin.action(description='Approve selected sender IDs')
    def approve_selected(self, request, queryset):
        self._transition(request, queryset, SenderID.STATUS_APPROVED)

    @admin.action(description='Reject selected sender IDs')
    def reject_selected(self, request, queryset):
        self._transition(request, queryset, SenderID.STATUS_REJECTED)

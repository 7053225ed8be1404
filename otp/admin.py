from django.contrib import admin

from otp.models import OTPRequest


@admin.register(OTPRequest)
class OTPRequestAdmin(admin.ModelAdmin):
    list_display = ['phone', 'user', 'sender', 'status', 'attempts', 'expires_at', 'created_at']
    list_filter = ['status']
    search_fields = ['phone', 'user__email', 'reference_id']
    readonly_fields = [
        'id', 'user', 'sender', 'sms', 'phone', 'code_hash', 'attempts', 'max_attempts',
        'reference_id', 'expires_at', 'verified_at', 'created_at',
    ]

    def has_add_permission(self, request):
        return False

from django.contrib import admin

from gateway.models import APIKey, ClientApiRoute, SmsMessage


@admin.register(APIKey)
class APIKeyAdmin(admin.ModelAdmin):
    list_display = ['label', 'user', 'masked_key', 'is_active', 'rate_limit_per_hour', 'last_used_at', 'created_at']
    list_filter = ['is_active']
    search_fields = ['label', 'user__email']
    readonly_fields = ['id', 'key', 'last_used_at', 'created_at']
    actions = ['revoke_selected']

    @admin.action(description='Revoke selected keys')
    def revoke_selected(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'{count} key(s) revoked.')


@admin.register(ClientApiRoute)
class ClientApiRouteAdmin(admin.ModelAdmin):
    list_display = ['route', 'mapped_to', 'user', 'rate_limit', 'created_at']
    list_filter = ['mapped_to']
    search_fields = ['route', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(SmsMessage)
class SmsMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'sender', 'segments', 'cost', 'status', 'created_at', 'sent_at']
    list_filter = ['status']
    search_fields = ['user__email', 'sender__sender_id', 'provider_ref', 'wallet_reference']
    readonly_fields = [f.name for f in SmsMessage._meta.fields]

    def has_add_permission(self, request):
        return False

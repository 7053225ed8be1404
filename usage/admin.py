from django.contrib import admin
from import_export import resources
from import_export.admin import ExportMixin

from usage.models import UsageRecord


class UsageRecordResource(resources.ModelResource):
    class Meta:
        model = UsageRecord
        fields = (
            'id', 'user__email', 'api_key__label', 'endpoint', 'method', 'status_code',
            'response_time_ms', 'request_size_bytes', 'response_size_bytes', 'cost',
            'request_id', 'ip_address', 'timestamp',
        )
        export_order = fields


@admin.register(UsageRecord)
class UsageRecordAdmin(ExportMixin, admin.ModelAdmin):
    """Read-only: usage rows are billing evidence. Export to CSV/XLSX for invoicing."""
    resource_classes = [UsageRecordResource]
    list_display = ['timestamp', 'user', 'endpoint', 'method', 'status_code', 'response_time_ms', 'cost']
    list_filter = ['method', 'status_code', 'endpoint']
    search_fields = ['user__email', 'endpoint', 'request_id']
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

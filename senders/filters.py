import django_filters

from senders.models import SenderID


class SenderIDFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=SenderID.STATUS_CHOICES)
    user = django_filters.UUIDFilter(field_name='user_id')
    search = django_filters.CharFilter(field_name='sender_id', lookup_expr='icontains')
    submitted_after = django_filters.IsoDateTimeFilter(field_name='submitted_at', lookup_expr='gte')

    class Meta:
        model = SenderID
        fields = ['status', 'user', 'search', 'submitted_after']

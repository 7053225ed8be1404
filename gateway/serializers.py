from rest_framework import serializers

from gateway.models import APIKey, ClientApiRoute, SmsMessage


class SmsMessageSerializer(serializers.ModelSerializer):
    sender_id = serializers.CharField(source='sender.sender_id', read_only=True)

    class Meta:
        model = SmsMessage
        fields = [
            'id', 'sender_id', 'recipients', 'message', 'segments', 'cost', 'status',
            'provider_ref', 'error_message', 'created_at', 'sent_at',
        ]
        read_only_fields = fields


class CalculateCostSerializer(serializers.Serializer):
    message = serializers.CharField(trim_whitespace=False)
    recipients = serializers.IntegerField(min_value=1, required=False, default=1)


class ClientApiRouteSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientApiRoute
        fields = ['id', 'route', 'mapped_to', 'rate_limit', 'created_at', 'updated_at']
        read_only_fields = fields


class ClientApiRouteCreateSerializer(serializers.Serializer):
    route = serializers.CharField(max_length=200)
    mapped_to = serializers.CharField(max_length=100)
    rate_limit = serializers.IntegerField(min_value=1, max_value=100000, required=False, default=100)


class APIKeySerializer(serializers.ModelSerializer):
    key = serializers.CharField(source='masked_key', read_only=True)

    class Meta:
        model = APIKey
        fields = [
            'id', 'label', 'key', 'permissions', 'rate_limit_per_hour', 'is_active',
            'last_used_at', 'expires_at', 'created_at',
        ]
        read_only_fields = fields


class APIKeyCreatedSerializer(APIKeySerializer):
    """Returned once, at creation: the only time the full key is shown."""
    key = serializers.CharField(read_only=True)


class APIKeyCreateSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=100, required=False, default='Default')
    permissions = serializers.ListField(child=serializers.CharField(max_length=50), required=False, default=list)
    rate_limit_per_hour = serializers.IntegerField(min_value=1, max_value=100000, required=False, default=1000)
    expires_at = serializers.DateTimeField(required=False, allow_null=True, default=None)

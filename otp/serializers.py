from rest_framework import serializers

from otp.models import OTPRequest


class OTPGenerateSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)
    sender_id = serializers.CharField(allow_blank=True, trim_whitespace=False, required=False, default='')
    code_length = serializers.IntegerField(min_value=4, max_value=10, required=False, allow_null=True, default=None)
    expiry_minutes = serializers.IntegerField(min_value=1, max_value=60, required=False, allow_null=True, default=None)
    message_template = serializers.CharField(max_length=300, required=False, allow_blank=True, default='')
    reference_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class OTPVerifySerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)
    code = serializers.CharField(max_length=10)


class OTPRequestSerializer(serializers.ModelSerializer):
    otp_id = serializers.UUIDField(source='id', read_only=True)
    sender_id = serializers.CharField(source='sender.sender_id', read_only=True)
    message_id = serializers.UUIDField(source='sms_id', read_only=True, allow_null=True)
    cost = serializers.DecimalField(source='sms.cost', max_digits=14, decimal_places=4, read_only=True)

    class Meta:
        model = OTPRequest
        fields = ['otp_id', 'phone', 'sender_id', 'status', 'reference_id', 'expires_at',
                  'verified_at', 'message_id', 'cost', 'created_at']
        read_only_fields = fields

from rest_framework import serializers

from senders.models import SenderID


class SenderIDSubmitSerializer(serializers.Serializer):
    senderId = serializers.CharField(allow_blank=True, trim_whitespace=False, required=False, default='')
    purpose = serializers.CharField(required=False, allow_blank=True, default='')
    sampleMessage = serializers.CharField(required=False, allow_blank=True, default='')
    companyName = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True, default=None)


class SenderIDStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[SenderID.STATUS_APPROVED, SenderID.STATUS_REJECTED])
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class SenderIDSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)
    approved_by_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = SenderID
        fields = [
            'id', 'user_id', 'sender_id', 'purpose', 'sample_message', 'company_name',
            'status', 'submitted_at', 'approved_at', 'rejected_at', 'approved_by_id',
            'admin_notes', 'updated_at',
        ]
        read_only_fields = fields


class AdminSenderIDSerializer(SenderIDSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta(SenderIDSerializer.Meta):
        fields = SenderIDSerializer.Meta.fields + ['user_email']
        read_only_fields = fields

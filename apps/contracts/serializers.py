from rest_framework import serializers

from .models import Contract, ContractReminder, ContractStatus, Template, TemplateType


class ContractClientSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    company = serializers.CharField()


class ContractListSerializer(serializers.ModelSerializer):
    client = ContractClientSerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)

    class Meta:
        model = Contract
        fields = [
            'id',
            'name',
            'status',
            'client',
            'project',
            'project_name',
            'sent_at',
            'signed_at',
            'expires_at',
            'created_at',
        ]
        read_only_fields = fields


class ContractSerializer(serializers.ModelSerializer):
    """Full contract for the owner, including the signing audit trail."""

    client = ContractClientSerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)

    class Meta:
        model = Contract
        fields = [
            'id',
            'name',
            'content',
            'status',
            'client',
            'project',
            'project_name',
            'template',
            'sign_token',
            'sent_at',
            'viewed_at',
            'signed_at',
            'declined_at',
            'expires_at',
            'decline_reason',
            'client_signature',
            'client_signed_name',
            'client_signed_email',
            'client_ip',
            'client_user_agent',
            'developer_signature',
            'developer_signed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ContractCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    client_id = serializers.UUIDField()
    project_id = serializers.UUIDField(required=False, allow_null=True)
    template_id = serializers.UUIDField(required=False, allow_null=True)
    content = serializers.CharField()
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class ContractFromTemplateSerializer(serializers.Serializer):
    template_id = serializers.UUIDField()
    client_id = serializers.UUIDField()
    project_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=200)
    variables = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class ContractUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    content = serializers.CharField(required=False)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class ContractFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ContractStatus.choices, required=False)
    client = serializers.UUIDField(required=False)
    project = serializers.UUIDField(required=False)


class DeveloperSignSerializer(serializers.Serializer):
    signature = serializers.CharField(help_text='Data URL of a drawn signature, or a typed name')


class ReminderRequestSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class ContractReminderSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContractReminder
        fields = ['id', 'reminder_type', 'custom_message', 'sent_to_email', 'sent_to_name', 'sent_at']
        read_only_fields = fields


class SendResultSerializer(serializers.Serializer):
    contract = ContractSerializer()
    email_sent = serializers.BooleanField()


class SignContractSerializer(serializers.Serializer):
    signature = serializers.CharField()
    signed_name = serializers.CharField(max_length=200)
    signed_email = serializers.EmailField()
    agreed_to_terms = serializers.BooleanField()


class DeclineContractSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


# =============================================================================
# Templates
# =============================================================================

class TemplateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Template
        fields = [
            'id',
            'type',
            'name',
            'description',
            'content',
            'is_default',
            'is_system',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_system', 'created_at', 'updated_at']


class TemplateUpdateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TemplateType.choices, required=False)
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    content = serializers.CharField(required=False)
    is_default = serializers.BooleanField(required=False)


class TemplateFilterSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TemplateType.choices, required=False)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()

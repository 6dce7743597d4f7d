from rest_framework import serializers

from .models import Client, ClientNote, ClientStatus
from .services import calculate_payment_behavior


class ClientSerializer(serializers.ModelSerializer):
    """Client for list and write responses."""

    project_count = serializers.SerializerMethodField()
    follow_up_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Client
        fields = [
            'id',
            'name',
            'email',
            'company',
            'phone',
            'address',
            'notes',
            'status',
            'follow_up_date',
            'follow_up_note',
            'follow_up_overdue',
            'project_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_project_count(self, obj):
        annotated = getattr(obj, 'project_count', None)
        if annotated is not None:
            return annotated
        return obj.projects.count()


class ClientDetailSerializer(ClientSerializer):
    """Client detail with payment behavior rating."""

    payment_behavior = serializers.SerializerMethodField()

    class Meta(ClientSerializer.Meta):
        fields = ClientSerializer.Meta.fields + ['payment_behavior']
        read_only_fields = fields

    def get_payment_behavior(self, obj):
        return calculate_payment_behavior(obj)


class ClientWriteSerializer(serializers.Serializer):
    """Input for create (name and email required) and update (partial)."""

    name = serializers.CharField(max_length=200)
    email = serializers.EmailField(max_length=255)
    company = serializers.CharField(max_length=200, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ClientStatus.choices, required=False)


class ClientFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ClientStatus.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class ClientNoteSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source='author.get_display_name', read_only=True)

    class Meta:
        model = ClientNote
        fields = ['id', 'content', 'author_name', 'created_at']
        read_only_fields = ['id', 'author_name', 'created_at']


class FollowUpSerializer(serializers.Serializer):
    follow_up_date = serializers.DateField()
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class SnoozeSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=365, required=False, default=1)


class StatusCountsSerializer(serializers.Serializer):
    all = serializers.IntegerField()
    lead = serializers.IntegerField()
    active = serializers.IntegerField()
    inactive = serializers.IntegerField()


class PaymentBehaviorSerializer(serializers.Serializer):
    rating = serializers.ChoiceField(choices=['excellent', 'good', 'slow', 'poor', 'new'])
    average_days = serializers.FloatField(allow_null=True)
    paid_invoice_count = serializers.IntegerField()

from rest_framework import serializers

from .models import Project, Milestone, ProjectStatus, MilestoneStatus


class MilestoneSerializer(serializers.ModelSerializer):

    class Meta:
        model = Milestone
        fields = [
            'id',
            'project',
            'name',
            'description',
            'amount',
            'due_date',
            'status',
            'completed_at',
            'order',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MilestoneInputSerializer(serializers.Serializer):
    """Milestone fields accepted on create and update."""

    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    amount = serializers.IntegerField(min_value=0, required=False, default=0, help_text='Amount in cents')
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class MilestoneUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.IntegerField(min_value=0, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=MilestoneStatus.choices, required=False)


class MilestoneStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MilestoneStatus.choices)


class ReorderMilestonesSerializer(serializers.Serializer):
    milestone_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class ProjectClientSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    company = serializers.CharField()


class ProjectListSerializer(serializers.ModelSerializer):
    client = ProjectClientSerializer(read_only=True)
    milestone_count = serializers.SerializerMethodField()
    completed_milestone_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id',
            'name',
            'status',
            'client',
            'start_date',
            'end_date',
            'total_amount',
            'milestone_count',
            'completed_milestone_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_milestone_count(self, obj):
        return len(obj.milestones.all())

    def get_completed_milestone_count(self, obj):
        done = {MilestoneStatus.COMPLETED, MilestoneStatus.INVOICED, MilestoneStatus.PAID}
        return sum(1 for m in obj.milestones.all() if m.status in done)


class ProjectSerializer(ProjectListSerializer):
    """Project detail with ordered milestones and portal info."""

    milestones = serializers.SerializerMethodField()
    has_password = serializers.SerializerMethodField()

    class Meta(ProjectListSerializer.Meta):
        fields = ProjectListSerializer.Meta.fields + [
            'description',
            'public_id',
            'has_password',
            'milestones',
        ]
        read_only_fields = fields

    def get_milestones(self, obj):
        ordered = sorted(obj.milestones.all(), key=lambda m: (m.order, m.created_at))
        return MilestoneSerializer(ordered, many=True).data

    def get_has_password(self, obj):
        return bool(obj.public_password)


class ProjectCreateSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=ProjectStatus.choices, required=False, default=ProjectStatus.DRAFT)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    public_password = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    milestones = MilestoneInputSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs


class ProjectUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ProjectStatus.choices, required=False)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    public_password = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        help_text='Empty string removes the portal password'
    )


class ProjectFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProjectStatus.choices, required=False)
    client = serializers.UUIDField(required=False)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()

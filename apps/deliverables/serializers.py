from rest_framework import serializers

from .models import Deliverable
from .services import describe


class DeliverableMilestoneSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class DeliverableSerializer(serializers.ModelSerializer):
    milestone = DeliverableMilestoneSerializer(read_only=True)
    extension = serializers.SerializerMethodField()
    category = serializers.SerializerMethodField()
    formatted_size = serializers.SerializerMethodField()

    class Meta:
        model = Deliverable
        fields = [
            'id',
            'project',
            'milestone',
            'file_name',
            'file_url',
            'file_key',
            'file_size',
            'formatted_size',
            'extension',
            'category',
            'mime_type',
            'version',
            'version_notes',
            'previous_version',
            'github_url',
            'download_count',
            'last_downloaded_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_extension(self, obj):
        return describe(obj)['extension']

    def get_category(self, obj):
        return describe(obj)['category']

    def get_formatted_size(self, obj):
        return describe(obj)['formatted_size']


class DeliverableDetailSerializer(DeliverableSerializer):
    versions = serializers.SerializerMethodField()

    class Meta(DeliverableSerializer.Meta):
        fields = DeliverableSerializer.Meta.fields + ['versions']
        read_only_fields = fields

    def get_versions(self, obj):
        versions = self.context.get('versions', [])
        return DeliverableSerializer(versions, many=True).data


class DeliverableFilterSerializer(serializers.Serializer):
    project = serializers.UUIDField()
    milestone = serializers.UUIDField(required=False)


class UploadUrlRequestSerializer(serializers.Serializer):
    project_id = serializers.UUIDField()
    file_name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=150)
    file_size = serializers.IntegerField(min_value=0)


class UploadUrlSerializer(serializers.Serializer):
    upload_url = serializers.URLField()
    file_url = serializers.URLField()
    key = serializers.CharField()
    expires_in = serializers.IntegerField()


class DeliverableCreateSerializer(serializers.Serializer):
    project_id = serializers.UUIDField()
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    file_name = serializers.CharField(max_length=255)
    file_url = serializers.URLField(max_length=1000)
    file_key = serializers.CharField(max_length=500, required=False, allow_blank=True)
    file_size = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    mime_type = serializers.CharField(max_length=150, required=False, allow_blank=True)
    version_notes = serializers.CharField(required=False, allow_blank=True)
    github_url = serializers.URLField(max_length=500, required=False, allow_blank=True)


class DeliverableVersionSerializer(serializers.Serializer):
    file_url = serializers.URLField(max_length=1000)
    file_key = serializers.CharField(max_length=500, required=False, allow_blank=True)
    file_size = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    mime_type = serializers.CharField(max_length=150, required=False, allow_blank=True)
    version_notes = serializers.CharField(required=False, allow_blank=True)


class GithubLinkSerializer(serializers.Serializer):
    project_id = serializers.UUIDField()
    github_url = serializers.URLField(max_length=500)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)


class DeliverableUpdateSerializer(serializers.Serializer):
    version_notes = serializers.CharField(required=False, allow_blank=True)
    milestone_id = serializers.UUIDField(required=False, allow_null=True)
    github_url = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()

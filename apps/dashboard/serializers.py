from rest_framework import serializers

from apps.projects.models import Milestone


class StatsSerializer(serializers.Serializer):
    active_projects = serializers.IntegerField()
    total_clients = serializers.IntegerField()
    outstanding_invoices = serializers.IntegerField()
    outstanding_amount = serializers.IntegerField(help_text='Balance due across unpaid invoices, in cents')
    paid_this_month = serializers.IntegerField(help_text='Payments received since the first of the month, in cents')
    currency = serializers.CharField()


class UpcomingMilestoneSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(source='project.id', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    client_name = serializers.CharField(source='project.client.name', read_only=True)

    class Meta:
        model = Milestone
        fields = ['id', 'name', 'amount', 'due_date', 'status', 'project_id', 'project_name', 'client_name']
        read_only_fields = fields


class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')


class SearchResultSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=['client', 'project', 'invoice'])
    id = serializers.UUIDField()
    title = serializers.CharField()
    subtitle = serializers.CharField(allow_blank=True)
    score = serializers.IntegerField()

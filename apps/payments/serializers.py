from rest_framework import serializers


class ConnectStatusSerializer(serializers.Serializer):
    connected = serializers.BooleanField()
    account_id = serializers.CharField(allow_null=True)
    charges_enabled = serializers.BooleanField()
    payouts_enabled = serializers.BooleanField()
    details_submitted = serializers.BooleanField()
    requirements = serializers.JSONField(required=False, allow_null=True)
    error = serializers.CharField(required=False)


class LinkSerializer(serializers.Serializer):
    url = serializers.URLField()


class BalanceEntrySerializer(serializers.Serializer):
    amount = serializers.IntegerField()
    currency = serializers.CharField()


class BalanceSerializer(serializers.Serializer):
    available = BalanceEntrySerializer(many=True)
    pending = BalanceEntrySerializer(many=True)


class RefundSerializer(serializers.Serializer):
    REASONS = ['duplicate', 'fraudulent', 'requested_by_customer']

    payment_intent_id = serializers.CharField(max_length=255)
    amount = serializers.IntegerField(min_value=1, required=False)
    reason = serializers.ChoiceField(choices=REASONS, required=False)


class CheckoutRequestSerializer(serializers.Serializer):
    pay_token = serializers.CharField(max_length=21)
    amount = serializers.IntegerField(min_value=1, required=False, help_text='Amount in cents; defaults to the balance due')


class CheckoutSessionSerializer(serializers.Serializer):
    session_id = serializers.CharField()
    url = serializers.URLField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()

from rest_framework import serializers


class CreateIntentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()


class ConfirmPaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    payment_intent_id = serializers.CharField(max_length=255)


class ProcessPaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    payment_method_id = serializers.CharField(max_length=255)

# customers/api/serializers.py

from rest_framework import serializers

from customers.models import Customer
from customers.models.customer import normalize_phone, phone_validator


class CustomerSerializer(serializers.ModelSerializer):
    # Accepts free-form input; validated after normalization.
    phone = serializers.CharField(max_length=32)

    class Meta:
        model = Customer
        fields = ["id", "name", "phone", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name is required")
        return value

    def validate_phone(self, value):
        phone = normalize_phone(value)
        phone_validator(phone)
        return phone

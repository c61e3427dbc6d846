from rest_framework import serializers

from .models import Listing


class ListingSerializer(serializers.ModelSerializer):
    """Public representation; lifecycle fields are read-only and change via actions."""

    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    owner_username = serializers.ReadOnlyField(source="owner.username")

    class Meta:
        model = Listing
        fields = [
            "id",
            "owner",
            "owner_username",
            "owner_role",
            "title",
            "description",
            "listing_type",
            "price",
            "city",
            "area_name",
            "address",
            "property_type",
            "bedrooms",
            "bathrooms",
            "furnished",
            "amenities",
            "target_audience",
            "whatsapp_number",
            "contact_phone",
            "contact_email",
            "views",
            "featured",
            "verified",
            "status",
            "deleted_at",
            "purge_at",
            "version",
            "created_at",
        ]
        read_only_fields = [
            "owner_role",
            "views",
            "featured",
            "verified",
            "status",
            "deleted_at",
            "purge_at",
            "version",
            "created_at",
        ]

    def validate_title(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters.")
        return value

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def validate_amenities(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value


class TransitionRequestSerializer(serializers.Serializer):
    """Optional optimistic-concurrency token sent with an action."""

    version = serializers.IntegerField(required=False, min_value=0)

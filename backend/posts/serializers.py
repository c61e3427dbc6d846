from rest_framework import serializers

from .models import Post


class PostSerializer(serializers.ModelSerializer):
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    owner_username = serializers.ReadOnlyField(source="owner.username")
    approved_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Post
        fields = [
            "id",
            "owner",
            "owner_username",
            "owner_role",
            "title",
            "description",
            "post_type",
            "price",
            "city",
            "area_name",
            "whatsapp_number",
            "views",
            "status",
            "approved_by",
            "approved_at",
            "admin_note",
            "deleted_at",
            "purge_at",
            "version",
            "created_at",
        ]
        read_only_fields = [
            "owner_role",
            "views",
            "status",
            "approved_at",
            "admin_note",
            "deleted_at",
            "purge_at",
            "version",
            "created_at",
        ]

    def validate_title(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters.")
        return value


class ModerationRequestSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    version = serializers.IntegerField(required=False, min_value=0)

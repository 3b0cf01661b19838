from rest_framework import serializers


class ImageUploadSerializer(serializers.Serializer):
    """Multipart payload of the upload endpoints."""

    image = serializers.FileField()


class ImageReferenceSerializer(serializers.Serializer):
    message = serializers.CharField(read_only=True)
    image_url = serializers.CharField(read_only=True)

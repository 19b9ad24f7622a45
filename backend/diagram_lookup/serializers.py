"""DRF serializers that define the diagram lookup request/response contract."""
from rest_framework import serializers


class LookupQuerySerializer(serializers.Serializer):
    """Query string for a lookup; ``q`` is accepted as an alias."""
    query = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    q = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)

    def validate(self, attrs):
        query = attrs.get('query') or attrs.get('q')
        if not query:
            raise serializers.ValidationError('Query parameter "query" or "q" is required')
        return {'query': query}


class ImageResultSerializer(serializers.Serializer):
    """One ranked image."""
    title = serializers.CharField()
    thumbUrl = serializers.CharField(source='thumb_url')
    fullUrl = serializers.CharField(source='full_url')
    mime = serializers.CharField()
    author = serializers.CharField()
    license = serializers.CharField()
    licenseUrl = serializers.CharField(source='license_url', allow_blank=True)


class ResultBundleSerializer(serializers.Serializer):
    """Lookup response body."""
    query = serializers.CharField(source='original_query')
    images = ImageResultSerializer(many=True)
    total = serializers.IntegerField()
    ts = serializers.CharField(source='generated_at')


class ErrorSerializer(serializers.Serializer):
    """Error response body."""
    error = serializers.CharField()
    message = serializers.CharField()

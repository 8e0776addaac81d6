"""Serializers for the product catalog."""

from rest_framework import serializers

from .models import Product


def _image_value_to_url(value, *, request=None):
    """Return a usable URL for an ImageField value.

    Seeded products may store absolute URLs or static paths
    (e.g. ``/images/airpods.jpg``). Django's ImageField ``url`` property would
    prefix MEDIA_URL in that case, producing broken paths.

    This helper returns such values as-is and uses ``.url`` for real media files.
    """

    if not value:
        return None

    # `value` is typically an ImageFieldFile; its string form is the DB value.
    raw = str(value)
    if raw.startswith(('http://', 'https://', '/')):
        return raw

    try:
        url = value.url
    except ValueError:
        return raw

    if request is not None:
        return request.build_absolute_uri(url)

    return url


class ProductSerializer(serializers.ModelSerializer):
    """Catalog product. ``image`` is accepted as an upload and rendered as a URL."""

    image = serializers.ImageField(required=False, allow_empty_file=False, use_url=False)
    image_url = serializers.SerializerMethodField()
    user = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'user', 'name', 'image', 'image_url', 'brand', 'category',
            'description', 'rating', 'num_reviews', 'price', 'count_in_stock',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['rating', 'num_reviews', 'created_at', 'updated_at']

    def get_image_url(self, obj):
        request = self.context.get('request')
        return _image_value_to_url(obj.image, request=request)

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

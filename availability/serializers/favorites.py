from html import unescape

import bleach
from rest_framework import serializers


class AddFavoriteSerializer(serializers.Serializer):
    ward_name = serializers.CharField(min_length=1, max_length=255)

    def validate_ward_name(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Ward name is required')
        # Names are matched verbatim against scraped rows, so refuse markup
        # instead of silently cleaning it
        if unescape(bleach.clean(v, tags=set(), strip=True)) != v:
            raise serializers.ValidationError('Ward name contains markup')
        return v

import re

from django.core.validators import RegexValidator
from rest_framework import serializers

# Letters and digits of any alphabet (``[^\W_]``), spaces and hyphens
SAFE_TEXT_RE = re.compile(r'^(?:[^\W_]|[ -])+$')


class SafeTextField(serializers.CharField):
    """Free text restricted to the characters a ward or place name uses."""

    default_error_messages = {
        'unsafe': 'Contains invalid characters. Only letters, numbers, spaces, and hyphens are allowed.',
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.validators.append(RegexValidator(SAFE_TEXT_RE, message=self.error_messages['unsafe']))

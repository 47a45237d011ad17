import bleach
from django.conf import settings
from rest_framework import serializers

IMAGE_OR_PDF = ('jpg', 'jpeg', 'png', 'pdf')
IMAGES = ('jpg', 'jpeg', 'png', 'gif', 'webp')


class CleanCharField(serializers.CharField):
    """CharField that strips markup from the submitted text."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return bleach.clean(value, strip=True)


def file_list(request, key: str) -> list:
    """Uploaded files for ``key``, accepting both ``key`` and ``key[]``."""
    files = getattr(request, 'FILES', None)
    if not files:
        return []
    return files.getlist(key) or files.getlist(f'{key}[]')


def validate_upload(upload, *, field: str, extensions: tuple[str, ...]) -> None:
    """Reject uploads with a disallowed extension or above ``UPLOAD_MAX_MB``."""
    ext = (upload.name.rsplit('.', 1)[-1] if '.' in upload.name else '').lower()
    if ext not in extensions:
        raise serializers.ValidationError({field: [f"The file must be of type: {', '.join(extensions)}."]})
    if (upload.size or 0) > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise serializers.ValidationError({field: [f'The file may not be greater than {settings.UPLOAD_MAX_MB} MB.']})


class IdFilterSerializer(serializers.Serializer):
    """Integer query filters; ``names`` lists the parameters to accept."""

    def __init__(self, *args, names=(), **kwargs):
        super().__init__(*args, **kwargs)
        for name in names:
            self.fields[name] = serializers.IntegerField(required=False, min_value=1)

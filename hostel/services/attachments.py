"""
Multi-file attachments owned by a notice, an inquiry or an expense.
"""
from __future__ import annotations

import logging

from hostel.models import Attachment
from hostel.services.images import delete_file, is_image, process_image, store_file

logger = logging.getLogger(__name__)


def add_attachments(owner, files, directory: str) -> list[Attachment]:
    """Store ``files`` and link them to ``owner``.

    Images are converted to WebP on the spot; an image that cannot be
    decoded is skipped.
    """
    owner_field = owner._meta.model_name
    created = []
    for f in files:
        if is_image(f):
            path = process_image(f, directory)
            if path is None:
                logger.warning('Skipping %s attachment %s: image could not be processed', owner_field, f.name)
                continue
        else:
            path = store_file(f, directory)
        created.append(Attachment.objects.create(
            name=f.name, path=path, type=getattr(f, 'content_type', '') or '', **{owner_field: owner},
        ))
    return created


def remove_attachment(attachment: Attachment) -> None:
    delete_file(attachment.path)
    attachment.delete()


def delete_all(owner) -> None:
    for attachment in list(owner.attachments.all()):
        remove_attachment(attachment)

"""
Image uploads: storage, downsizing and WebP re-encoding.

Uploads are written to a ``temp`` folder and an :class:`ImageJob` is
queued.  The job scales the image so that neither side exceeds
``IMAGE_MAX_DIMENSION``, re-encodes it as WebP, removes the temp file and
any replaced file, then writes the new relative path into the target
model field.  Failures are logged and recorded on the job; they never
propagate to the caller.

Jobs run right after the surrounding transaction commits when
``IMAGE_JOBS_EAGER`` is on, otherwise the ``process_image_jobs`` command
drains the queue.  A job is claimed with ``SELECT ... FOR UPDATE SKIP
LOCKED`` so it runs at most once however many workers are active.
"""
from __future__ import annotations

import hashlib
import io
import logging
import os
import time
from typing import Optional

from django.conf import settings
from django.contrib.contenttypes.models import ContentType
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import transaction
from PIL import Image, ImageOps

from hostel.models import ImageJob

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp', 'bmp'}


def is_image(upload) -> bool:
    ctype = getattr(upload, 'content_type', '') or ''
    ext = os.path.splitext(getattr(upload, 'name', '') or '')[1].lstrip('.').lower()
    return ctype.startswith('image/') or ext in IMAGE_EXTENSIONS


def store_file(upload, directory: str) -> str:
    """Store a non-image attachment as is and return its relative path."""
    name = f"{int(time.time())}_{os.path.basename(upload.name)}"
    return default_storage.save(f"{directory}/{name}", upload)


def _output_name(directory: str, source_name: str) -> str:
    stamp = str(int(time.time()))
    digest = hashlib.md5((source_name + stamp).encode('utf-8')).hexdigest()[:10]
    return f"{directory}/{stamp}_{digest}.webp"


def resize_to_webp(data: bytes, *, max_dimension: Optional[int] = None, quality: Optional[int] = None) -> bytes:
    max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
    quality = quality or settings.IMAGE_WEBP_QUALITY
    with Image.open(io.BytesIO(data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode not in ('RGB', 'RGBA'):
            img = img.convert('RGBA' if 'A' in img.getbands() else 'RGB')
        # thumbnail keeps the aspect ratio and never upscales
        img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
        out = io.BytesIO()
        img.save(out, format='WEBP', quality=quality)
    return out.getvalue()


def _delete_quietly(path: str) -> None:
    if path and default_storage.exists(path):
        default_storage.delete(path)


def run_image_job(job: ImageJob) -> Optional[str]:
    """Process one job; return the new path or None on failure."""
    try:
        with default_storage.open(job.source_path, 'rb') as fh:
            data = fh.read()
        new_path = default_storage.save(_output_name(job.directory, job.source_path), ContentFile(resize_to_webp(data)))
        _delete_quietly(job.source_path)
        if job.old_path and job.old_path != new_path:
            _delete_quietly(job.old_path)

        target = job.target if job.content_type_id and job.object_id else None
        if target is not None:
            setattr(target, job.field, new_path)
            target.save(update_fields=[job.field, 'updated_at'] if hasattr(target, 'updated_at') else [job.field])

        job.status = ImageJob.STATUS_DONE
        job.result_path = new_path
        job.error = ''
        job.save(update_fields=['status', 'result_path', 'error', 'updated_at'])
        logger.info('Image processed: %s -> %s', job.source_path, new_path)
        return new_path
    except Exception as exc:
        logger.error('Image processing failed for job %s (%s): %s', job.pk, job.source_path, exc, exc_info=True)
        if job.pk:
            ImageJob.objects.filter(pk=job.pk).update(status=ImageJob.STATUS_FAILED, error=str(exc)[:2000])
        return None


def claim_next_job() -> Optional[ImageJob]:
    with transaction.atomic():
        job = (
            ImageJob.objects.select_for_update(skip_locked=True)
            .filter(status=ImageJob.STATUS_PENDING)
            .order_by('id')
            .first()
        )
        if job is None:
            return None
        job.status = ImageJob.STATUS_RUNNING
        job.save(update_fields=['status', 'updated_at'])
    return job


def claim_job(job_id: int) -> Optional[ImageJob]:
    with transaction.atomic():
        job = (
            ImageJob.objects.select_for_update(skip_locked=True)
            .filter(pk=job_id, status=ImageJob.STATUS_PENDING)
            .first()
        )
        if job is None:
            return None
        job.status = ImageJob.STATUS_RUNNING
        job.save(update_fields=['status', 'updated_at'])
    return job


def run_pending_job(job_id: int) -> Optional[str]:
    job = claim_job(job_id)
    if job is None:
        return None
    return run_image_job(job)


def process_image_async(upload, directory: str, *, instance=None, field: str = 'image', old_path: str = '') -> str:
    """Store ``upload`` in the temp folder and queue its processing.

    Returns the temp path.  When ``instance`` is given its ``field``
    holds the temp path until the job replaces it.
    """
    temp_name = f"{directory}/temp/{int(time.time())}_original_{os.path.basename(upload.name)}"
    temp_path = default_storage.save(temp_name, upload)
    if instance is not None:
        setattr(instance, field, temp_path)
        instance.save(update_fields=[field])
    job = ImageJob.objects.create(
        source_path=temp_path,
        directory=directory,
        old_path=old_path or '',
        content_type=ContentType.objects.get_for_model(instance) if instance is not None else None,
        object_id=instance.pk if instance is not None else None,
        field=field,
    )
    if settings.IMAGE_JOBS_EAGER:
        transaction.on_commit(lambda: run_pending_job(job.pk))
    return temp_path


def process_image(upload, directory: str) -> Optional[str]:
    """Process an upload synchronously; return the WebP path or None."""
    try:
        data = upload.read()
        return default_storage.save(_output_name(directory, upload.name), ContentFile(resize_to_webp(data)))
    except Exception as exc:
        logger.error('Image processing failed for %s: %s', getattr(upload, 'name', '?'), exc, exc_info=True)
        return None


def save_upload(upload, directory: str, *, instance, field: str) -> str:
    """Attach an upload to ``instance.field``.

    Images are queued for WebP conversion and the temp path is stored
    until the job finishes; other files are stored unchanged.
    """
    old_path = getattr(instance, field, '') or ''
    if is_image(upload):
        return process_image_async(upload, directory, instance=instance, field=field, old_path=old_path)
    path = store_file(upload, directory)
    _delete_quietly(old_path)
    setattr(instance, field, path)
    instance.save(update_fields=[field])
    return path


def delete_file(path: str) -> None:
    _delete_quietly(path)

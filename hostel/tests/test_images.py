import io

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from PIL import Image

from hostel.models import Attachment, ImageJob, Student
from hostel.services import images

pytestmark = pytest.mark.django_db


def png(name='photo.png', size=(3000, 1500)):
    buf = io.BytesIO()
    Image.new('RGB', size, 'navy').save(buf, format='PNG')
    return SimpleUploadedFile(name, buf.getvalue(), content_type='image/png')


def test_resize_to_webp_keeps_aspect_ratio(settings):
    settings.IMAGE_MAX_DIMENSION = 1920
    data = images.resize_to_webp(png().read())
    with Image.open(io.BytesIO(data)) as out:
        assert out.format == 'WEBP'
        assert out.size == (1920, 960)


def test_small_images_are_not_upscaled():
    data = images.resize_to_webp(png(size=(200, 100)).read())
    with Image.open(io.BytesIO(data)) as out:
        assert out.size == (200, 100)


def test_student_photo_is_converted_after_commit(admin_client, student, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        r = admin_client.patch(f'/api/students/{student.id}', {'student_image': png()}, format='multipart')
    assert r.status_code == 200
    temp_path = r.data['data']['student_image']
    assert '/temp/' in temp_path

    job = ImageJob.objects.get()
    assert job.status == ImageJob.STATUS_DONE
    student.refresh_from_db()
    assert student.student_image == job.result_path
    assert student.student_image.endswith('.webp')
    assert default_storage.exists(student.student_image)
    assert not default_storage.exists(temp_path)


def test_disallowed_image_extension_is_rejected(admin_client, student):
    upload = SimpleUploadedFile('photo.tiff', b'II*\x00', content_type='image/tiff')
    r = admin_client.patch(f'/api/students/{student.id}', {'student_image': upload}, format='multipart')
    assert r.status_code == 422
    assert 'student_image' in r.data['error']['errors']
    assert not ImageJob.objects.exists()


def test_worker_drains_queue_and_records_failures(settings, student):
    settings.IMAGE_JOBS_EAGER = False
    images.process_image_async(png(), 'students', instance=student, field='student_image')
    broken = SimpleUploadedFile('broken.png', b'not an image', content_type='image/png')
    images.process_image_async(broken, 'students')
    assert ImageJob.objects.filter(status=ImageJob.STATUS_PENDING).count() == 2

    out = io.StringIO()
    call_command('process_image_jobs', '--once', stdout=out)
    assert 'processed=1 failed=1' in out.getvalue()

    done, failed = ImageJob.objects.order_by('id')
    assert done.status == ImageJob.STATUS_DONE
    assert failed.status == ImageJob.STATUS_FAILED
    assert failed.error
    assert Student.objects.get(pk=student.pk).student_image == done.result_path


def test_replaced_file_is_removed(settings, student):
    settings.IMAGE_JOBS_EAGER = False
    old = default_storage.save('students/old.webp', io.BytesIO(b'old'))
    Student.objects.filter(pk=student.pk).update(student_image=old)
    student.refresh_from_db()
    images.save_upload(png(), 'students', instance=student, field='student_image')
    images.run_pending_job(ImageJob.objects.get().pk)
    assert not default_storage.exists(old)


def test_unreadable_attachment_image_is_skipped(admin_client):
    broken = SimpleUploadedFile('broken.png', b'not an image', content_type='image/png')
    doc = SimpleUploadedFile('doc.pdf', b'%PDF-1.4', content_type='application/pdf')
    r = admin_client.post('/api/notices', {
        'title': 'Mixed', 'description': 'Files', 'attachments': [broken, doc],
    }, format='multipart')
    assert r.status_code == 201
    assert [a['name'] for a in r.data['data']['attachments']] == ['doc.pdf']
    assert Attachment.objects.count() == 1

"""
Block management (admin).
"""
from __future__ import annotations

from django.db import transaction
from rest_framework.decorators import api_view, permission_classes

from hostel.models import Block
from hostel.permissions import IsAdminRole
from hostel.serializers.property import BlockSerializer
from hostel.services.images import delete_file, save_upload
from hostel.views.common import created, get_scoped, ok, paginate, scoped, upload_from

BLOCK_DIR = 'blocks'


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def blocks(request):
    if request.method == 'GET':
        qs = scoped(Block, request)
        search = request.query_params.get('search')
        if search:
            qs = qs.filter(block_name__icontains=search)
        return paginate(request, qs.order_by('-created_at', '-id'), BlockSerializer)

    s = BlockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'block_attachment')
    with transaction.atomic():
        block = s.save()
        if upload is not None:
            save_upload(upload, BLOCK_DIR, instance=block, field='block_attachment')
    return created(BlockSerializer(block).data, message='Block created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def block_detail(request, pk: int):
    block = get_scoped(Block, request, pk)
    if request.method == 'GET':
        return ok(BlockSerializer(block).data)

    if request.method == 'DELETE':
        path = block.block_attachment
        block.delete()
        delete_file(path)
        return ok(None, message='Block deleted successfully')

    s = BlockSerializer(block, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'block_attachment')
    with transaction.atomic():
        block = s.save()
        if upload is not None:
            save_upload(upload, BLOCK_DIR, instance=block, field='block_attachment')
    return ok(BlockSerializer(block).data, message='Block updated successfully')

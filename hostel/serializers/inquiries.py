from rest_framework import serializers

from hostel.models import Block, Inquiry, InquirySeater, Room
from hostel.serializers.fields import CleanCharField
from hostel.serializers.notices import AttachmentSerializer


class InquirySerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255)
    phone = serializers.CharField(max_length=20)
    seater_type = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    description = CleanCharField(required=False, allow_blank=True)
    block_id = serializers.PrimaryKeyRelatedField(
        source='block', queryset=Block.objects.all(), required=False, allow_null=True
    )
    staff_id = serializers.IntegerField(read_only=True)
    attachments = AttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = Inquiry
        fields = [
            'id', 'hostel', 'name', 'email', 'phone', 'seater_type', 'staff_id', 'block_id',
            'description', 'attachments', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'created_at', 'updated_at']


class InquirySeaterSerializer(serializers.ModelSerializer):
    room_id = serializers.PrimaryKeyRelatedField(source='room', queryset=Room.objects.all())
    inquiry_id = serializers.PrimaryKeyRelatedField(source='inquiry', queryset=Inquiry.objects.all())
    block_id = serializers.PrimaryKeyRelatedField(
        source='block', queryset=Block.objects.all(), required=False, allow_null=True
    )
    room_name = serializers.CharField(source='room.room_name', read_only=True)
    capacity = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(choices=InquirySeater.STATUS_CHOICES, required=False)

    class Meta:
        model = InquirySeater
        fields = [
            'id', 'hostel', 'room_id', 'room_name', 'inquiry_id', 'block_id', 'capacity',
            'status', 'description', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'created_at', 'updated_at']

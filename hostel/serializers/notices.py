from django.utils import timezone
from rest_framework import serializers

from hostel.models import Attachment, Block, Notice, Staff, Student
from hostel.serializers.fields import CleanCharField

# target type -> foreign key it requires
TARGET_FIELDS = {
    Notice.TARGET_SPECIFIC_STUDENT: 'student',
    Notice.TARGET_SPECIFIC_STAFF: 'staff',
    Notice.TARGET_BLOCK: 'block',
}


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Attachment
        fields = ['id', 'name', 'path', 'type', 'created_at']


class NoticeSerializer(serializers.ModelSerializer):
    title = CleanCharField(max_length=255)
    description = CleanCharField()
    schedule_time = serializers.DateTimeField(required=False)
    status = serializers.ChoiceField(choices=Notice.STATUS_CHOICES, required=False)
    target_type = serializers.ChoiceField(choices=Notice.TARGET_CHOICES, required=False)
    notice_type = serializers.ChoiceField(choices=Notice.TYPE_CHOICES, required=False)
    student_id = serializers.PrimaryKeyRelatedField(
        source='student', queryset=Student.objects.all(), required=False, allow_null=True
    )
    staff_id = serializers.PrimaryKeyRelatedField(
        source='staff', queryset=Staff.objects.all(), required=False, allow_null=True
    )
    block_id = serializers.PrimaryKeyRelatedField(
        source='block', queryset=Block.objects.all(), required=False, allow_null=True
    )
    attachments = AttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = Notice
        fields = [
            'id', 'hostel', 'title', 'description', 'schedule_time', 'status', 'target_type',
            'notice_type', 'student_id', 'staff_id', 'block_id', 'notice_attachment',
            'attachments', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'notice_attachment', 'created_at', 'updated_at']

    def validate_schedule_time(self, v):
        if v and v <= timezone.now():
            raise serializers.ValidationError('The schedule time must be a date after now.')
        return v

    def validate(self, attrs):
        target = attrs.get('target_type', getattr(self.instance, 'target_type', Notice.TARGET_ALL))
        field = TARGET_FIELDS.get(target)
        if field:
            value = attrs[field] if field in attrs else getattr(self.instance, field, None)
            if value is None:
                raise serializers.ValidationError({f'{field}_id': [f'This field is required when target type is {target}.']})
        return attrs

from rest_framework import serializers

from hostel.models import Chat, Complain, Staff, Student
from hostel.serializers.fields import CleanCharField


class ComplainSerializer(serializers.ModelSerializer):
    student_id = serializers.PrimaryKeyRelatedField(
        source='student', queryset=Student.objects.all(), required=False, allow_null=True
    )
    staff_id = serializers.PrimaryKeyRelatedField(
        source='staff', queryset=Staff.objects.all(), required=False, allow_null=True
    )
    student_name = serializers.CharField(source='student.student_name', read_only=True, default=None)
    staff_name = serializers.CharField(source='staff.staff_name', read_only=True, default=None)
    title = CleanCharField(max_length=255)
    description = CleanCharField(max_length=1000)
    status = serializers.ChoiceField(choices=Complain.STATUS_CHOICES, required=False)

    class Meta:
        model = Complain
        fields = [
            'id', 'hostel', 'student_id', 'student_name', 'staff_id', 'staff_name',
            'title', 'description', 'status', 'complain_attachment',
            'total_messages', 'unread_admin_messages', 'unread_student_messages',
            'unread_staff_messages', 'last_message_at', 'last_message_by',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'hostel', 'complain_attachment', 'total_messages', 'unread_admin_messages',
            'unread_student_messages', 'unread_staff_messages', 'last_message_at',
            'last_message_by', 'created_at', 'updated_at',
        ]


class OwnComplainSerializer(ComplainSerializer):
    """Complaint filed by a student or staff member about themselves.

    The owner is taken from the request and the status stays with admins.
    """
    student_id = serializers.IntegerField(read_only=True)
    staff_id = serializers.IntegerField(read_only=True)
    status = serializers.CharField(read_only=True)


class ChatSendSerializer(serializers.Serializer):
    complain_id = serializers.IntegerField(min_value=1)
    message = serializers.CharField(max_length=5000)
    message_type = serializers.ChoiceField(choices=[c[0] for c in Chat.TYPE_CHOICES], required=False, default='text')
    attachments = serializers.ListField(child=serializers.JSONField(), required=False, default=list)


class ChatEditSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=5000)


class ComplainRefSerializer(serializers.Serializer):
    complain_id = serializers.IntegerField(min_value=1)


class UnreadCountQuerySerializer(serializers.Serializer):
    complain_id = serializers.IntegerField(min_value=1, required=False)

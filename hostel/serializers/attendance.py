from rest_framework import serializers

from hostel.models import (
    Block,
    CheckInCheckOutBase,
    Staff,
    StaffCheckInCheckOut,
    Student,
    StudentCheckInCheckOut,
)

RECORD_FIELDS = [
    'id', 'hostel', 'block_id', 'block_name', 'requested_checkin_time', 'requested_checkout_time',
    'date', 'checkin_time', 'checkout_time', 'estimated_checkin_date', 'checkout_duration',
    'status', 'remarks', 'created_at', 'updated_at',
]
READ_ONLY = ['hostel', 'checkout_duration', 'created_at', 'updated_at']


class _RecordSerializer(serializers.ModelSerializer):
    block_id = serializers.PrimaryKeyRelatedField(
        source='block', queryset=Block.objects.all(), required=False, allow_null=True
    )
    block_name = serializers.CharField(source='block.block_name', read_only=True, default=None)
    status = serializers.ChoiceField(choices=CheckInCheckOutBase.STATUS_CHOICES, required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        checkin = attrs.get('checkin_time', getattr(self.instance, 'checkin_time', None))
        checkout = attrs.get('checkout_time', getattr(self.instance, 'checkout_time', None))
        if not self.instance and not checkin and not checkout:
            raise serializers.ValidationError({'checkin_time': ['Either a check-in or a check-out time is required.']})
        return attrs


class StudentCheckInCheckOutSerializer(_RecordSerializer):
    student_id = serializers.PrimaryKeyRelatedField(source='student', queryset=Student.objects.all())
    student_name = serializers.CharField(source='student.student_name', read_only=True)

    class Meta:
        model = StudentCheckInCheckOut
        fields = ['student_id', 'student_name'] + RECORD_FIELDS
        read_only_fields = READ_ONLY


class StaffCheckInCheckOutSerializer(_RecordSerializer):
    staff_id = serializers.PrimaryKeyRelatedField(source='staff', queryset=Staff.objects.all())
    staff_name = serializers.CharField(source='staff.staff_name', read_only=True)

    class Meta:
        model = StaffCheckInCheckOut
        fields = ['staff_id', 'staff_name'] + RECORD_FIELDS
        read_only_fields = READ_ONLY


class AttendanceQuerySerializer(serializers.Serializer):
    person_id = serializers.IntegerField(required=False, min_value=1)
    student_id = serializers.IntegerField(required=False, min_value=1)
    staff_id = serializers.IntegerField(required=False, min_value=1)
    block_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=[c[0] for c in CheckInCheckOutBase.STATUS_CHOICES], required=False)
    date = serializers.DateField(required=False)


class DeclineSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class SelfCheckinSerializer(serializers.Serializer):
    block_id = serializers.PrimaryKeyRelatedField(
        source='block', queryset=Block.objects.all(), required=False, allow_null=True
    )
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class SelfCheckoutSerializer(SelfCheckinSerializer):
    checkout_time = serializers.DateTimeField(required=False, allow_null=True)
    estimated_checkin_date = serializers.DateField(required=False, allow_null=True)

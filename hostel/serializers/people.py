from django.utils import timezone
from rest_framework import serializers

from hostel.models import Room, Staff, Student
from hostel.serializers.fields import CleanCharField


def field_metadata(serializer_class) -> list[dict]:
    """Describe writable fields of a serializer for form builders."""
    out = []
    for name, field in serializer_class().fields.items():
        if field.read_only:
            continue
        item = {
            'name': name,
            'type': type(field).__name__.replace('Field', '').lower() or 'char',
            'required': field.required,
            'label': field.label or name.replace('_', ' ').capitalize(),
        }
        if getattr(field, 'max_length', None):
            item['max_length'] = field.max_length
        if isinstance(field, serializers.ChoiceField):
            item['choices'] = list(field.choices.keys())
        out.append(item)
    return out


def _not_in_future(value):
    if value and value > timezone.localdate():
        raise serializers.ValidationError('The date must not be in the future.')
    return value


class StudentSerializer(serializers.ModelSerializer):
    student_name = CleanCharField(max_length=255)
    contact_number = serializers.CharField(max_length=20)
    room_id = serializers.PrimaryKeyRelatedField(source='room', queryset=Room.objects.all())
    room_name = serializers.CharField(source='room.room_name', read_only=True)
    block_id = serializers.IntegerField(source='room.block_id', read_only=True)
    food = serializers.ChoiceField(choices=Student.FOOD_CHOICES, required=False, allow_blank=True)
    user_id = serializers.IntegerField(read_only=True)
    is_active = serializers.BooleanField(default=True)

    class Meta:
        model = Student
        fields = [
            'id', 'hostel', 'user_id', 'student_id', 'student_name', 'email', 'contact_number',
            'date_of_birth', 'room_id', 'room_name', 'block_id', 'admission_date',
            'district', 'city', 'ward_no', 'street_name', 'citizenship_no',
            'college_office', 'educational_institution', 'class_time', 'level_of_study',
            'father_name', 'father_contact', 'mother_name', 'mother_contact',
            'local_guardian_name', 'local_guardian_contact', 'local_guardian_address',
            'local_guardian_relation', 'food', 'blood_group', 'disease', 'student_image',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'student_image', 'created_at', 'updated_at']

    def validate_date_of_birth(self, v):
        return _not_in_future(v)


class StudentProfileSerializer(serializers.ModelSerializer):
    """Fields a student may change on their own record."""

    class Meta:
        model = Student
        fields = [
            'contact_number', 'district', 'city', 'ward_no', 'street_name',
            'father_name', 'father_contact', 'mother_name', 'mother_contact',
            'local_guardian_name', 'local_guardian_contact', 'local_guardian_address',
            'local_guardian_relation', 'food', 'blood_group', 'disease',
        ]


class StaffSerializer(serializers.ModelSerializer):
    staff_name = CleanCharField(max_length=255)
    contact_number = serializers.CharField(max_length=20)
    employment_type = serializers.ChoiceField(choices=Staff.EMPLOYMENT_CHOICES, required=False, allow_blank=True)
    salary_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    user_id = serializers.IntegerField(read_only=True)
    is_active = serializers.BooleanField(default=True)

    class Meta:
        model = Staff
        fields = [
            'id', 'hostel', 'user_id', 'staff_id', 'staff_name', 'email', 'contact_number',
            'date_of_birth', 'position', 'department', 'joining_date', 'salary_amount',
            'employment_type', 'district', 'city', 'ward_no', 'street_name', 'citizenship_no',
            'blood_group', 'emergency_contact_name', 'emergency_contact_number', 'staff_image',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'staff_image', 'created_at', 'updated_at']

    def validate_date_of_birth(self, v):
        return _not_in_future(v)


class StaffProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = [
            'contact_number', 'district', 'city', 'ward_no', 'street_name',
            'blood_group', 'emergency_contact_name', 'emergency_contact_number',
        ]

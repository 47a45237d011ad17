from rest_framework import serializers

from hostel.models import Block, Room
from hostel.serializers.fields import CleanCharField


class BlockSerializer(serializers.ModelSerializer):
    block_name = CleanCharField(max_length=255)
    location = CleanCharField(max_length=255, required=False, allow_blank=True)
    manager_name = CleanCharField(max_length=255, required=False, allow_blank=True)
    manager_contact = serializers.CharField(max_length=20, required=False, allow_blank=True)
    remarks = CleanCharField(max_length=1000, required=False, allow_blank=True)
    rooms_count = serializers.SerializerMethodField()

    class Meta:
        model = Block
        fields = [
            'id', 'hostel', 'block_name', 'location', 'manager_name', 'manager_contact',
            'remarks', 'block_attachment', 'rooms_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'block_attachment', 'created_at', 'updated_at']

    def get_rooms_count(self, obj) -> int:
        return obj.rooms.count()


class RoomSerializer(serializers.ModelSerializer):
    block_id = serializers.PrimaryKeyRelatedField(source='block', queryset=Block.objects.all())
    block_name = serializers.CharField(source='block.block_name', read_only=True)
    capacity = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(choices=Room.STATUS_CHOICES, required=False)
    occupied_beds = serializers.IntegerField(read_only=True)
    vacant_beds = serializers.IntegerField(read_only=True)

    class Meta:
        model = Room
        fields = [
            'id', 'hostel', 'room_name', 'block_id', 'block_name', 'capacity', 'room_type',
            'floor_number', 'status', 'room_attachment', 'occupied_beds', 'vacant_beds',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'room_attachment', 'created_at', 'updated_at']

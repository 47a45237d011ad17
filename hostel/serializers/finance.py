from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from hostel.models import (
    Expense,
    ExpenseCategory,
    Income,
    IncomeType,
    PaymentType,
    Salary,
    Staff,
    Student,
)
from hostel.serializers.fields import CleanCharField
from hostel.serializers.notices import AttachmentSerializer


class IncomeTypeSerializer(serializers.ModelSerializer):
    title = CleanCharField(max_length=255)

    class Meta:
        model = IncomeType
        fields = ['id', 'title', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PaymentTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentType
        fields = ['id', 'name', 'description', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class IncomeSerializer(serializers.ModelSerializer):
    student_id = serializers.PrimaryKeyRelatedField(
        source='student', queryset=Student.objects.all(), required=False, allow_null=True
    )
    income_type_id = serializers.PrimaryKeyRelatedField(
        source='income_type', queryset=IncomeType.objects.all(), required=False, allow_null=True
    )
    payment_type_id = serializers.PrimaryKeyRelatedField(
        source='payment_type', queryset=PaymentType.objects.all(), required=False, allow_null=True
    )
    student_name = serializers.CharField(source='student.student_name', read_only=True, default=None)
    income_type = serializers.CharField(source='income_type.title', read_only=True, default=None)
    payment_type = serializers.CharField(source='payment_type.name', read_only=True, default=None)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    received_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    payment_status = serializers.CharField(read_only=True)

    class Meta:
        model = Income
        fields = [
            'id', 'hostel', 'student_id', 'student_name', 'income_type_id', 'income_type',
            'payment_type_id', 'payment_type', 'amount', 'received_amount', 'due_amount',
            'payment_status', 'income_date', 'title', 'description', 'income_attachment',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'due_amount', 'income_attachment', 'created_at', 'updated_at']

    def validate(self, attrs):
        amount = attrs.get('amount', getattr(self.instance, 'amount', None))
        received = attrs.get('received_amount', getattr(self.instance, 'received_amount', Decimal('0')))
        if amount is not None and received is not None and received > amount:
            raise serializers.ValidationError({'received_amount': ['The received amount may not exceed the amount.']})
        return attrs


class ExpenseCategorySerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255)
    expenses_count = serializers.SerializerMethodField()

    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'description', 'expenses_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, v):
        qs = ExpenseCategory.objects.filter(name__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('The name has already been taken.')
        return v

    def get_expenses_count(self, obj) -> int:
        return obj.expenses.count()


class ExpenseSerializer(serializers.ModelSerializer):
    expense_category_id = serializers.PrimaryKeyRelatedField(
        source='expense_category', queryset=ExpenseCategory.objects.all()
    )
    expense_category = serializers.CharField(source='expense_category.name', read_only=True)
    student_id = serializers.PrimaryKeyRelatedField(
        source='student', queryset=Student.objects.all(), required=False, allow_null=True
    )
    staff_id = serializers.PrimaryKeyRelatedField(
        source='staff', queryset=Staff.objects.all(), required=False, allow_null=True
    )
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    paid_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    title = CleanCharField(max_length=255, required=False, allow_blank=True)
    attachments = AttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'hostel', 'expense_category_id', 'expense_category', 'amount', 'paid_amount',
            'due_amount', 'payment_status', 'expense_date', 'title', 'description',
            'student_id', 'staff_id', 'expense_attachment', 'attachments',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'hostel', 'due_amount', 'payment_status', 'expense_attachment', 'created_at', 'updated_at',
        ]

    def validate(self, attrs):
        amount = attrs.get('amount', getattr(self.instance, 'amount', None))
        paid = attrs.get('paid_amount')
        if amount is not None and paid is not None and paid > amount:
            raise serializers.ValidationError({'paid_amount': ['The paid amount may not exceed the amount.']})
        return attrs


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({'end_date': ['The end date must be a date after or equal to start date.']})
        return attrs


class SalarySerializer(serializers.ModelSerializer):
    staff_id = serializers.PrimaryKeyRelatedField(source='staff', queryset=Staff.objects.all())
    staff_name = serializers.CharField(source='staff.staff_name', read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000)
    status = serializers.ChoiceField(choices=Salary.STATUS_CHOICES, required=False)
    month_name = serializers.CharField(read_only=True)

    class Meta:
        model = Salary
        fields = [
            'id', 'hostel', 'staff_id', 'staff_name', 'amount', 'month', 'month_name', 'year',
            'description', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = ['hostel', 'created_at', 'updated_at']
        # uniqueness is reported as 409 by the view instead of a 422 here
        validators = []

    def validate_year(self, v):
        if v > timezone.localdate().year + 1:
            raise serializers.ValidationError(f'The year may not be greater than {timezone.localdate().year + 1}.')
        return v


class SalaryQuerySerializer(serializers.Serializer):
    staff_id = serializers.IntegerField(required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    year = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=[c[0] for c in Salary.STATUS_CHOICES], required=False)

"""
Django admin registrations for the hostel models.
"""
from django.contrib import admin

from .models import (
    Attachment,
    AuditEvent,
    Block,
    Chat,
    Complain,
    Expense,
    ExpenseCategory,
    Hostel,
    ImageJob,
    Income,
    IncomeType,
    Inquiry,
    InquirySeater,
    Notice,
    PaymentType,
    Room,
    Salary,
    Staff,
    StaffCheckInCheckOut,
    Student,
    StudentCheckInCheckOut,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'is_active', 'is_superuser')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'name', 'username')


@admin.register(Hostel)
class HostelAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'code', 'is_active')
    search_fields = ('name', 'code')


@admin.register(Block)
class BlockAdmin(admin.ModelAdmin):
    list_display = ('id', 'block_name', 'location', 'hostel')
    search_fields = ('block_name',)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('id', 'room_name', 'block', 'capacity', 'status')
    list_filter = ('status', 'block')
    search_fields = ('room_name',)


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('id', 'student_id', 'student_name', 'email', 'room', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('student_name', 'email', 'student_id')


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff_id', 'staff_name', 'position', 'is_active')
    search_fields = ('staff_name', 'email', 'staff_id')


@admin.register(Complain)
class ComplainAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'student', 'staff', 'status', 'total_messages')
    list_filter = ('status',)


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ('id', 'complain', 'sender_type', 'is_read', 'is_deleted', 'created_at')
    list_filter = ('sender_type', 'is_read', 'is_deleted')


@admin.register(Notice)
class NoticeAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'target_type', 'notice_type', 'status', 'schedule_time')
    list_filter = ('target_type', 'notice_type', 'status')


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'seater_type', 'block', 'staff')
    search_fields = ('name', 'phone', 'email')


@admin.register(IncomeType)
class IncomeTypeAdmin(admin.ModelAdmin):
    list_display = ('id', 'title')


@admin.register(PaymentType)
class PaymentTypeAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_active')


@admin.register(Income)
class IncomeAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'amount', 'received_amount', 'due_amount', 'income_date')
    list_filter = ('income_type',)


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('id', 'expense_category', 'amount', 'paid_amount', 'payment_status', 'expense_date')
    list_filter = ('payment_status', 'expense_category')


@admin.register(Salary)
class SalaryAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff', 'month', 'year', 'amount', 'status')
    list_filter = ('status', 'year')


@admin.register(StudentCheckInCheckOut)
class StudentCheckInCheckOutAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'date', 'checkin_time', 'checkout_time', 'status')
    list_filter = ('status',)


@admin.register(StaffCheckInCheckOut)
class StaffCheckInCheckOutAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff', 'date', 'checkin_time', 'checkout_time', 'status')
    list_filter = ('status',)


@admin.register(ImageJob)
class ImageJobAdmin(admin.ModelAdmin):
    list_display = ('id', 'source_path', 'status', 'result_path', 'created_at')
    list_filter = ('status',)


admin.site.register(InquirySeater)
admin.site.register(Attachment)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)

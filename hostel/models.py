"""
Database models for the hostel backend.

Most domain tables are scoped to a :class:`Hostel`.  Scoped models derive
from :class:`HostelScopedModel`, which fills the hostel foreign key from a
parent relation (block, room, student...) or from the hostel selected by
the current request before saving.
"""
from __future__ import annotations

import calendar
from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Count, Q
from django.utils import timezone

from .middleware import get_current_hostel_id


class Hostel(models.Model):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, unique=True)
    address = models.CharField(max_length=255, blank=True)
    contact_number = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class HostelScopedQuerySet(models.QuerySet):
    def for_hostel(self, hostel_id):
        if not hostel_id:
            return self
        return self.filter(hostel_id=hostel_id)


class HostelScopedModel(models.Model):
    """Base for tables that belong to a hostel.

    ``HOSTEL_PARENTS`` names foreign keys whose target carries a hostel.
    On save the first parent that is set supplies the hostel when the
    hostel is empty or that parent changed since the row was loaded.
    Without a usable parent the request's current hostel is used.
    """
    HOSTEL_PARENTS: tuple[str, ...] = ()

    hostel = models.ForeignKey(
        Hostel, null=True, blank=True, on_delete=models.SET_NULL, related_name='+', db_index=True
    )

    objects = HostelScopedQuerySet.as_manager()

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_parents = {
            name: instance.__dict__.get(f'{name}_id') for name in cls.HOSTEL_PARENTS
        }
        return instance

    def _parent_changed(self, name: str) -> bool:
        loaded = getattr(self, '_loaded_parents', {})
        return loaded.get(name) != getattr(self, f'{name}_id')

    def resolve_hostel(self) -> None:
        for name in self.HOSTEL_PARENTS:
            if not getattr(self, f'{name}_id'):
                continue
            if self.hostel_id and not self._parent_changed(name):
                return
            parent = getattr(self, name)
            if parent is not None and parent.hostel_id:
                self.hostel_id = parent.hostel_id
                return
        if not self.hostel_id:
            self.hostel_id = get_current_hostel_id()

    def save(self, *args, **kwargs):
        self.resolve_hostel()
        super().save(*args, **kwargs)
        self._loaded_parents = {name: getattr(self, f'{name}_id') for name in self.HOSTEL_PARENTS}


class User(AbstractUser):
    """Account used to sign in.

    ``role`` decides which part of the API is reachable.  Students and
    staff are linked to their domain record through ``Student.user`` and
    ``Staff.user``; ``user_type_id`` exposes that record's id.
    """
    ROLE_ADMIN = 'admin'
    ROLE_STUDENT = 'student'
    ROLE_STAFF = 'staff'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_STUDENT, 'Student'),
        (ROLE_STAFF, 'Staff'),
    ]
    name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_STUDENT, db_index=True)
    admin_level = models.CharField(max_length=20, blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.username

    @property
    def student_record(self):
        return Student.objects.filter(user=self).select_related('room__block').first()

    @property
    def staff_record(self):
        return Staff.objects.filter(user=self).first()

    @property
    def user_type_id(self):
        if self.role == self.ROLE_STUDENT:
            return Student.objects.filter(user=self).values_list('id', flat=True).first()
        if self.role == self.ROLE_STAFF:
            return Staff.objects.filter(user=self).values_list('id', flat=True).first()
        return None


# ---------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------
class Block(HostelScopedModel):
    block_name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    manager_name = models.CharField(max_length=255, blank=True)
    manager_contact = models.CharField(max_length=20, blank=True)
    remarks = models.TextField(max_length=1000, blank=True)
    block_attachment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.block_name


class RoomQuerySet(HostelScopedQuerySet):
    def with_occupancy(self):
        return self.annotate(
            occupancy=Count('students', filter=Q(students__is_active=True), distinct=True)
        )


class Room(HostelScopedModel):
    HOSTEL_PARENTS = ('block',)

    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_MAINTENANCE, 'Maintenance'),
    ]
    room_name = models.CharField(max_length=255, unique=True)
    block = models.ForeignKey(Block, on_delete=models.CASCADE, related_name='rooms')
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    room_type = models.CharField(max_length=50, blank=True)
    floor_number = models.IntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    room_attachment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RoomQuerySet.as_manager()

    class Meta:
        ordering = ['room_name']

    def __str__(self) -> str:
        return self.room_name

    @property
    def occupied_beds(self) -> int:
        occupancy = getattr(self, 'occupancy', None)
        if occupancy is not None:
            return occupancy
        return self.students.filter(is_active=True).count()

    @property
    def vacant_beds(self) -> int:
        return max(0, self.capacity - self.occupied_beds)


# ---------------------------------------------------------------------
# People
# ---------------------------------------------------------------------
class Student(HostelScopedModel):
    HOSTEL_PARENTS = ('room',)

    FOOD_CHOICES = [
        ('vegetarian', 'Vegetarian'),
        ('non-vegetarian', 'Non-vegetarian'),
        ('egg-only', 'Egg only'),
    ]
    user = models.OneToOneField(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='student')
    student_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    student_name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    contact_number = models.CharField(max_length=20)
    date_of_birth = models.DateField()
    room = models.ForeignKey(Room, null=True, blank=True, on_delete=models.SET_NULL, related_name='students')
    admission_date = models.DateField(null=True, blank=True)
    # address
    district = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    ward_no = models.CharField(max_length=20, blank=True)
    street_name = models.CharField(max_length=255, blank=True)
    citizenship_no = models.CharField(max_length=50, blank=True)
    # education
    college_office = models.CharField(max_length=255, blank=True)
    educational_institution = models.CharField(max_length=255, blank=True)
    class_time = models.CharField(max_length=50, blank=True)
    level_of_study = models.CharField(max_length=100, blank=True)
    # guardian
    father_name = models.CharField(max_length=255, blank=True)
    father_contact = models.CharField(max_length=20, blank=True)
    mother_name = models.CharField(max_length=255, blank=True)
    mother_contact = models.CharField(max_length=20, blank=True)
    local_guardian_name = models.CharField(max_length=255, blank=True)
    local_guardian_contact = models.CharField(max_length=20, blank=True)
    local_guardian_address = models.CharField(max_length=255, blank=True)
    local_guardian_relation = models.CharField(max_length=100, blank=True)
    # health & food
    food = models.CharField(max_length=20, choices=FOOD_CHOICES, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    disease = models.CharField(max_length=255, blank=True)
    student_image = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.student_name


class Staff(HostelScopedModel):
    EMPLOYMENT_CHOICES = [
        ('full-time', 'Full time'),
        ('part-time', 'Part time'),
        ('contract', 'Contract'),
        ('intern', 'Intern'),
    ]
    user = models.OneToOneField(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff')
    staff_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    staff_name = models.CharField(max_length=255)
    email = models.EmailField(unique=True, null=True, blank=True)
    contact_number = models.CharField(max_length=20)
    date_of_birth = models.DateField()
    position = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=100, blank=True)
    joining_date = models.DateField(null=True, blank=True)
    salary_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    employment_type = models.CharField(max_length=20, choices=EMPLOYMENT_CHOICES, blank=True)
    district = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    ward_no = models.CharField(max_length=20, blank=True)
    street_name = models.CharField(max_length=255, blank=True)
    citizenship_no = models.CharField(max_length=50, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    emergency_contact_name = models.CharField(max_length=255, blank=True)
    emergency_contact_number = models.CharField(max_length=20, blank=True)
    staff_image = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'staff'

    def __str__(self) -> str:
        return self.staff_name


# ---------------------------------------------------------------------
# Complaints & chat
# ---------------------------------------------------------------------
class Complain(HostelScopedModel):
    HOSTEL_PARENTS = ('student', 'staff')

    STATUS_PENDING = 'pending'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        ('in_progress', 'In progress'),
        ('resolved', 'Resolved'),
        ('rejected', 'Rejected'),
    ]
    student = models.ForeignKey(Student, null=True, blank=True, on_delete=models.CASCADE, related_name='complains')
    staff = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.CASCADE, related_name='complains')
    title = models.CharField(max_length=255)
    description = models.TextField(max_length=1000)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    complain_attachment = models.CharField(max_length=500, blank=True)
    total_messages = models.PositiveIntegerField(default=0)
    unread_admin_messages = models.PositiveIntegerField(default=0)
    unread_student_messages = models.PositiveIntegerField(default=0)
    unread_staff_messages = models.PositiveIntegerField(default=0)
    last_message_at = models.DateTimeField(null=True, blank=True)
    last_message_by = models.CharField(max_length=10, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.title

    def is_owned_by(self, user) -> bool:
        if getattr(user, 'role', None) == User.ROLE_STUDENT:
            return bool(self.student_id and self.student.user_id == user.id)
        if getattr(user, 'role', None) == User.ROLE_STAFF:
            return bool(self.staff_id and self.staff.user_id == user.id)
        return False


class Chat(models.Model):
    SENDER_CHOICES = [
        ('admin', 'Admin'),
        ('student', 'Student'),
        ('staff', 'Staff'),
    ]
    TYPE_CHOICES = [
        ('text', 'Text'),
        ('file', 'File'),
        ('image', 'Image'),
    ]
    complain = models.ForeignKey(Complain, on_delete=models.CASCADE, related_name='chats')
    sender = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='chats')
    sender_type = models.CharField(max_length=10, choices=SENDER_CHOICES)
    message = models.TextField(max_length=1000)
    original_message = models.TextField(blank=True)
    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    message_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='text')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [models.Index(fields=['complain', 'is_read'])]

    def __str__(self) -> str:
        return f"{self.sender_type}: {self.message[:30]}"

    @property
    def message_preview(self) -> str:
        if len(self.message) <= 50:
            return self.message
        return self.message[:50] + '...'


# ---------------------------------------------------------------------
# Notices & attachments
# ---------------------------------------------------------------------
class Notice(HostelScopedModel):
    HOSTEL_PARENTS = ('block', 'student', 'staff')

    TARGET_ALL = 'all'
    TARGET_STUDENT = 'student'
    TARGET_STAFF = 'staff'
    TARGET_SPECIFIC_STUDENT = 'specific_student'
    TARGET_SPECIFIC_STAFF = 'specific_staff'
    TARGET_BLOCK = 'block'
    TARGET_CHOICES = [
        (TARGET_ALL, 'Everyone'),
        (TARGET_STUDENT, 'All students'),
        (TARGET_STAFF, 'All staff'),
        (TARGET_SPECIFIC_STUDENT, 'One student'),
        (TARGET_SPECIFIC_STAFF, 'One staff member'),
        (TARGET_BLOCK, 'One block'),
    ]
    TYPE_CHOICES = [
        ('general', 'General'),
        ('urgent', 'Urgent'),
        ('event', 'Event'),
        ('announcement', 'Announcement'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]
    title = models.CharField(max_length=255)
    description = models.TextField()
    schedule_time = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active', db_index=True)
    target_type = models.CharField(max_length=20, choices=TARGET_CHOICES, default=TARGET_ALL, db_index=True)
    notice_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general')
    student = models.ForeignKey(Student, null=True, blank=True, on_delete=models.CASCADE, related_name='notices')
    staff = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.CASCADE, related_name='notices')
    block = models.ForeignKey(Block, null=True, blank=True, on_delete=models.CASCADE, related_name='notices')
    notice_attachment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-schedule_time', '-id']

    def __str__(self) -> str:
        return self.title


class Attachment(models.Model):
    name = models.CharField(max_length=255)
    path = models.CharField(max_length=500)
    type = models.CharField(max_length=100, blank=True)
    notice = models.ForeignKey(Notice, null=True, blank=True, on_delete=models.CASCADE, related_name='attachments')
    inquiry = models.ForeignKey('Inquiry', null=True, blank=True, on_delete=models.CASCADE, related_name='attachments')
    expense = models.ForeignKey('Expense', null=True, blank=True, on_delete=models.CASCADE, related_name='attachments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------
# Inquiries
# ---------------------------------------------------------------------
class Inquiry(HostelScopedModel):
    HOSTEL_PARENTS = ('block',)

    name = models.CharField(max_length=255)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=20)
    seater_type = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    staff = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='inquiries')
    block = models.ForeignKey(Block, null=True, blank=True, on_delete=models.SET_NULL, related_name='inquiries')
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'inquiries'

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


class InquirySeater(HostelScopedModel):
    HOSTEL_PARENTS = ('block', 'room')

    STATUS_CHOICES = [
        ('available', 'Available'),
        ('reserved', 'Reserved'),
        ('occupied', 'Occupied'),
    ]
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='inquiry_seaters')
    inquiry = models.ForeignKey(Inquiry, on_delete=models.CASCADE, related_name='seaters')
    block = models.ForeignKey(Block, null=True, blank=True, on_delete=models.SET_NULL, related_name='inquiry_seaters')
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        if not self.block_id and self.room_id:
            self.block_id = self.room.block_id
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------
class IncomeType(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.title


class PaymentType(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Income(HostelScopedModel):
    HOSTEL_PARENTS = ('student',)

    student = models.ForeignKey(Student, null=True, blank=True, on_delete=models.SET_NULL, related_name='incomes')
    income_type = models.ForeignKey(IncomeType, null=True, blank=True, on_delete=models.SET_NULL, related_name='incomes')
    payment_type = models.ForeignKey(PaymentType, null=True, blank=True, on_delete=models.SET_NULL, related_name='incomes')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    received_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    due_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    income_date = models.DateField(default=timezone.localdate, db_index=True)
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    income_attachment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-income_date', '-id']

    def __str__(self) -> str:
        return f"{self.title or 'Income'} {self.amount}"

    @property
    def payment_status(self) -> str:
        if self.due_amount <= 0:
            return 'paid'
        if self.received_amount > 0:
            return 'partial'
        return 'unpaid'

    def save(self, *args, **kwargs):
        self.due_amount = max(Decimal('0'), Decimal(self.amount) - Decimal(self.received_amount or 0))
        super().save(*args, **kwargs)


class ExpenseCategory(models.Model):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'expense categories'

    def __str__(self) -> str:
        return self.name


class Expense(HostelScopedModel):
    HOSTEL_PARENTS = ('student', 'staff')

    STATUS_CHOICES = [
        ('paid', 'Paid'),
        ('partially_paid', 'Partially paid'),
        ('credit', 'Credit'),
    ]
    expense_category = models.ForeignKey(ExpenseCategory, on_delete=models.PROTECT, related_name='expenses')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    due_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    payment_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='paid')
    expense_date = models.DateField(default=timezone.localdate, db_index=True)
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    student = models.ForeignKey(Student, null=True, blank=True, on_delete=models.SET_NULL, related_name='expenses')
    staff = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='expenses')
    expense_attachment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-expense_date', '-id']

    def __str__(self) -> str:
        return f"{self.title or self.expense_category} {self.amount}"

    def save(self, *args, **kwargs):
        amount = Decimal(self.amount)
        paid = amount if self.paid_amount is None else Decimal(self.paid_amount)
        self.paid_amount = paid
        self.due_amount = max(Decimal('0'), amount - paid)
        if self.due_amount <= 0:
            self.payment_status = 'paid'
        elif paid > 0:
            self.payment_status = 'partially_paid'
        else:
            self.payment_status = 'credit'
        super().save(*args, **kwargs)


class Salary(HostelScopedModel):
    HOSTEL_PARENTS = ('staff',)

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('cancelled', 'Cancelled'),
    ]
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name='salaries')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(2000)])
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year', '-month', '-id']
        constraints = [
            models.UniqueConstraint(fields=['staff', 'month', 'year'], name='unique_salary_per_staff_month'),
        ]
        verbose_name_plural = 'salaries'

    def __str__(self) -> str:
        return f"{self.staff} {self.month_name} {self.year}"

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month] if 1 <= self.month <= 12 else ''


# ---------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------
class CheckInCheckOutBase(HostelScopedModel):
    STATUS_CHECKED_IN = 'checked_in'
    STATUS_CHECKED_OUT = 'checked_out'
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_DECLINED = 'declined'
    STATUS_CHOICES = [
        (STATUS_CHECKED_IN, 'Checked in'),
        (STATUS_CHECKED_OUT, 'Checked out'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_DECLINED, 'Declined'),
    ]
    block = models.ForeignKey(Block, null=True, blank=True, on_delete=models.SET_NULL, related_name='%(class)s_records')
    requested_checkin_time = models.DateTimeField(null=True, blank=True)
    requested_checkout_time = models.DateTimeField(null=True, blank=True)
    date = models.DateField(default=timezone.localdate, db_index=True)
    checkin_time = models.DateTimeField(null=True, blank=True)
    checkout_time = models.DateTimeField(null=True, blank=True)
    estimated_checkin_date = models.DateField(null=True, blank=True)
    # minutes between checkout and the following check-in
    checkout_duration = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_CHECKED_IN, db_index=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at', '-id']

    def save(self, *args, **kwargs):
        if self.checkin_time and self.checkout_time and self.checkin_time > self.checkout_time:
            self.checkout_duration = int((self.checkin_time - self.checkout_time).total_seconds() // 60)
        super().save(*args, **kwargs)


class StudentCheckInCheckOut(CheckInCheckOutBase):
    HOSTEL_PARENTS = ('block', 'student')

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='checkincheckouts')

    class Meta(CheckInCheckOutBase.Meta):
        indexes = [models.Index(fields=['student', 'date'])]


class StaffCheckInCheckOut(CheckInCheckOutBase):
    HOSTEL_PARENTS = ('block', 'staff')

    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name='checkincheckouts')

    class Meta(CheckInCheckOutBase.Meta):
        indexes = [models.Index(fields=['staff', 'date'])]


# ---------------------------------------------------------------------
# Background image jobs & audit
# ---------------------------------------------------------------------
class ImageJob(models.Model):
    """A queued resize/re-encode of an uploaded image."""
    STATUS_PENDING = 'pending'
    STATUS_RUNNING = 'running'
    STATUS_DONE = 'done'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_RUNNING, 'Running'),
        (STATUS_DONE, 'Done'),
        (STATUS_FAILED, 'Failed'),
    ]
    source_path = models.CharField(max_length=500)
    directory = models.CharField(max_length=255)
    old_path = models.CharField(max_length=500, blank=True)
    content_type = models.ForeignKey(ContentType, null=True, blank=True, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField(null=True, blank=True)
    target = GenericForeignKey('content_type', 'object_id')
    field = models.CharField(max_length=64, default='image')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    result_path = models.CharField(max_length=500, blank=True)
    error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"ImageJob#{self.pk} {self.status}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]

from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from hostel.exceptions import BusinessRuleError, ConflictError
from hostel.models import ExpenseCategory, Income, Salary

ZERO = Value(Decimal('0'), output_field=DecimalField(max_digits=14, decimal_places=2))


def _sum(field: str, **filters):
    return Coalesce(Sum(field, filter=Q(**filters) if filters else None), ZERO)


def income_totals(qs) -> dict:
    totals = qs.aggregate(
        total_amount=_sum('amount'),
        total_received=_sum('received_amount'),
        total_due=_sum('due_amount'),
    )
    totals['count'] = qs.count()
    return totals


def student_financials(student) -> dict:
    qs = Income.objects.filter(student=student).select_related('income_type', 'payment_type')
    return {'incomes': qs, 'summary': income_totals(qs)}


def staff_financials(staff) -> dict:
    qs = Salary.objects.filter(staff=staff)
    summary = qs.aggregate(
        total_amount=_sum('amount'),
        total_paid=_sum('amount', status='paid'),
        total_pending=_sum('amount', status='pending'),
    )
    summary['count'] = qs.count()
    return {'salaries': qs, 'summary': summary}


def delete_expense_category(category: ExpenseCategory) -> None:
    if category.expenses.exists():
        raise BusinessRuleError('Cannot delete category with associated expenses.')
    category.delete()


def check_salary_unique(staff, month: int, year: int, *, exclude_pk: Optional[int] = None) -> None:
    qs = Salary.objects.filter(staff=staff, month=month, year=year)
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ConflictError('Salary record already exists for this staff member for the specified month and year.')


def save_salary(serializer) -> Salary:
    """Save a salary serializer, mapping the unique constraint to a 409."""
    try:
        with transaction.atomic():
            return serializer.save()
    except IntegrityError:
        raise ConflictError('Salary record already exists for this staff member for the specified month and year.')


def salary_statistics(hostel_id: Optional[int] = None) -> dict:
    today = timezone.localdate()
    base = Salary.objects.for_hostel(hostel_id)
    month = base.filter(month=today.month, year=today.year).aggregate(
        total_salaries=Count('id'),
        total_amount=_sum('amount'),
        paid_amount=_sum('amount', status='paid'),
        pending_amount=_sum('amount', status='pending'),
        paid_count=Count('id', filter=Q(status='paid')),
        pending_count=Count('id', filter=Q(status='pending')),
    )
    year = base.filter(year=today.year).aggregate(
        total_salaries=Count('id'),
        total_amount=_sum('amount'),
    )
    return {
        'current_month': dict(month, month=today.month, year=today.year),
        'current_year': dict(year, year=today.year),
    }

"""
Admin dashboard summary: occupancy, residents in/out, monthly finance
and a merged feed of recent activity.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q, Sum
from django.utils import timezone

from hostel.models import Expense, Income, Room, Student, StudentCheckInCheckOut

RECENT_PER_SOURCE = 5
RECENT_LIMIT = 10


def _money(value) -> float:
    return float(Decimal(value or 0).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def room_stats(hostel_id: Optional[int] = None) -> dict:
    rooms = Room.objects.for_hostel(hostel_id)
    total_capacity = rooms.aggregate(total=Sum('capacity'))['total'] or 0
    occupied = Student.objects.for_hostel(hostel_id).filter(is_active=True, room__in=rooms).count()
    return {
        'total_rooms': rooms.count(),
        'total_capacity': total_capacity,
        'occupied_beds': occupied,
        'available_beds': max(0, total_capacity - occupied),
    }


def student_stats(hostel_id: Optional[int] = None) -> dict:
    total = Student.objects.for_hostel(hostel_id).filter(is_active=True).count()
    in_hostel = (
        StudentCheckInCheckOut.objects.for_hostel(hostel_id)
        .filter(checkin_time__isnull=False, checkout_time__isnull=True)
        .exclude(status=StudentCheckInCheckOut.STATUS_DECLINED)
        .aggregate(n=Count('student', distinct=True))['n']
    )
    return {
        'total': total,
        'in_hostel': in_hostel,
        'out_of_hostel': max(0, total - in_hostel),
    }


def finance_stats(hostel_id: Optional[int] = None) -> dict:
    today = timezone.localdate()
    month = Q(income_date__year=today.year, income_date__month=today.month)
    incomes = Income.objects.for_hostel(hostel_id)
    monthly_incomes = incomes.filter(month).aggregate(s=Sum('amount'))['s']
    monthly_expenses = (
        Expense.objects.for_hostel(hostel_id)
        .filter(expense_date__year=today.year, expense_date__month=today.month)
        .aggregate(s=Sum('amount'))['s']
    )
    outstanding = incomes.aggregate(
        total=Sum('due_amount'),
        count=Count('id', filter=Q(due_amount__gt=0)),
    )
    return {
        'monthly_incomes': _money(monthly_incomes),
        'monthly_expenses': _money(monthly_expenses),
        'outstanding_total': _money(outstanding['total']),
        'outstanding_count': outstanding['count'] or 0,
    }


def recent_activity(hostel_id: Optional[int] = None) -> list[dict]:
    items: list[dict] = []
    for income in Income.objects.for_hostel(hostel_id).select_related('student').order_by('-created_at')[:RECENT_PER_SOURCE]:
        items.append({
            'type': 'income',
            'id': income.id,
            'title': income.title or 'Income',
            'amount': _money(income.amount),
            'student': income.student.student_name if income.student_id else None,
            'date': income.created_at,
        })
    for expense in Expense.objects.for_hostel(hostel_id).select_related('expense_category').order_by('-created_at')[:RECENT_PER_SOURCE]:
        items.append({
            'type': 'expense',
            'id': expense.id,
            'title': expense.title or expense.expense_category.name,
            'amount': _money(expense.amount),
            'date': expense.created_at,
        })
    records = StudentCheckInCheckOut.objects.for_hostel(hostel_id).select_related('student').order_by('-created_at')
    for record in records[:RECENT_PER_SOURCE]:
        is_checkout = bool(record.checkout_time) and not record.checkin_time
        items.append({
            'type': 'checkout' if is_checkout else 'checkin',
            'id': record.id,
            'student': record.student.student_name,
            'status': record.status,
            'date': (record.checkout_time if is_checkout else record.checkin_time) or record.created_at,
        })
    items.sort(key=lambda item: item['date'], reverse=True)
    return [dict(item, date=item['date'].isoformat()) for item in items[:RECENT_LIMIT]]


def build_dashboard_summary(hostel_id: Optional[int] = None) -> dict:
    ttl = getattr(settings, 'DASHBOARD_CACHE_SECONDS', 0)
    cache_key = f'dashboard:summary:{hostel_id or "all"}'
    if ttl:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached
    summary = {
        'rooms': room_stats(hostel_id),
        'students': student_stats(hostel_id),
        'finance': finance_stats(hostel_id),
        'recent_activity': recent_activity(hostel_id),
        'calculation_date': timezone.now().isoformat(),
    }
    if ttl:
        cache.set(cache_key, summary, ttl)
    return summary

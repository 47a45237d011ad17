from decimal import Decimal

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from hostel.models import Attachment, Expense, ExpenseCategory, Income, IncomeType, PaymentType, Salary

pytestmark = pytest.mark.django_db


def pdf(name):
    return SimpleUploadedFile(name, b'%PDF-1.4 receipt', content_type='application/pdf')


@pytest.fixture
def income_type(db):
    return IncomeType.objects.create(title='Monthly rent')


@pytest.fixture
def payment_type(db):
    return PaymentType.objects.create(name='Cash')


@pytest.fixture
def category(db):
    return ExpenseCategory.objects.create(name='Utilities')


def test_income_tracks_due_and_payment_status(admin_client, student, income_type, payment_type):
    r = admin_client.post('/api/incomes', {
        'student_id': student.id,
        'income_type_id': income_type.id,
        'payment_type_id': payment_type.id,
        'amount': '1000.00',
        'received_amount': '400.00',
        'title': 'October rent',
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['due_amount'] == '600.00'
    assert data['payment_status'] == 'partial'
    assert data['income_type'] == 'Monthly rent'
    assert data['hostel'] == student.hostel_id

    r = admin_client.patch(f"/api/incomes/{data['id']}", {'received_amount': '1000.00'}, format='json')
    assert r.data['data']['due_amount'] == '0.00'
    assert r.data['data']['payment_status'] == 'paid'


def test_income_received_cannot_exceed_amount(admin_client, student):
    r = admin_client.post('/api/incomes', {'student_id': student.id, 'amount': '100', 'received_amount': '150'}, format='json')
    assert r.status_code == 422
    assert 'received_amount' in r.data['error']['errors']


def test_income_list_summary(admin_client, student):
    Income.objects.create(student=student, amount=Decimal('500'), received_amount=Decimal('500'))
    Income.objects.create(student=student, amount=Decimal('300'))
    r = admin_client.get('/api/incomes', {'student_id': student.id})
    summary = r.data['summary']
    assert summary['count'] == 2
    assert summary['total_amount'] == Decimal('800')
    assert summary['total_due'] == Decimal('300')


def test_income_filters_reject_non_numeric_ids(admin_client):
    r = admin_client.get('/api/incomes', {'student_id': 'abc'})
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_failed'
    assert admin_client.get('/api/expenses', {'expense_category_id': 'abc'}).status_code == 422


def test_student_financial_views(student_client, student):
    Income.objects.create(student=student, amount=Decimal('500'), received_amount=Decimal('200'))
    Income.objects.create(student=student, amount=Decimal('300'), received_amount=Decimal('300'))
    Income.objects.create(student=student, amount=Decimal('100'))

    r = student_client.get('/api/student/financials')
    assert r.data['summary']['total_due'] == Decimal('400')
    assert r.data['pagination']['total'] == 3
    assert student_client.get('/api/student/payment-history').data['pagination']['total'] == 2
    r = student_client.get('/api/student/outstanding-dues')
    assert r.data['pagination']['total'] == 2
    assert r.data['summary']['total_due'] == Decimal('400')


def test_expense_payment_status_is_derived(admin_client, category):
    r = admin_client.post('/api/expenses', {
        'expense_category_id': category.id, 'amount': '250.00', 'paid_amount': '100.00',
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['payment_status'] == 'partially_paid'
    assert r.data['data']['due_amount'] == '150.00'

    r = admin_client.post('/api/expenses', {'expense_category_id': category.id, 'amount': '80'}, format='json')
    assert r.data['data']['payment_status'] == 'paid'

    r = admin_client.post('/api/expenses', {
        'expense_category_id': category.id, 'amount': '80', 'paid_amount': '0',
    }, format='json')
    assert r.data['data']['payment_status'] == 'credit'


def test_expense_paid_cannot_exceed_amount(admin_client, category):
    r = admin_client.post('/api/expenses', {
        'expense_category_id': category.id, 'amount': '10', 'paid_amount': '11',
    }, format='json')
    assert r.status_code == 422


def test_expenses_by_date_range(admin_client, category):
    Expense.objects.create(expense_category=category, amount=Decimal('10'), expense_date='2024-01-10')
    Expense.objects.create(expense_category=category, amount=Decimal('20'), expense_date='2024-02-10')
    r = admin_client.get('/api/expenses/date-range', {'start_date': '2024-01-01', 'end_date': '2024-01-31'})
    assert r.data['pagination']['total'] == 1
    r = admin_client.get('/api/expenses/date-range', {'start_date': '2024-02-01', 'end_date': '2024-01-01'})
    assert r.status_code == 422
    assert 'end_date' in r.data['error']['errors']


def test_expense_category_in_use_cannot_be_deleted(admin_client, category):
    Expense.objects.create(expense_category=category, amount=Decimal('10'))
    r = admin_client.delete(f'/api/expense-categories/{category.id}')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'business_rule'
    assert ExpenseCategory.objects.filter(pk=category.id).exists()


def test_expense_category_names_are_unique_ignoring_case(admin_client, category):
    r = admin_client.post('/api/expense-categories', {'name': 'UTILITIES'}, format='json')
    assert r.status_code == 422
    assert 'name' in r.data['error']['errors']


def test_salary_is_unique_per_staff_and_month(admin_client, staff):
    payload = {'staff_id': staff.id, 'amount': '25000', 'month': 3, 'year': 2024}
    r = admin_client.post('/api/salaries', payload, format='json')
    assert r.status_code == 201
    assert r.data['data']['month_name'] == 'March'
    assert r.data['data']['hostel'] == staff.hostel_id

    r = admin_client.post('/api/salaries', payload, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'conflict'
    assert Salary.objects.count() == 1


def test_salary_update_into_taken_month_conflicts(admin_client, staff):
    Salary.objects.create(staff=staff, amount=Decimal('100'), month=1, year=2024)
    second = Salary.objects.create(staff=staff, amount=Decimal('100'), month=2, year=2024)
    r = admin_client.patch(f'/api/salaries/{second.id}', {'month': 1}, format='json')
    assert r.status_code == 409


def test_salary_year_upper_bound(admin_client, staff):
    r = admin_client.post('/api/salaries', {
        'staff_id': staff.id, 'amount': '100', 'month': 1, 'year': timezone.localdate().year + 2,
    }, format='json')
    assert r.status_code == 422
    assert 'year' in r.data['error']['errors']


def test_salary_statistics(admin_client, staff):
    today = timezone.localdate()
    Salary.objects.create(staff=staff, amount=Decimal('100'), month=today.month, year=today.year, status='paid')
    other_month = 1 if today.month != 1 else 2
    Salary.objects.create(staff=staff, amount=Decimal('50'), month=other_month, year=today.year)
    r = admin_client.get('/api/salaries/statistics')
    stats = r.data['data']
    assert stats['current_month']['total_salaries'] == 1
    assert stats['current_month']['paid_amount'] == Decimal('100')
    assert stats['current_month']['pending_count'] == 0
    assert stats['current_year']['total_amount'] == Decimal('150')


def test_staff_salary_history(staff_client, staff):
    Salary.objects.create(staff=staff, amount=Decimal('100'), month=1, year=2023)
    Salary.objects.create(staff=staff, amount=Decimal('100'), month=1, year=2024, status='paid')
    r = staff_client.get('/api/my-staff/salary-history', {'year': 2024})
    assert r.data['pagination']['total'] == 1
    r = staff_client.get('/api/my-staff/financials')
    assert r.data['summary']['total_paid'] == Decimal('100')
    assert r.data['summary']['total_pending'] == Decimal('100')


def test_dashboard_summary(admin_client, student, category):
    Income.objects.create(student=student, amount=Decimal('700'), received_amount=Decimal('200'))
    Expense.objects.create(expense_category=category, amount=Decimal('120.50'))
    r = admin_client.get('/api/admin/dashboard/stats')
    assert r.status_code == 200
    data = r.data['data']
    assert set(data) == {'rooms', 'students', 'finance', 'recent_activity', 'calculation_date'}
    assert data['rooms'] == {'total_rooms': 1, 'total_capacity': 2, 'occupied_beds': 1, 'available_beds': 1}
    assert data['students']['total'] == 1
    assert data['finance']['monthly_incomes'] == 700.0
    assert data['finance']['monthly_expenses'] == 120.5
    assert data['finance']['outstanding_total'] == 500.0
    assert data['finance']['outstanding_count'] == 1
    assert {item['type'] for item in data['recent_activity']} == {'income', 'expense'}


def test_expense_attachment_can_be_removed(admin_client, category):
    r = admin_client.post('/api/expenses', {
        'expense_category_id': category.id, 'amount': '120',
        'attachments': [pdf('bill.pdf'), pdf('receipt.pdf')],
    }, format='multipart')
    assert r.status_code == 201
    expense_id = r.data['data']['id']
    bill, receipt = r.data['data']['attachments']
    assert default_storage.exists(bill['path'])

    r = admin_client.delete(f"/api/expenses/{expense_id}/attachments/{bill['id']}")
    assert r.status_code == 200
    assert [a['name'] for a in r.data['data']['attachments']] == ['receipt.pdf']
    assert not default_storage.exists(bill['path'])
    assert Attachment.objects.filter(expense_id=expense_id).count() == 1


def test_expense_attachment_must_belong_to_expense(admin_client, category):
    first = admin_client.post('/api/expenses', {
        'expense_category_id': category.id, 'amount': '10', 'attachments': [pdf('a.pdf')],
    }, format='multipart').data['data']
    other = Expense.objects.create(expense_category=category, amount=Decimal('5'))
    r = admin_client.delete(f"/api/expenses/{other.id}/attachments/{first['attachments'][0]['id']}")
    assert r.status_code == 404
    assert Attachment.objects.count() == 1

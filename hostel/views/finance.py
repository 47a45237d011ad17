"""
Income and expense bookkeeping (admin).
"""
from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError

from hostel.models import Expense, ExpenseCategory, Income, IncomeType, PaymentType
from hostel.permissions import IsAdminRole
from hostel.serializers.fields import IMAGE_OR_PDF, file_list, validate_upload
from hostel.serializers.finance import (
    DateRangeQuerySerializer,
    ExpenseCategorySerializer,
    ExpenseSerializer,
    IncomeSerializer,
    IncomeTypeSerializer,
    PaymentTypeSerializer,
)
from hostel.services import attachments
from hostel.services import finance as finance_service
from hostel.services.images import delete_file, save_upload
from hostel.views.common import created, get_scoped, id_filters, ok, paginate, scoped, upload_from

INCOME_DIR = 'incomes'
EXPENSE_DIR = 'expenses'


def _lookup_crud(request, model, serializer_class, pk=None, *, label: str, on_delete=None):
    """List/create/retrieve/update/delete for the small lookup tables."""
    if pk is None:
        if request.method == 'GET':
            return paginate(request, model.objects.order_by('id'), serializer_class)
        s = serializer_class(data=request.data)
        s.is_valid(raise_exception=True)
        return created(serializer_class(s.save()).data, message=f'{label} created successfully')

    obj = get_object_or_404(model, pk=pk)
    if request.method == 'GET':
        return ok(serializer_class(obj).data)
    if request.method == 'DELETE':
        (on_delete or (lambda o: o.delete()))(obj)
        return ok(None, message=f'{label} deleted successfully')
    s = serializer_class(obj, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    return ok(serializer_class(s.save()).data, message=f'{label} updated successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def income_types(request):
    return _lookup_crud(request, IncomeType, IncomeTypeSerializer, label='Income type')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def income_type_detail(request, pk: int):
    return _lookup_crud(request, IncomeType, IncomeTypeSerializer, pk, label='Income type')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def payment_types(request):
    return _lookup_crud(request, PaymentType, PaymentTypeSerializer, label='Payment type')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def payment_type_detail(request, pk: int):
    return _lookup_crud(request, PaymentType, PaymentTypeSerializer, pk, label='Payment type')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def expense_categories(request):
    return _lookup_crud(request, ExpenseCategory, ExpenseCategorySerializer, label='Expense category')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def expense_category_detail(request, pk: int):
    return _lookup_crud(
        request, ExpenseCategory, ExpenseCategorySerializer, pk,
        label='Expense category', on_delete=finance_service.delete_expense_category,
    )


# ---------------------------------------------------------------------
# Incomes
# ---------------------------------------------------------------------
def _incomes(request):
    return scoped(Income, request).select_related('student', 'income_type', 'payment_type')


def _date_filter(qs, params, field: str):
    if params.get('start_date') and params.get('end_date'):
        s = DateRangeQuerySerializer(data=params)
        s.is_valid(raise_exception=True)
        qs = qs.filter(**{f'{field}__range': (s.validated_data['start_date'], s.validated_data['end_date'])})
    return qs


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def incomes(request):
    if request.method == 'GET':
        qs = _incomes(request)
        qs = qs.filter(**id_filters(request, 'student_id', 'income_type_id', 'payment_type_id'))
        qs = _date_filter(qs, request.query_params, 'income_date')
        extra = {'summary': finance_service.income_totals(qs)}
        return paginate(request, qs, IncomeSerializer, **extra)

    s = IncomeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'income_attachment')
    with transaction.atomic():
        income = s.save()
        if upload is not None:
            save_upload(upload, INCOME_DIR, instance=income, field='income_attachment')
    return created(IncomeSerializer(income).data, message='Income created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def income_detail(request, pk: int):
    income = get_scoped(Income, request, pk, qs=_incomes(request))
    if request.method == 'GET':
        return ok(IncomeSerializer(income).data)

    if request.method == 'DELETE':
        path = income.income_attachment
        income.delete()
        delete_file(path)
        return ok(None, message='Income deleted successfully')

    s = IncomeSerializer(income, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    return ok(IncomeSerializer(s.save()).data, message='Income updated successfully')


@api_view(['POST'])
@permission_classes([IsAdminRole])
def income_attachment(request, pk: int):
    income = get_scoped(Income, request, pk)
    upload = upload_from(request, 'income_attachment')
    if upload is None:
        raise ValidationError({'income_attachment': ['The income attachment field is required.']})
    path = save_upload(upload, INCOME_DIR, instance=income, field='income_attachment')
    return ok({'id': income.id, 'income_attachment': path}, message='Attachment uploaded successfully')


# ---------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------
def _expenses(request):
    return scoped(Expense, request).select_related('expense_category').prefetch_related('attachments')


def _expense_files(request) -> list:
    files = file_list(request, 'attachments')
    for f in files:
        validate_upload(f, field='attachments', extensions=IMAGE_OR_PDF)
    return files


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def expenses(request):
    if request.method == 'GET':
        qs = _expenses(request)
        params = request.query_params
        qs = qs.filter(**id_filters(request, 'expense_category_id', 'student_id', 'staff_id'))
        if params.get('payment_status'):
            qs = qs.filter(payment_status=params['payment_status'])
        qs = _date_filter(qs, params, 'expense_date')
        return paginate(request, qs, ExpenseSerializer)

    s = ExpenseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = upload_from(request, 'expense_attachment')
    files = _expense_files(request)
    with transaction.atomic():
        expense = s.save()
        if upload is not None:
            save_upload(upload, EXPENSE_DIR, instance=expense, field='expense_attachment')
        if files:
            attachments.add_attachments(expense, files, EXPENSE_DIR)
    return created(ExpenseSerializer(expense).data, message='Expense created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def expense_detail(request, pk: int):
    expense = get_scoped(Expense, request, pk)
    if request.method == 'GET':
        return ok(ExpenseSerializer(expense).data)

    if request.method == 'DELETE':
        path = expense.expense_attachment
        with transaction.atomic():
            attachments.delete_all(expense)
            expense.delete()
        delete_file(path)
        return ok(None, message='Expense deleted successfully')

    s = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    files = _expense_files(request)
    with transaction.atomic():
        expense = s.save()
        if files:
            attachments.add_attachments(expense, files, EXPENSE_DIR)
    return ok(ExpenseSerializer(expense).data, message='Expense updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def expenses_by_category(request, category_id: int):
    category = get_object_or_404(ExpenseCategory, pk=category_id)
    return paginate(request, _expenses(request).filter(expense_category=category), ExpenseSerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def expenses_by_date_range(request):
    s = DateRangeQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    qs = _expenses(request).filter(
        expense_date__range=(s.validated_data['start_date'], s.validated_data['end_date'])
    )
    return paginate(request, qs, ExpenseSerializer)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def expense_attachment(request, pk: int):
    expense = get_scoped(Expense, request, pk)
    upload = upload_from(request, 'expense_attachment')
    if upload is None:
        raise ValidationError({'expense_attachment': ['The expense attachment field is required.']})
    path = save_upload(upload, EXPENSE_DIR, instance=expense, field='expense_attachment')
    return ok({'id': expense.id, 'expense_attachment': path}, message='Attachment uploaded successfully')


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def expense_attachment_delete(request, pk: int, attachment_id: int):
    expense = get_scoped(Expense, request, pk)
    attachments.remove_attachment(get_object_or_404(expense.attachments.all(), pk=attachment_id))
    return ok(ExpenseSerializer(expense).data, message='Attachment deleted successfully')

"""
Staff salaries (admin).  One salary per staff member and month; a
duplicate is answered with 409.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes

from hostel.models import Salary, Staff
from hostel.permissions import IsAdminRole
from hostel.serializers.finance import SalaryQuerySerializer, SalarySerializer
from hostel.services import finance as finance_service
from hostel.views.common import created, get_scoped, ok, paginate, scoped


def _salaries(request):
    return scoped(Salary, request).select_related('staff')


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def salaries(request):
    if request.method == 'GET':
        q = SalaryQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = _salaries(request)
        for key, value in q.validated_data.items():
            qs = qs.filter(**{key: value})
        return paginate(request, qs.order_by('-year', '-month', '-id'), SalarySerializer)

    s = SalarySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    finance_service.check_salary_unique(vd['staff'], vd['month'], vd['year'])
    salary = finance_service.save_salary(s)
    return created(SalarySerializer(salary).data, message='Salary record created successfully')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def salary_detail(request, pk: int):
    salary = get_scoped(Salary, request, pk, qs=_salaries(request))
    if request.method == 'GET':
        return ok(SalarySerializer(salary).data)

    if request.method == 'DELETE':
        salary.delete()
        return ok(None, message='Salary record deleted successfully')

    s = SalarySerializer(salary, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    finance_service.check_salary_unique(
        vd.get('staff', salary.staff), vd.get('month', salary.month), vd.get('year', salary.year),
        exclude_pk=salary.pk,
    )
    salary = finance_service.save_salary(s)
    return ok(SalarySerializer(salary).data, message='Salary record updated successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def staff_salaries(request, staff_id: int):
    staff = get_scoped(Staff, request, staff_id)
    return paginate(request, Salary.objects.filter(staff=staff).select_related('staff'), SalarySerializer)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def salary_statistics(request):
    return ok(finance_service.salary_statistics(request.hostel_id))

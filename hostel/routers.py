"""
URL table of the hostel API.

Paths follow the routes the frontend calls, without trailing slashes.
Admin resources live directly under ``/api/``; the student portal is
under ``/api/student/`` and the staff portal under ``/api/my-staff/``.
"""
from django.urls import path, include

from .auth_views import (
    active_sessions_view,
    change_password_view,
    check_permission_view,
    login_view,
    logout_all_view,
    logout_view,
    me_view,
    refresh_token_view,
    register_view,
)
from .views import (
    attendance,
    blocks,
    chats,
    complaints,
    dashboard,
    finance,
    health,
    inquiries,
    notices,
    people,
    rooms,
    salaries,
    staff_portal,
    student_portal,
)


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/register', register_view),
    path('api/auth/logout', logout_view),
    path('api/auth/logout-all', logout_all_view),
    path('api/auth/me', me_view),
    path('api/auth/change-password', change_password_view),
    path('api/auth/refresh-token', refresh_token_view),
    path('api/auth/check-permission', check_permission_view),
    path('api/auth/active-sessions', active_sessions_view),

    # Dashboard
    path('api/admin/dashboard/stats', dashboard.dashboard_stats),

    # Blocks and rooms
    path('api/blocks', blocks.blocks),
    path('api/blocks/<int:pk>', blocks.block_detail),
    path('api/rooms', rooms.rooms),
    path('api/rooms/<int:pk>', rooms.room_detail),
    path('api/rooms/<int:pk>/students', rooms.room_students),
    path('api/available-rooms', rooms.available_rooms),

    # Students and staff
    path('api/students', people.students),
    path('api/students/fields/metadata', people.student_fields),
    path('api/students/<int:pk>', people.student_detail),
    path('api/staff', people.staff_list),
    path('api/staff/fields/metadata', people.staff_fields),
    path('api/staff/<int:pk>', people.staff_detail),
    path('api/staff/<int:staff_id>/salaries', salaries.staff_salaries),

    # Complaints and chat
    path('api/complains', complaints.complains),
    path('api/complains/<int:pk>', complaints.complain_detail),
    path('api/chats/complaint/<int:complain_id>', chats.complaint_chats),
    path('api/chats/send', chats.send_chat),
    path('api/chats/mark-read', chats.mark_read),
    path('api/chats/unread-count', chats.unread_count),
    path('api/chats/<int:pk>/edit', chats.edit_chat),
    path('api/chats/<int:pk>', chats.delete_chat),

    # Notices
    path('api/notices', notices.notices),
    path('api/notices/user', notices.user_notices),
    path('api/notices/target/<str:target_type>', notices.notices_by_target),
    path('api/notices/student/<int:student_id>', notices.notices_for_student),
    path('api/notices/staff/<int:staff_id>', notices.notices_for_staff),
    path('api/notices/block/<int:block_id>', notices.notices_for_block),
    path('api/notices/<int:pk>', notices.notice_detail),
    path('api/notices/<int:pk>/attachments/<int:attachment_id>', notices.notice_attachment_delete),
    path('api/notices-create/<str:kind>', notices.notice_selection),

    # Inquiries
    path('api/inquiries', inquiries.inquiries),
    path('api/inquiries/block/<int:block_id>', inquiries.inquiries_by_block),
    path('api/inquiries/<int:pk>', inquiries.inquiry_detail),
    path('api/inquiries/<int:pk>/attachments/<int:attachment_id>', inquiries.inquiry_attachment_delete),
    path('api/inquiry-seaters', inquiries.inquiry_seaters),
    path('api/inquiry-seaters/inquiry/<int:inquiry_id>', inquiries.seaters_by_inquiry),
    path('api/inquiry-seaters/room/<int:room_id>', inquiries.seaters_by_room),
    path('api/inquiry-seaters/<int:pk>', inquiries.inquiry_seater_detail),

    # Finance
    path('api/income-types', finance.income_types),
    path('api/income-types/<int:pk>', finance.income_type_detail),
    path('api/payment-types', finance.payment_types),
    path('api/payment-types/<int:pk>', finance.payment_type_detail),
    path('api/incomes', finance.incomes),
    path('api/incomes/<int:pk>', finance.income_detail),
    path('api/incomes/<int:pk>/attachment', finance.income_attachment),
    path('api/expense-categories', finance.expense_categories),
    path('api/expense-categories/<int:pk>', finance.expense_category_detail),
    path('api/expenses', finance.expenses),
    path('api/expenses/category/<int:category_id>', finance.expenses_by_category),
    path('api/expenses/date-range', finance.expenses_by_date_range),
    path('api/expenses/<int:pk>', finance.expense_detail),
    path('api/expenses/<int:pk>/attachment', finance.expense_attachment),
    path('api/expenses/<int:pk>/attachments/<int:attachment_id>', finance.expense_attachment_delete),

    # Salaries
    path('api/salaries', salaries.salaries),
    path('api/salaries/statistics', salaries.salary_statistics),
    path('api/salaries/<int:pk>', salaries.salary_detail),

    # Check-in / check-out (admin)
    path('api/student-checkincheckouts', attendance.student_records),
    path('api/student-checkincheckouts/today/attendance', attendance.student_today_attendance),
    path('api/student-checkincheckouts/<int:pk>', attendance.student_record_detail),
    path('api/student-checkincheckouts/<int:pk>/approve-checkout', attendance.student_approve_checkout),
    path('api/student-checkincheckouts/<int:pk>/decline-checkout', attendance.student_decline_checkout),
    path('api/staff-checkincheckouts', attendance.staff_records),
    path('api/staff-checkincheckouts/today/attendance', attendance.staff_today_attendance),
    path('api/staff-checkincheckouts/<int:pk>', attendance.staff_record_detail),
    path('api/staff-checkincheckouts/<int:pk>/approve-checkout', attendance.staff_approve_checkout),
    path('api/staff-checkincheckouts/<int:pk>/decline-checkout', attendance.staff_decline_checkout),

    # Student portal
    path('api/student/profile', student_portal.profile),
    path('api/student/complains', student_portal.complains),
    path('api/student/complains/<int:pk>', student_portal.complain_detail),
    path('api/student/notices', student_portal.notices),
    path('api/student/notices/<int:pk>', student_portal.notice_detail),
    path('api/student/financials', student_portal.financials),
    path('api/student/payment-history', student_portal.payment_history),
    path('api/student/outstanding-dues', student_portal.outstanding_dues),
    path('api/student/checkin', student_portal.checkin),
    path('api/student/checkout', student_portal.checkout),
    path('api/student/checkincheckouts', student_portal.checkincheckouts),
    path('api/student/today-attendance', student_portal.today_attendance),

    # Staff portal
    path('api/my-staff/profile', staff_portal.profile),
    path('api/my-staff/complaints-list', staff_portal.complaints_list),
    path('api/my-staff/complaints-create', staff_portal.complaints_create),
    path('api/my-staff/complaints-view/<int:pk>', staff_portal.complaints_view),
    path('api/my-staff/complaints-update/<int:pk>', staff_portal.complaints_update),
    path('api/my-staff/notices', staff_portal.notices),
    path('api/my-staff/notices/<int:pk>', staff_portal.notice_detail),
    path('api/my-staff/financials', staff_portal.financials),
    path('api/my-staff/salary-history', staff_portal.salary_history),
    path('api/my-staff/checkin', staff_portal.checkin),
    path('api/my-staff/checkout', staff_portal.checkout),
    path('api/my-staff/my-checkincheckouts', staff_portal.my_checkincheckouts),
    path('api/my-staff/today-attendance', staff_portal.today_attendance),
]

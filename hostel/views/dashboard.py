"""
Administrative dashboard endpoint.

Returns occupancy, resident and finance figures for the current hostel
together with a short feed of recent activity.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes

from hostel.permissions import IsAdminRole
from hostel.services.dashboard import build_dashboard_summary
from hostel.views.common import ok


@api_view(['GET'])
@permission_classes([IsAdminRole])
def dashboard_stats(request):
    return ok(build_dashboard_summary(request.hostel_id))

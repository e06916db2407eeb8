"""
Reports app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/reports/', include('reports.urls'))

Endpoint summary
----------------
GET  /api/reports/                 — Available reports + filter choices.
POST /api/reports/case-contacts/   — Case contacts CSV/XLSX.
POST /api/reports/mileage/         — Mileage reimbursement report.
POST /api/reports/missing-data/    — Active cases missing hearing/court-order data.
POST /api/reports/learning-hours/  — Volunteer learning hours.
"""

from django.urls import path

from . import views

app_name = "reports"

urlpatterns = [
    path("", views.ReportIndexView.as_view(), name="index"),
    path("<slug:report_slug>/", views.ReportExportView.as_view(), name="export"),
]

from django.urls import path

from .views import AllocationView, InsightsView, ReportDetailView, ReportView, SavingsPlanView

urlpatterns = [
    path("allocations/", AllocationView.as_view(), name="allocation-create"),
    path("savings-plan/", SavingsPlanView.as_view(), name="savings-plan-create"),
    path("insights/", InsightsView.as_view(), name="insights-create"),
    path("reports/", ReportView.as_view(), name="report-create"),
    path("reports/<int:pk>/", ReportDetailView.as_view(), name="report-detail"),
]

import tempfile

import django
from django.conf import settings

if not settings.configured:
    settings.configure(
        SECRET_KEY="tests",
        DEBUG=True,
        ALLOWED_HOSTS=["testserver"],
        INSTALLED_APPS=[
            "django.contrib.contenttypes",
            "django.contrib.auth",
            "rest_framework",
            "server.budget_api",
        ],
        DATABASES={"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}},
        DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
        USE_TZ=False,
        ROOT_URLCONF="server.budget_api.urls",
        MEDIA_ROOT=tempfile.mkdtemp(prefix="fincoach-media-"),
    )
    django.setup()

from pathlib import Path  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from django.core.files.uploadedfile import SimpleUploadedFile  # noqa: E402
from django.core.management import call_command  # noqa: E402
from rest_framework.test import APIRequestFactory  # noqa: E402

from fincoach_core.services.trends import INCOME_SETUP_MESSAGE  # noqa: E402
from server.budget_api import views  # noqa: E402
from server.budget_api.models import InsightReport  # noqa: E402
from server.budget_api.tasks import build_insight_report  # noqa: E402
from server.budget_api.views import (  # noqa: E402
    AllocationView,
    InsightsView,
    ReportDetailView,
    ReportView,
    SavingsPlanView,
)

factory = APIRequestFactory()


def _post(view, path, payload):
    request = factory.post(path, payload, format="json")
    return view.as_view()(request)


def test_allocation_endpoint():
    response = _post(
        AllocationView,
        "/allocations/",
        {
            "monthly_income": 50000,
            "goal": "Save for an emergency fund",
            "primary_category": "Food",
            "transactions": [
                {"amount": 1200, "type": "Expense", "category": "Food", "date": "2024-05-10T10:00:00"},
            ],
        },
    )
    assert response.status_code == 200
    allocations = response.data["allocations"]
    assert len(allocations) == 10
    assert sum(a["percentage"] for a in allocations) == pytest.approx(100, abs=0.1)


def test_allocation_endpoint_validates_input():
    response = _post(AllocationView, "/allocations/", {"monthly_income": -5, "primary_category": "Pets"})
    assert response.status_code == 400
    assert set(response.data) == {"monthly_income", "primary_category"}


def test_savings_plan_endpoint():
    response = _post(
        SavingsPlanView,
        "/savings-plan/",
        {"target_amount": 600000, "months_to_target": 6, "monthly_income": 50000},
    )
    assert response.status_code == 200
    assert response.data == {"monthly_contribution": 25000.0, "is_realistic": False, "adjusted_months": 24}


def test_savings_plan_endpoint_rejects_zero_months():
    response = _post(
        SavingsPlanView,
        "/savings-plan/",
        {"target_amount": 1000, "months_to_target": 0, "monthly_income": 50000},
    )
    assert response.status_code == 400


def test_insights_endpoint():
    response = _post(
        InsightsView,
        "/insights/",
        {
            "monthly_income": 10000,
            "goal": "Save for an emergency fund",
            "as_of": "2024-06-15T12:00:00",
            "transactions": [
                {"amount": 4000, "type": "Expense", "category": "Food", "date": "2024-05-01T00:00:00"},
            ],
        },
    )
    assert response.status_code == 200
    assert response.data["goal"]["goal"] == "Save for an emergency fund"
    assert response.data["goal"]["months_remaining"] == 100
    assert response.data["trends"][0]["category"] == "Food"
    assert response.data["trends"][0]["trend"] == "increasing"
    assert response.data["insights"][0].startswith("Your food expenses account for 40%")


def test_insights_endpoint_without_income():
    response = _post(InsightsView, "/insights/", {"monthly_income": 0})
    assert response.status_code == 200
    assert response.data["insights"] == [INCOME_SETUP_MESSAGE]


FIXTURE = Path(__file__).parent / "data" / "ledger.csv"


@pytest.fixture(scope="module")
def db():
    call_command("migrate", run_syncdb=True, verbosity=0)


def _report(ledger_path, **profile):
    return InsightReport.objects.create(
        name="monthly",
        ledger_path=str(ledger_path),
        profile={"monthly_income": 50000, "financial_goal": "Pay off debt", **profile},
    )


def test_report_task_completes(db):
    report = _report(FIXTURE)
    assert report.status == "pending"

    build_insight_report(report.id)

    report.refresh_from_db()
    assert report.status == "completed"
    assert report.error == ""
    assert set(report.result) == {"as_of", "allocations", "goal", "trends", "insights"}
    assert report.result["goal"]["goal"] == "Pay off debt"
    assert len(report.result["allocations"]) == 10


def test_report_task_records_failure(db, tmp_path):
    report = _report(tmp_path / "missing.csv")

    build_insight_report(report.id)

    report.refresh_from_db()
    assert report.status == "failed"
    assert "missing.csv" in report.error
    assert report.result is None


def test_report_task_ignores_deleted_report(db):
    build_insight_report(987654)
    assert not InsightReport.objects.filter(id=987654).exists()


def test_report_endpoint_queues_and_serves_report(db, monkeypatch):
    queued = []
    monkeypatch.setattr(views, "build_insight_report", SimpleNamespace(delay=queued.append))

    upload = SimpleUploadedFile("ledger.csv", FIXTURE.read_bytes(), content_type="text/csv")
    request = factory.post(
        "/reports/",
        {"ledger": upload, "monthly_income": "50000", "goal": "Save for an emergency fund", "name": "june"},
        format="multipart",
    )
    response = ReportView.as_view()(request)
    assert response.status_code == 202
    assert response.data["status"] == "pending"
    assert response.data["profile"]["financial_goal"] == "Save for an emergency fund"
    assert queued == [response.data["id"]]
    assert Path(response.data["ledger_path"]).exists()

    build_insight_report(queued[0])

    detail = ReportDetailView.as_view()(factory.get(f"/reports/{queued[0]}/"), pk=queued[0])
    assert detail.status_code == 200
    assert detail.data["status"] == "completed"
    assert detail.data["result"]["goal"]["goal"] == "Save for an emergency fund"


def test_report_detail_missing(db):
    response = ReportDetailView.as_view()(factory.get("/reports/424242/"), pk=424242)
    assert response.status_code == 404

import dataclasses
import uuid
from pathlib import Path

from django.conf import settings
from django.http import Http404
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from fincoach_core.domain.models import Category
from fincoach_core.domain.periods import to_naive
from fincoach_core.io import payloads
from fincoach_core.io import profile as profile_io
from fincoach_core.services import allocation, goals, trends

from .models import InsightReport
from .serializers import (
    AllocationRequestSerializer,
    InsightReportSerializer,
    InsightRequestSerializer,
    ReportRequestSerializer,
    SavingsPlanRequestSerializer,
    transactions_from,
)
from .tasks import build_insight_report


def _save_uploaded(upload, folder: str) -> Path:
    filename = f"{uuid.uuid4()}_{upload.name}"
    path = Path(settings.MEDIA_ROOT) / folder / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        for chunk in upload.chunks():
            f.write(chunk)
    return path


class AllocationView(APIView):
    parser_classes = [JSONParser]

    def post(self, request):
        serializer = AllocationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = allocation.compute_allocations(
            data["monthly_income"],
            data["goal"],
            Category(data["primary_category"]),
            transactions_from(data["transactions"]),
        )
        return Response({"allocations": payloads.allocations_to_json(result)})


class SavingsPlanView(APIView):
    parser_classes = [JSONParser]

    def post(self, request):
        serializer = SavingsPlanRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        plan = allocation.compute_savings_plan(
            data["target_amount"],
            data["months_to_target"],
            data["monthly_income"],
        )
        return Response(dataclasses.asdict(plan))


class InsightsView(APIView):
    parser_classes = [JSONParser]

    def post(self, request):
        serializer = InsightRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        transactions = transactions_from(data["transactions"])
        now = to_naive(data["as_of"]) if data.get("as_of") else None
        income = data["monthly_income"]

        payload = {
            "goal": payloads.goal_to_json(goals.goal_status(transactions, data["goal"], income, now=now)),
            "trends": payloads.analytics_to_json(
                trends.spending_trends(transactions, data["timeframe_months"], now=now)
            ),
            "insights": trends.smart_insights(transactions, income, now=now),
        }
        return Response(payload)


class ReportView(APIView):
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = ReportRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ledger_path = _save_uploaded(data.pop("ledger"), "ledgers")
        profile = serializer.to_profile(data)

        report = InsightReport.objects.create(
            name=data.get("name", ""),
            status="pending",
            ledger_path=str(ledger_path),
            profile=profile_io.profile_to_json(profile),
        )

        build_insight_report.delay(report.id)
        return Response(InsightReportSerializer(report).data, status=status.HTTP_202_ACCEPTED)


class ReportDetailView(APIView):
    def get(self, request, pk: int):
        try:
            report = InsightReport.objects.get(pk=pk)
        except InsightReport.DoesNotExist as exc:
            raise Http404 from exc
        return Response(InsightReportSerializer(report).data)

from __future__ import annotations

from celery import shared_task
from django.db import transaction

from fincoach_core.io import ledger as ledger_io
from fincoach_core.io import payloads
from fincoach_core.io import profile as profile_io
from fincoach_core.logging_setup import get_logger

from .models import InsightReport

logger = get_logger("fincoach_core.server.tasks")


@shared_task
def build_insight_report(report_id: int):
    try:
        report = InsightReport.objects.get(id=report_id)
    except InsightReport.DoesNotExist:
        logger.warning("insight report %s disappeared before processing", report_id)
        return

    with transaction.atomic():
        report.status = "running"
        report.error = ""
        report.save(update_fields=["status", "error"])

    try:
        transactions = ledger_io.load_ledger(report.ledger_path)
        profile = profile_io.profile_from_json(report.profile or {})
        result = payloads.insight_report(transactions, profile)

        with transaction.atomic():
            report.result = result
            report.status = "completed"
            report.save(update_fields=["result", "status"])
    except Exception as exc:  # noqa: BLE001
        logger.exception("insight report %s failed", report_id)
        with transaction.atomic():
            report.status = "failed"
            report.error = str(exc)
            report.save(update_fields=["status", "error"])

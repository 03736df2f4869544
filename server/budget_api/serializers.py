from __future__ import annotations

from rest_framework import serializers

from fincoach_core.domain.models import Category, Profile, Transaction, TransactionType
from fincoach_core.domain.periods import to_naive

from .models import InsightReport

CATEGORY_CHOICES = [c.value for c in Category]
TYPE_CHOICES = [t.value for t in TransactionType]


class TransactionSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=False)
    amount = serializers.FloatField(min_value=0.0)
    type = serializers.ChoiceField(choices=TYPE_CHOICES)
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES)
    date = serializers.DateTimeField()
    note = serializers.CharField(required=False, allow_blank=True, default="")

    def to_transaction(self, data: dict) -> Transaction:
        fields = dict(
            amount=data["amount"],
            type=TransactionType(data["type"]),
            category=Category(data["category"]),
            date=to_naive(data["date"]),
            note=data.get("note", ""),
        )
        if data.get("id"):
            fields["id"] = data["id"]
        return Transaction(**fields)


def transactions_from(validated: list) -> list:
    converter = TransactionSerializer()
    return [converter.to_transaction(item) for item in validated]


class AllocationRequestSerializer(serializers.Serializer):
    monthly_income = serializers.FloatField(min_value=0.0)
    goal = serializers.CharField(required=False, allow_blank=True, default="")
    primary_category = serializers.ChoiceField(choices=CATEGORY_CHOICES, default=Category.FOOD.value)
    transactions = TransactionSerializer(many=True, required=False, default=list)


class SavingsPlanRequestSerializer(serializers.Serializer):
    target_amount = serializers.FloatField(min_value=0.0)
    months_to_target = serializers.IntegerField(min_value=1)
    monthly_income = serializers.FloatField(min_value=0.0)


class InsightRequestSerializer(serializers.Serializer):
    monthly_income = serializers.FloatField()
    goal = serializers.CharField(required=False, allow_blank=True, default="")
    timeframe_months = serializers.IntegerField(min_value=1, default=3)
    as_of = serializers.DateTimeField(required=False)
    transactions = TransactionSerializer(many=True, required=False, default=list)


class ReportRequestSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    ledger = serializers.FileField()
    monthly_income = serializers.FloatField(min_value=0.0)
    goal = serializers.CharField(required=False, allow_blank=True, default="")
    primary_category = serializers.ChoiceField(choices=CATEGORY_CHOICES, default=Category.FOOD.value)
    currency = serializers.CharField(required=False, max_length=8, default="₹")

    def to_profile(self, data: dict) -> Profile:
        return Profile(
            currency=data.get("currency", "₹"),
            monthly_income=data["monthly_income"],
            financial_goal=data.get("goal", ""),
            primary_expense_category=Category(data.get("primary_category", Category.FOOD.value)),
        )


class InsightReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = InsightReport
        fields = [
            "id",
            "created_at",
            "name",
            "status",
            "ledger_path",
            "profile",
            "result",
            "error",
        ]

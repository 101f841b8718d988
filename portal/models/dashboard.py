"""
Dashboard Models — Pydantic response models for analytics endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from portal.models.contact import Contact

# =============================================================================
# SERIES (CHARTS)
# =============================================================================


class WeeklySeries(BaseModel):
    """Per-day patient counts for the weekly line chart."""

    days: list[str]
    new_patients: list[int] = Field(alias="newPatients")
    existing_patients: list[int] = Field(alias="existingPatients")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _aligned(self) -> WeeklySeries:
        if not len(self.days) == len(self.new_patients) == len(self.existing_patients):
            raise ValueError("weekly series must be index-aligned")
        return self


class LabeledSeries(BaseModel):
    """Label/count pairs for the bar and pie charts."""

    labels: list[str]
    data: list[int]

    @model_validator(mode="after")
    def _aligned(self) -> LabeledSeries:
        if len(self.labels) != len(self.data):
            raise ValueError("labels and data must be index-aligned")
        return self


class TrendSeries(BaseModel):
    """Appointments per week, oldest first."""

    weeks: list[str]
    data: list[int]

    @model_validator(mode="after")
    def _aligned(self) -> TrendSeries:
        if len(self.weeks) != len(self.data):
            raise ValueError("weeks and data must be index-aligned")
        return self


# =============================================================================
# SUMMARY
# =============================================================================


class Analytics(BaseModel):
    """Aggregate summary of a contact collection for a given "now"."""

    total_patients: int = Field(alias="totalPatients")
    new_patients_today: int = Field(alias="newPatientsToday")
    existing_patients: int = Field(alias="existingPatients")
    new_patients: int = Field(alias="newPatients")
    appointments_today: int = Field(alias="appointmentsToday")
    escalations: int
    weekly_data: WeeklySeries = Field(alias="weeklyData")
    escalation_data: LabeledSeries = Field(alias="escalationData")
    query_type_distribution: LabeledSeries = Field(alias="queryTypeDistribution")
    appointments_trend: TrendSeries = Field(alias="appointmentsTrend")
    demo: bool = False  # True when a sample series replaced empty data

    class Config:
        populate_by_name = True


class DashboardResponse(BaseModel):
    """Dashboard view: summary plus the (optionally filtered) patient list."""

    analytics: Analytics
    patients: list[Contact]

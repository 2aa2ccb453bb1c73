"""Dashboard summary schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crm.timeutils import UTCDateTime


class RecentActivityItem(BaseModel):
    """One row of the merged recent-activity feed"""

    id: int
    source_type: str  # activity | cold_call | onsite_visit
    activity_type: str
    description: Optional[str] = None
    lead_id: Optional[int] = None
    lead_name: Optional[str] = None
    company_name: str = "N/A"
    assigned_to_email: Optional[str] = None
    created_at: UTCDateTime


class DashboardSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_leads: int = Field(0, alias="totalLeads")
    new_leads_this_week: int = Field(0, alias="newLeadsThisWeek")
    leads_by_stage: dict[str, int] = Field(default_factory=dict, alias="leadsByStage")
    leads_by_status: dict[str, int] = Field(default_factory=dict, alias="leadsByStatus")
    total_cold_calls: int = Field(0, alias="totalColdCalls")
    total_onsite_visits: int = Field(0, alias="totalOnsiteVisits")
    recent_activities: list[RecentActivityItem] = Field(default_factory=list, alias="recentActivities")

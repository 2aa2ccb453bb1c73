"""Dashboard summary: lead counts and the merged recent-activity feed."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.models.activity import Activity, ColdCall, OnsiteVisit
from crm.models.contact import Contact
from crm.models.lead import LEAD_STAGES, LEAD_STATUSES, Lead
from crm.models.task import Task
from crm.schemas.dashboard import DashboardSummary, RecentActivityItem
from crm.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

FEED_LIMIT = 25
TASK_MATCH_WINDOW = timedelta(seconds=5)
NO_COMPANY = "N/A"


def cold_call_description(outcome: Optional[str], notes: Optional[str]) -> str:
    text = f"Outcome: {outcome or ''}"
    if notes:
        text += f" - {notes}"
    return text


def onsite_visit_description(address: Optional[str], status: Optional[str], notes: Optional[str]) -> str:
    text = f"Location: {address or NO_COMPANY} - Outcome: {status or NO_COMPANY}"
    if notes:
        text += f" - {notes}"
    return text


def merge_recent_feed(
    *sources: Iterable[RecentActivityItem],
    limit: int = FEED_LIMIT,
) -> list[RecentActivityItem]:
    """
    Merge feed items from several logs, newest first, truncated to ``limit``.

    Items are compared on their UTC instant, so naive (stored) and aware
    timestamps order consistently.
    """
    merged = [item for source in sources for item in source]
    merged.sort(key=lambda item: as_utc(item.created_at), reverse=True)
    return merged[:limit]


async def _count(db: AsyncSession, stmt) -> int:
    return (await db.scalar(stmt)) or 0


async def _grouped_counts(db: AsyncSession, column, keys: tuple[str, ...]) -> dict[str, int]:
    counts = {key: 0 for key in keys}
    result = await db.execute(
        select(column, func.count()).where(column.is_not(None)).group_by(column)
    )
    for value, count in result.all():
        key = value.lower()
        if key in counts:
            counts[key] += count
    return counts


async def _recent_activities(db: AsyncSession, limit: int) -> list[RecentActivityItem]:
    result = await db.execute(
        select(Activity, Lead.name, Contact.company)
        .outerjoin(Lead, Lead.id == Activity.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    rows = result.all()

    # Task-generated activities show who the task went to: the task on the
    # same lead created within a few seconds of the activity row.
    task_lead_ids = {a.lead_id for a, _, _ in rows if a.activity_type == "task" and a.lead_id is not None}
    tasks_by_lead: dict[int, list[Task]] = {}
    if task_lead_ids:
        tasks = await db.execute(select(Task).where(Task.lead_id.in_(task_lead_ids)))
        for task in tasks.scalars().all():
            tasks_by_lead.setdefault(task.lead_id, []).append(task)

    items = []
    for activity, lead_name, company in rows:
        assignee = None
        if activity.activity_type == "task" and activity.lead_id is not None:
            for task in tasks_by_lead.get(activity.lead_id, []):
                if abs(activity.created_at - task.created_at) < TASK_MATCH_WINDOW:
                    assignee = task.assigned_to_email
                    break
        items.append(RecentActivityItem(
            id=activity.id,
            source_type="activity",
            activity_type=activity.activity_type,
            description=activity.description,
            lead_id=activity.lead_id,
            lead_name=lead_name,
            company_name=company or NO_COMPANY,
            assigned_to_email=assignee,
            created_at=activity.created_at,
        ))
    return items


async def _recent_cold_calls(db: AsyncSession, limit: int) -> list[RecentActivityItem]:
    result = await db.execute(
        select(ColdCall, Lead.name, Contact.company)
        .outerjoin(Lead, Lead.id == ColdCall.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .order_by(ColdCall.created_at.desc(), ColdCall.id.desc())
        .limit(limit)
    )
    return [
        RecentActivityItem(
            id=call.id,
            source_type="cold_call",
            activity_type="cold_call",
            description=cold_call_description(call.outcome, call.notes),
            lead_id=call.lead_id,
            lead_name=lead_name,
            company_name=company or NO_COMPANY,
            created_at=call.created_at,
        )
        for call, lead_name, company in result.all()
    ]


async def _recent_onsite_visits(db: AsyncSession, limit: int) -> list[RecentActivityItem]:
    result = await db.execute(
        select(OnsiteVisit, Lead.name, Contact.company)
        .outerjoin(Lead, Lead.id == OnsiteVisit.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .order_by(OnsiteVisit.created_at.desc(), OnsiteVisit.id.desc())
        .limit(limit)
    )
    return [
        RecentActivityItem(
            id=visit.id,
            source_type="onsite_visit",
            activity_type="onsite_visit",
            description=onsite_visit_description(visit.address, visit.status, visit.notes),
            lead_id=visit.lead_id,
            lead_name=lead_name,
            company_name=company or NO_COMPANY,
            created_at=visit.created_at,
        )
        for visit, lead_name, company in result.all()
    ]


async def get_recent_feed(db: AsyncSession, limit: int = FEED_LIMIT) -> list[RecentActivityItem]:
    """Latest ``limit`` rows from each log, merged and cut to ``limit`` overall"""
    activities = await _recent_activities(db, limit)
    calls = await _recent_cold_calls(db, limit)
    visits = await _recent_onsite_visits(db, limit)
    return merge_recent_feed(activities, calls, visits, limit=limit)


async def get_summary(db: AsyncSession) -> DashboardSummary:
    week_ago = utcnow() - timedelta(days=7)

    summary = DashboardSummary(
        total_leads=await _count(db, select(func.count(Lead.id))),
        new_leads_this_week=await _count(db, select(func.count(Lead.id)).where(Lead.created_at >= week_ago)),
        leads_by_stage=await _grouped_counts(db, Lead.stage, LEAD_STAGES),
        leads_by_status=await _grouped_counts(db, Lead.status, LEAD_STATUSES),
        total_cold_calls=await _count(db, select(func.count(ColdCall.id))),
        total_onsite_visits=await _count(db, select(func.count(OnsiteVisit.id))),
        recent_activities=await get_recent_feed(db),
    )
    logger.debug(f"Dashboard summary: leads={summary.total_leads}, feed={len(summary.recent_activities)}")
    return summary

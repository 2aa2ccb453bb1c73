"""Task service.

The task row is the only write with strict guarantees. After it is committed,
the activity log entry and the assignee notification run as best-effort side
effects whose outcomes are returned alongside the task.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError, ValidationError
from crm.models.activity import Activity
from crm.models.contact import Contact
from crm.models.lead import Lead
from crm.models.task import TASK_PRIORITIES, TASK_STATUSES, Task
from crm.schemas.task import TaskCreate, TaskUpdate
from crm.services import notification_service
from crm.services.client_service import get_active_client_row
from crm.services.patching import apply_patch, patch_values
from crm.services.side_effects import SideEffectOutcome, run_best_effort
from crm.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "normal"


@dataclass
class TaskWriteResult:
    task: Task
    side_effects: list[SideEffectOutcome] = field(default_factory=list)


@dataclass(frozen=True)
class _ActivityTarget:
    lead_id: Optional[int] = None
    contact_id: Optional[int] = None


def task_created_description(title: str, description: Optional[str]) -> str:
    text = f'Task created: "{title}"'
    if description:
        text += f" - {description}"
    return text


def _task_order():
    # due date ascending with undated tasks last, then newest first
    return (
        case((Task.due_date.is_(None), 1), else_=0),
        Task.due_date.asc(),
        Task.created_at.desc(),
        Task.id.desc(),
    )


async def list_tasks_for_user(db: AsyncSession, email: str) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.assigned_to_email == email).order_by(*_task_order())
    )
    return list(result.scalars().all())


async def list_tasks_for_lead(db: AsyncSession, lead_id: int) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.lead_id == lead_id).order_by(*_task_order())
    )
    return list(result.scalars().all())


async def list_tasks_for_client(db: AsyncSession, client_id: int) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.client_id == client_id).order_by(*_task_order())
    )
    return list(result.scalars().all())


async def get_task(db: AsyncSession, task_id: int) -> Task:
    task = await db.get(Task, task_id, populate_existing=True)
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def _resolve_target(db: AsyncSession, lead_id: Optional[int], client_id: Optional[int]) -> _ActivityTarget:
    """Lead-scoped tasks log on the lead; client tasks on the client's originating lead, else on the client contact"""
    if lead_id is not None:
        return _ActivityTarget(lead_id=lead_id)
    client_lead_id = await db.scalar(select(Contact.lead_id).where(Contact.id == client_id))
    if client_lead_id is not None:
        return _ActivityTarget(lead_id=client_lead_id)
    return _ActivityTarget(contact_id=client_id)


async def _add_task_activity(db: AsyncSession, target: _ActivityTarget, description: str) -> None:
    db.add(Activity(
        lead_id=target.lead_id,
        contact_id=target.contact_id,
        activity_type="task",
        description=description,
        created_at=utcnow(),
    ))
    await db.flush()


async def create_task(db: AsyncSession, data: TaskCreate) -> TaskWriteResult:
    """
    Create a task for exactly one of a lead or a client.

    Args:
        db: Database session
        data: Validated task payload

    Returns:
        TaskWriteResult with the committed task and the side-effect outcomes

    Raises:
        ValidationError: both or neither of lead_id / client_id given
        NotFoundError: the referenced lead or client does not exist
    """
    if data.lead_id is None and data.client_id is None:
        raise ValidationError("Either leadId or clientId must be provided")
    if data.lead_id is not None and data.client_id is not None:
        raise ValidationError(
            "Cannot assign task to both lead and client. Please provide either leadId or clientId, not both."
        )

    if data.lead_id is not None:
        if await db.scalar(select(Lead.id).where(Lead.id == data.lead_id)) is None:
            raise NotFoundError("Lead not found")
    else:
        await get_active_client_row(db, data.client_id)

    priority = data.priority if data.priority in TASK_PRIORITIES else DEFAULT_PRIORITY
    task = Task(
        lead_id=data.lead_id,
        client_id=data.client_id,
        assigned_to_email=data.assigned_to_email,
        title=data.title,
        description=data.description,
        due_date=to_naive_utc(data.due_date),
        status="open",
        priority=priority,
    )
    db.add(task)
    await db.commit()

    task_id, title, assignee = task.id, task.title, task.assigned_to_email
    logger.info(f"Task created: id={task_id}, assigned_to={assignee}, lead_id={task.lead_id}, client_id={task.client_id}")

    description = task_created_description(title, data.description)

    async def log_activity():
        target = await _resolve_target(db, data.lead_id, data.client_id)
        await _add_task_activity(db, target, description)

    async def notify_assignee():
        target = await _resolve_target(db, data.lead_id, data.client_id)
        await notification_service.create_notification(
            db,
            user_email=assignee,
            type="task_assigned",
            title="New Task Assigned",
            message=f'You have been assigned a new task: "{title}"',
            related_task_id=task_id,
            related_lead_id=target.lead_id,
        )

    outcomes = [
        await run_best_effort(db, "activity", log_activity),
        await run_best_effort(db, "notification", notify_assignee),
    ]

    await db.refresh(task)
    return TaskWriteResult(task=task, side_effects=outcomes)


async def update_task_status(db: AsyncSession, task_id: int, status: str) -> Task:
    if status not in TASK_STATUSES:
        raise ValidationError.for_field("status", f"Status must be one of: {', '.join(TASK_STATUSES)}")
    matched = await apply_patch(db, Task, task_id, {"status": status})
    if not matched:
        await db.rollback()
        raise NotFoundError("Task not found")
    await db.commit()
    return await get_task(db, task_id)


async def update_task(db: AsyncSession, task_id: int, patch: TaskUpdate) -> TaskWriteResult:
    """
    Partial task update.

    Side effects: earlier unread task alerts for the assignee are marked read
    and a fresh 'task_updated' notification is created; an activity row
    records the change.
    """
    values = patch_values(patch, model=Task)
    if not values:
        raise ValidationError("At least one field must be provided")

    current = await get_task(db, task_id)
    lead_id, client_id = current.lead_id, current.client_id
    await apply_patch(db, Task, task_id, values)
    await db.commit()

    task = await get_task(db, task_id)
    title, assignee = task.title, task.assigned_to_email
    logger.info(f"Task updated: id={task_id}, fields={sorted(values)}")

    async def log_activity():
        target = await _resolve_target(db, lead_id, client_id)
        await _add_task_activity(db, target, f'Task updated: "{title}"')

    async def refresh_notification():
        target = await _resolve_target(db, lead_id, client_id)
        await notification_service.mark_task_notifications_read(db, task_id, assignee)
        await notification_service.create_notification(
            db,
            user_email=assignee,
            type="task_updated",
            title="Task Updated",
            message=f'Task "{title}" has been updated',
            related_task_id=task_id,
            related_lead_id=target.lead_id,
        )

    outcomes = [
        await run_best_effort(db, "activity", log_activity),
        await run_best_effort(db, "notification", refresh_notification),
    ]

    await db.refresh(task)
    return TaskWriteResult(task=task, side_effects=outcomes)

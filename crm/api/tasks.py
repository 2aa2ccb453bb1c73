"""Team task endpoints (lead tasks, client tasks and the caller's own list)"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.middleware.identity import get_user_email
from crm.schemas.common import Envelope, ok
from crm.schemas.task import (
    SideEffectResponse,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
    TaskWriteResponse,
)
from crm.services import task_service
from crm.services.task_service import TaskWriteResult

logger = logging.getLogger(__name__)
router = APIRouter(tags=["tasks"])


def _write_response(result: TaskWriteResult) -> TaskWriteResponse:
    response = TaskWriteResponse.model_validate(result.task)
    return response.model_copy(update={
        "side_effects": [SideEffectResponse.model_validate(o) for o in result.side_effects],
    })


@router.get("/tasks/my", response_model=Envelope[list[TaskResponse]])
async def my_tasks(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    tasks = await task_service.list_tasks_for_user(db, user_email)
    return ok([TaskResponse.model_validate(t) for t in tasks], count=len(tasks))


@router.get("/leads/{lead_id}/tasks", response_model=Envelope[list[TaskResponse]])
async def lead_tasks(lead_id: int, db: AsyncSession = Depends(get_db)):
    tasks = await task_service.list_tasks_for_lead(db, lead_id)
    return ok([TaskResponse.model_validate(t) for t in tasks], count=len(tasks))


@router.get("/clients/{client_id}/tasks", response_model=Envelope[list[TaskResponse]])
async def client_tasks(client_id: int, db: AsyncSession = Depends(get_db)):
    tasks = await task_service.list_tasks_for_client(db, client_id)
    return ok([TaskResponse.model_validate(t) for t in tasks], count=len(tasks))


@router.post("/leads/{lead_id}/tasks", response_model=Envelope[TaskWriteResponse], status_code=status.HTTP_201_CREATED)
async def create_lead_task(lead_id: int, body: TaskCreate, db: AsyncSession = Depends(get_db)):
    data = body.model_copy(update={"lead_id": lead_id, "client_id": None})
    result = await task_service.create_task(db, data)
    return ok(_write_response(result), message="Task created successfully")


@router.post("/clients/{client_id}/tasks", response_model=Envelope[TaskWriteResponse], status_code=status.HTTP_201_CREATED)
async def create_client_task(client_id: int, body: TaskCreate, db: AsyncSession = Depends(get_db)):
    data = body.model_copy(update={"client_id": client_id, "lead_id": None})
    result = await task_service.create_task(db, data)
    return ok(_write_response(result), message="Task created successfully")


@router.post("/tasks", response_model=Envelope[TaskWriteResponse], status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, db: AsyncSession = Depends(get_db)):
    """Create a task with exactly one of leadId / clientId in the body"""
    result = await task_service.create_task(db, body)
    return ok(_write_response(result), message="Task created successfully")


@router.patch("/tasks/{task_id}/status", response_model=Envelope[TaskResponse])
async def update_task_status(task_id: int, body: TaskStatusUpdate, db: AsyncSession = Depends(get_db)):
    task = await task_service.update_task_status(db, task_id, body.status)
    return ok(TaskResponse.model_validate(task), message="Task status updated successfully")


@router.patch("/tasks/{task_id}", response_model=Envelope[TaskWriteResponse])
async def update_task(task_id: int, body: TaskUpdate, db: AsyncSession = Depends(get_db)):
    result = await task_service.update_task(db, task_id, body)
    return ok(_write_response(result), message="Task updated successfully")

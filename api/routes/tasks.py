"""
Task endpoints.

Create tasks, drive their execution and accept step results from agents.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from api.dependencies import get_orchestrator
from api.schemas import CreateTaskBody, StepResultBody
from api.serializers import serialize_execution, serialize_task
from core.domain.enums import TaskStatus
from core.domain.errors import StateError
from orchestration import Orchestrator


router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
)
async def create_task(
    body: CreateTaskBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Create a task from a workflow definition.

    The workflow is validated (unique ids, known dependencies, no cycles)
    and stored with every step PENDING. Nothing runs until the task is
    executed.
    """
    task = await orchestrator.create_task(body.to_request())
    return serialize_task(task)


@router.get("", summary="List tasks")
async def list_tasks(
    creator: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> List[Dict[str, Any]]:
    tasks = await orchestrator.list_tasks(creator=creator, status=status)
    return [serialize_task(task) for task in tasks]


@router.get("/{task_id}", summary="Get task")
async def get_task(
    task_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    task = await orchestrator.get_task(task_id)
    return serialize_task(task)


@router.post("/{task_id}/execute", summary="Execute task")
async def execute_task(
    task_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Start a CREATED task.

    Returns as soon as the task is RUNNING; steps are dispatched in the
    background.
    """
    result = await orchestrator.execute(task_id)
    if not result.ok:
        raise result.error
    return serialize_task(result.task)


@router.post("/{task_id}/cancel", summary="Cancel task")
async def cancel_task(
    task_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    canceled = await orchestrator.cancel(task_id)
    if not canceled:
        raise StateError(f"Task {task_id} is not running")
    return serialize_task(await orchestrator.get_task(task_id))


@router.get("/{task_id}/execution", summary="Get execution record")
async def get_execution(
    task_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    execution = await orchestrator.get_execution(task_id)
    return serialize_execution(execution)


@router.post("/{task_id}/steps/{step_id}/result", summary="Submit step result")
async def submit_step_result(
    task_id: str,
    step_id: str,
    body: StepResultBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Report the outcome of a dispatched step.

    ``accepted`` is false for duplicate results and for steps that were
    never dispatched.
    """
    accepted = await orchestrator.submit_step_result(body.to_result(task_id, step_id))
    return {"taskId": task_id, "stepId": step_id, "accepted": accepted}

"""
Response serializers.

Domain objects are plain dataclasses; these helpers turn them into
JSON-ready dictionaries.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain.entities import Agent, Task, WorkflowStep
from core.domain.value_objects import AgentRequirements, Budget
from orchestration.analytics import SystemOverview, TaskStatistics
from orchestration.decision import PerformanceStats
from orchestration.models import StepAssignment, TaskExecution


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _budget(budget: Optional[Budget]) -> Optional[Dict[str, str]]:
    if budget is None:
        return None
    return {"amount": str(budget.amount), "token": budget.token}


def _requirements(requirements: AgentRequirements) -> Dict[str, Any]:
    return {
        "capabilities": sorted(requirements.capabilities),
        "networks": sorted(requirements.networks),
    }


def serialize_step(step: WorkflowStep) -> Dict[str, Any]:
    return {
        "id": step.id,
        "name": step.name,
        "requirements": _requirements(step.requirements),
        "input": step.input,
        "dependsOn": list(step.depends_on),
        "status": step.status.value,
        "output": step.output,
        "error": step.error,
        "assignedAgent": step.assigned_agent,
        "startTime": _iso(step.start_time),
        "endTime": _iso(step.end_time),
    }


def serialize_task(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "description": task.description,
        "creator": task.creator,
        "status": task.status.value,
        "workflow": {"steps": [serialize_step(step) for step in task.workflow.steps]},
        "result": task.result,
        "error": task.error,
        "budget": _budget(task.budget),
        "deadline": _iso(task.deadline),
        "createdAt": _iso(task.created_at),
        "updatedAt": _iso(task.updated_at),
        "startedAt": _iso(task.started_at),
        "completedAt": _iso(task.completed_at),
    }


def serialize_execution(execution: TaskExecution) -> Dict[str, Any]:
    return {
        "taskId": execution.task_id,
        "startedAt": _iso(execution.started_at),
        "lastUpdated": _iso(execution.last_updated),
        "completedStepIds": list(execution.completed_step_ids),
        "failedStepIds": list(execution.failed_step_ids),
        "currentStepId": execution.current_step_id,
    }


def serialize_agent(agent: Agent) -> Dict[str, Any]:
    return {
        "id": agent.id,
        "name": agent.name,
        "owner": agent.owner,
        "description": agent.description,
        "endpoint": agent.endpoint,
        "capabilities": sorted(agent.capabilities),
        "supportedNetworks": sorted(agent.supported_networks),
        "status": agent.status.value,
        "metadata": agent.metadata,
        "createdAt": _iso(agent.created_at),
        "updatedAt": _iso(agent.updated_at),
    }


def serialize_assignment(assignment: StepAssignment) -> Dict[str, Any]:
    return {
        "taskId": assignment.task_id,
        "stepId": assignment.step_id,
        "stepName": assignment.step_name,
        "agentId": assignment.agent_id,
        "requirements": _requirements(assignment.requirements),
        "input": assignment.input,
    }


def serialize_performance(stats: PerformanceStats) -> Dict[str, Any]:
    return {
        "agentId": stats.agent_id,
        "totalTasks": stats.total_tasks,
        "successfulTasks": stats.successful_tasks,
        "failedTasks": stats.failed_tasks,
        "averageExecutionTimeMs": stats.average_execution_time_ms,
        "successRate": stats.success_rate,
    }


def serialize_task_statistics(stats: TaskStatistics) -> Dict[str, Any]:
    return {
        "total": stats.total,
        "byStatus": dict(stats.by_status),
        "completionRate": stats.completion_rate,
        "averageSteps": stats.average_steps,
    }


def serialize_system_overview(overview: SystemOverview) -> Dict[str, Any]:
    return {
        "agentCount": overview.agent_count,
        "taskCount": overview.task_count,
        "activeTaskCount": overview.active_task_count,
        "completedTaskCount": overview.completed_task_count,
        "capabilities": dict(overview.capabilities),
    }

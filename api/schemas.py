"""
Request bodies for the HTTP layer.

These pydantic models only validate shape; domain rules (acyclic
workflows, known dependencies) are enforced by the orchestrator.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.domain.entities import Workflow, WorkflowStep
from core.domain.enums import AgentStatus
from core.domain.value_objects import AgentRequirements, Budget
from core.infrastructure.adapters.registry import AgentRegistrationRequest
from orchestration.models import CreateTaskRequest, StepResult


class StepRequirementsBody(BaseModel):
    capabilities: List[str] = Field(default_factory=list)
    networks: List[str] = Field(default_factory=list)


class StepBody(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    requirements: StepRequirementsBody = Field(default_factory=StepRequirementsBody)
    input: Dict[str, Any] = Field(default_factory=dict)
    depends_on: List[str] = Field(default_factory=list, alias="dependsOn")

    model_config = {"populate_by_name": True}

    def to_domain(self) -> WorkflowStep:
        return WorkflowStep(
            id=self.id,
            name=self.name,
            requirements=AgentRequirements.of(
                self.requirements.capabilities, self.requirements.networks
            ),
            input=dict(self.input),
            depends_on=list(self.depends_on),
        )


class WorkflowBody(BaseModel):
    steps: List[StepBody]

    def to_domain(self) -> Workflow:
        return Workflow(steps=[step.to_domain() for step in self.steps])


class BudgetBody(BaseModel):
    amount: Decimal = Field(..., ge=0)
    token: str = Field(..., min_length=1)

    def to_domain(self) -> Budget:
        return Budget(amount=self.amount, token=self.token)


class CreateTaskBody(BaseModel):
    """Body of ``POST /api/v1/tasks``."""

    name: str = Field(..., min_length=1)
    description: str = ""
    creator: str = Field(..., min_length=1)
    workflow: WorkflowBody
    budget: Optional[BudgetBody] = None
    deadline: Optional[datetime] = None

    def to_request(self) -> CreateTaskRequest:
        return CreateTaskRequest(
            name=self.name,
            description=self.description,
            creator=self.creator,
            workflow=self.workflow.to_domain(),
            budget=self.budget.to_domain() if self.budget else None,
            deadline=self.deadline,
        )


class StepResultBody(BaseModel):
    """Body of ``POST /api/v1/tasks/{task_id}/steps/{step_id}/result``."""

    success: bool
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_result(self, task_id: str, step_id: str) -> StepResult:
        return StepResult(
            task_id=task_id,
            step_id=step_id,
            success=self.success,
            output=self.output,
            error=self.error,
        )


class RegisterAgentBody(BaseModel):
    """Body of ``POST /api/v1/agents``."""

    name: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    capabilities: List[str] = Field(..., min_length=1)
    supported_networks: List[str] = Field(default_factory=list, alias="supportedNetworks")
    description: str = ""
    endpoint: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    def to_request(self) -> AgentRegistrationRequest:
        return AgentRegistrationRequest(
            name=self.name,
            owner=self.owner,
            capabilities=list(self.capabilities),
            supported_networks=list(self.supported_networks),
            description=self.description,
            endpoint=self.endpoint,
            metadata=dict(self.metadata),
        )


class AgentStatusBody(BaseModel):
    status: AgentStatus

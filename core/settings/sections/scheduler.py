from pydantic import Field
from pydantic_settings import BaseSettings


class SchedulerSettings(BaseSettings):
    """
    Settings for the scheduling core.
    Loaded automatically from .env with prefix AGENTMESH_SCHEDULER_*
    """

    history_window: int = Field(default=100, gt=0)
    deadline_penalty: float = Field(default=0.5, gt=0, le=1)
    budget_penalty: float = Field(default=0.5, gt=0, le=1)
    default_base_score: float = Field(default=1.0, gt=0)
    max_steps_per_task: int = Field(default=50, gt=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "AGENTMESH_SCHEDULER_",
        "extra": "ignore",
    }

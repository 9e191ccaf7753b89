from pydantic import Field
from pydantic_settings import BaseSettings


class ServerSettings(BaseSettings):
    """
    Settings for the HTTP server.
    Loaded automatically from .env with prefix AGENTMESH_SERVER_*
    """

    host: str = "localhost"
    port: int = Field(default=3000, gt=0, lt=65536)
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "AGENTMESH_SERVER_",
        "extra": "ignore",
    }

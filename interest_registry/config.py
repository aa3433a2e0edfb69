from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Interest Registry"
    debug: bool = False

    # SQLite for local runs; use postgresql+asyncpg://... in deployments
    database_url: str = "sqlite+aiosqlite:///./interest_registry.db"
    auto_create_tables: bool = True

    # Valkey settings
    valkey_host: str = "valkey"
    valkey_port: int = 6379
    valkey_db: int = 0
    valkey_auth_token: str | None = None

    # Celery settings
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None
    celery_task_serializer: str = "json"
    celery_result_serializer: str = "json"
    # Countdown tasks sit unacked on the broker until they fire; anything
    # shorter than the longest activation delay gets redelivered early
    celery_visibility_timeout_seconds: int = 30 * 24 * 60 * 60
    # Revoked task ids are kept here so a cancel survives a worker restart
    celery_worker_state_db: str | None = "celery-worker.state"

    # "asyncio" keeps timers in the API process; "celery" survives restarts
    timer_backend: Literal["asyncio", "celery"] = "asyncio"
    lock_backend: Literal["local", "valkey"] = "local"
    lock_timeout_seconds: int = 30
    lock_blocking_timeout_seconds: int = 10

    @model_validator(mode="after")
    def _workers_share_locks(self) -> "Settings":
        # Celery workers run in other processes; in-process locks would not
        # exclude the API from the project they activate
        if self.timer_backend == "celery" and self.lock_backend != "valkey":
            raise ValueError('timer_backend="celery" requires lock_backend="valkey"')
        return self


settings = Settings()

from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Evaluator selection
    # "racket" shells out to the instrumented transformer, "static" serves canned traces
    TRACE_RUNNER: Literal["racket", "static"] = "racket"

    RACKET_EXECUTABLE: str = "racket"
    RUNNER_WORK_DIR: str = "src"
    TRANSFORMER_FILE: str = "transformer.rkt"
    INPUT_FILE: str = "input.rkt"
    OUTPUT_FILE: str = "output.txt"
    RUNNER_TIMEOUT_SECONDS: float = 10.0

    # Trace archive
    TRACE_STORE: Literal["memory", "sql"] = "sql"
    DATABASE_URL: str = "sqlite:///./traces.db"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()

from __future__ import annotations
import os

# LLM analysis configuration
OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-3.5-turbo")
LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "2000"))
LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Retry policy for the analysis call
ANALYSIS_MAX_RETRIES: int = int(os.getenv("ANALYSIS_MAX_RETRIES", "3"))
ANALYSIS_RETRY_DELAY: float = float(os.getenv("ANALYSIS_RETRY_DELAY", "1.0"))
ANALYSIS_CONTENT_BUDGET: int = int(os.getenv("ANALYSIS_CONTENT_BUDGET", "8000"))

# Remote Swagger/OpenAPI fetch
FETCH_TIMEOUT_SECONDS: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
FETCH_USER_AGENT: str = os.getenv("FETCH_USER_AGENT", "Integration-SDK-Generator/1.0.0")

# Uploads
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

# Job retention
JOB_RETENTION_SECONDS: int = int(os.getenv("JOB_RETENTION_SECONDS", "3600"))
JOB_SWEEP_INTERVAL: int = int(os.getenv("JOB_SWEEP_INTERVAL", "300"))

# Progress streaming
HEARTBEAT_INTERVAL: int = int(os.getenv("HEARTBEAT_INTERVAL", "15"))
PROGRESS_SUBSCRIBER_QUEUE_SIZE: int = int(os.getenv("PROGRESS_SUBSCRIBER_QUEUE_SIZE", "0"))

# HTTP
CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_STRUCTURED: bool = os.getenv("LOG_STRUCTURED", "true").lower() == "true"

# OpenTelemetry Configuration
OTEL_EXPORTER_OTLP_ENDPOINT: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "sdk-generator")
OTEL_SAMPLE_RATE: float = float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
OTEL_CONSOLE_EXPORT: bool = os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true"
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# Langfuse Configuration
LANGFUSE_PUBLIC_KEY: str | None = os.getenv("LANGFUSE_PUBLIC_KEY")
LANGFUSE_SECRET_KEY: str | None = os.getenv("LANGFUSE_SECRET_KEY")
LANGFUSE_HOST: str = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

"""Pydantic-based configuration helpers for the alert filter."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Iterable, List, Mapping

import boto3
from pydantic import BaseModel, Field, ValidationError, field_validator


class AppSettings(BaseModel):
    """Settings required by the webhook, the notifier and their clients."""

    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    channel_id: str = Field(..., alias="SLACK_CHANNEL_ID")
    database_url: str = Field(..., alias="DATABASE_URL")
    model_id: str = Field(..., alias="BEDROCK_MODEL_ID")
    top_p: float = Field(0.1, alias="BEDROCK_TOP_P")
    temperature: float = Field(0.0, alias="BEDROCK_TEMPERATURE")
    aws_region: str | None = Field(None, alias="AWS_REGION")
    feedback_page_size: int = Field(100, alias="FEEDBACK_PAGE_SIZE")
    outbound_timeout: int = Field(10, alias="OUTBOUND_TIMEOUT_SECONDS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("top_p", "temperature")
    @classmethod
    def _ensure_unit_interval(cls, value: float) -> float:
        if value < 0 or value > 1:
            raise ValueError("Sampling parameters must be between 0 and 1")
        return value

    @field_validator("feedback_page_size", "outbound_timeout")
    @classmethod
    def _ensure_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


def load_secret_bundle(secret_id: str, *, region: str | None = None, client=None) -> dict[str, str]:
    """Fetch a JSON object of secrets from AWS Secrets Manager."""

    client = client or boto3.client("secretsmanager", region_name=region)
    response = client.get_secret_value(SecretId=secret_id)
    secret_string = response.get("SecretString")
    if not secret_string:
        raise RuntimeError(f"Secret not found: {secret_id}")

    try:
        bundle = json.loads(secret_string)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Secret {secret_id} is not valid JSON") from exc
    if not isinstance(bundle, dict):
        raise RuntimeError(f"Secret {secret_id} is not a JSON object")
    return {str(key): str(value) for key, value in bundle.items()}


def build_settings(environ: Mapping[str, Any], secrets: Mapping[str, str] | None = None) -> AppSettings:
    """Validate settings from *environ* with *secrets* taking precedence."""

    merged = dict(environ)
    if secrets:
        merged.update(secrets)

    try:
        return AppSettings.model_validate(merged)
    except ValidationError as exc:
        missing = [error["loc"][0] for error in exc.errors() if error["type"] == "missing"]
        if not missing:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc
        message = (
            "Missing required environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables and the secret bundle."""

    secrets = None
    secret_id = os.environ.get("SECRET_ID")
    if secret_id:
        secrets = load_secret_bundle(secret_id, region=os.environ.get("AWS_REGION"))
    return build_settings(os.environ, secrets)

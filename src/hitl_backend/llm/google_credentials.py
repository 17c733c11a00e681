"""
Vertex AI credential setup for the ADK runners.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from google.oauth2 import service_account

from ..logging import get_logger
from ..settings import Settings

_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

logger = get_logger(__name__)


def load_service_account_info(value: str) -> tuple[dict[str, Any], str]:
    """Resolve a service account from a file path or an inline JSON string.

    Returns the parsed info and a file path holding it; inline JSON is written
    to a temp file because the Google auth libraries want a path.
    """
    path = Path(value)
    if path.is_file():
        return json.loads(path.read_text(encoding="utf-8")), str(path)

    if value.strip().startswith("{"):
        try:
            info = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("Service account credentials are not a valid JSON string.") from exc
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".json", delete=False, encoding="utf-8"
        ) as handle:
            json.dump(info, handle, ensure_ascii=False)
        return info, handle.name

    if value.endswith(".json"):
        raise FileNotFoundError(f"Service account file not found: {value}")
    raise ValueError("Service account credentials must be a file path or JSON string.")


def setup_google_credentials(
    settings: Settings,
) -> tuple[service_account.Credentials, str] | None:
    """Point ADK/google-genai at Vertex AI when a service account is configured.

    Returns None when ``google_application_credentials`` is unset, leaving the
    environment (API key or ADC) untouched.
    """
    value = settings.google_application_credentials
    if not value:
        return None

    info, credentials_path = load_service_account_info(value)
    project = info.get("project_id")
    if not project:
        raise ValueError("project_id not found in service account info.")

    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = credentials_path
    os.environ.setdefault("GOOGLE_CLOUD_PROJECT", project)
    region = os.environ.get("GCP_REGION")
    if region:
        os.environ.setdefault("GOOGLE_CLOUD_LOCATION", region)
    os.environ.setdefault("GOOGLE_GENAI_USE_VERTEXAI", "TRUE")
    logger.info("vertex_credentials_configured", project=project)

    credentials = service_account.Credentials.from_service_account_info(info, scopes=_SCOPES)
    return credentials, project

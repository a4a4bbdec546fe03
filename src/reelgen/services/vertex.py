"""Shared Vertex AI REST helpers for Imagen and Veo."""

import google.auth
import google.auth.transport.requests

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def access_token() -> str:
    """Fetch a fresh OAuth token from application default credentials."""
    credentials, _ = google.auth.default(scopes=SCOPES)
    auth_req = google.auth.transport.requests.Request()
    credentials.refresh(auth_req)
    return credentials.token


def model_url(project_id: str, location: str, model: str, method: str) -> str:
    return (
        f"https://{location}-aiplatform.googleapis.com/v1/"
        f"projects/{project_id}/locations/{location}/"
        f"publishers/google/models/{model}:{method}"
    )


def auth_headers() -> dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token()}",
        "Content-Type": "application/json",
    }

from fastapi import HTTPException

from jobconnect.models.base import is_valid_id


def require_valid_id(value: str, label: str) -> str:
    """Reject malformed ids with a 400 before they reach the repository."""
    if not is_valid_id(value):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    return value

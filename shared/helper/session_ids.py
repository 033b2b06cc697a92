"""Session identifier checks shared by clients, services and routers."""

import uuid


def validate_session_id(session_id: str | None) -> str:
    """Return the session id in canonical lowercase UUID form.

    Args:
        session_id (str | None): The raw identifier, e.g. from a query parameter.

    Returns:
        str: The canonical UUID string.

    Raises:
        ValueError: If the id is missing or not a valid UUID.
    """
    if not session_id or not str(session_id).strip():
        raise ValueError("Session ID is required for this operation.")
    raw = str(session_id).strip()
    try:
        parsed = uuid.UUID(raw)
    except ValueError:
        raise ValueError(f"Invalid session ID format '{raw}'. Must be a valid UUID.")
    # reject the braced / urn / hex-only spellings uuid.UUID also accepts
    if str(parsed) != raw.lower():
        raise ValueError(f"Invalid session ID format '{raw}'. Must be a valid UUID.")
    return str(parsed)


def new_session_id() -> str:
    return str(uuid.uuid4())

"""ID generation utilities."""
import uuid
from datetime import datetime, timezone


def generate_request_id() -> str:
    """
    Generate a unique request ID for log correlation.

    Format: req_{date}_{uuid_short}
    Example: req_20250310_a3f2d1c4

    Returns:
        str: A unique request identifier
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    uuid_short = str(uuid.uuid4())[:8]
    return f"req_{stamp}_{uuid_short}"

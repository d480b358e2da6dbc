"""Last-error log. Only the most recent failure is kept, without user data."""
import traceback
from datetime import datetime

ERROR_LOG = "last_error.log"


def log_error(context: str, exc: Exception) -> None:
    """Write the last error with timestamp to last_error.log (no user data)."""
    with open(ERROR_LOG, "w", encoding="utf-8") as f:
        f.write(f"[{datetime.now().isoformat(timespec='seconds')}] {context}\n\n")
        if exc.__traceback__:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=f)
        else:
            f.write(f"{type(exc).__name__}: {exc}\n")

from __future__ import annotations

import contextvars

# Path of the file under check, blank outside a check pass
current_file_var: contextvars.ContextVar[str] = contextvars.ContextVar("current_file", default="")

"""Event type constants and fixed client-side messages."""

# ---------------------------------------------------------------------------
# Event type constants; import these instead of duplicating strings.
# ---------------------------------------------------------------------------

EVENT_TYPE_STATUS = "status"
EVENT_TYPE_CHUNK = "chunk"
EVENT_TYPE_PLATFORM = "platform"
EVENT_TYPE_TOOL_START = "tool_start"
EVENT_TYPE_TOOL_END = "tool_end"
EVENT_TYPE_DONE = "done"
EVENT_TYPE_ERROR = "error"
EVENT_TYPE_WARN = "warn"

VALID_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_STATUS,
        EVENT_TYPE_CHUNK,
        EVENT_TYPE_PLATFORM,
        EVENT_TYPE_TOOL_START,
        EVENT_TYPE_TOOL_END,
        EVENT_TYPE_DONE,
        EVENT_TYPE_ERROR,
        EVENT_TYPE_WARN,
    }
)

# Events that settle a generation session.
TERMINAL_EVENT_TYPES = frozenset({EVENT_TYPE_DONE, EVENT_TYPE_ERROR, EVENT_TYPE_WARN})

# Platform sub-job actions
PLATFORM_ACTION_STARTED = "started"
PLATFORM_ACTION_COMPLETED = "completed"

# Only the interruption fallback produces this; the server never sends warn.
CONNECTION_INTERRUPTED_MESSAGE = (
    "Connection interrupted. Generation continues on server."
)
DEFAULT_ERROR_MESSAGE = "An error occurred during generation"

DEFAULT_LANGUAGE = "Vietnamese"

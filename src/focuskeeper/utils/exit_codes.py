"""
Exit codes for FocusKeeper.

Semantic exit codes so scripts wrapping the CLI can tell failures apart.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments, rejected settings or a command illegal in the current state
ERROR_INVALID_ARGS = 2

# The focus session is owned by another running process
ERROR_SESSION_BUSY = 3

# Persistence failure (vault unwritable, document store unreachable)
ERROR_PERSISTENCE = 4

# Resource not found
ERROR_NOT_FOUND = 5


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_SESSION_BUSY: "ERROR_SESSION_BUSY",
        ERROR_PERSISTENCE: "ERROR_PERSISTENCE",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_SESSION_BUSY: "Focus session is running in another process",
        ERROR_PERSISTENCE: "Could not save or load focus data",
        ERROR_NOT_FOUND: "Resource not found",
    }
    return descriptions.get(code, "Unknown error")

"""
Exit codes for the focusbell CLI.

Semantic exit codes so wrappers (systemd units, supervisors, scripts) can
tell a bad token from a crash.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Missing or rejected login token
ERROR_AUTH_FAILURE = 3

# Configuration file could not be loaded
ERROR_CONFIG = 4


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
        ERROR_CONFIG: "ERROR_CONFIG",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_AUTH_FAILURE: "Login token missing - set FOCUSBELL_TOKEN",
        ERROR_CONFIG: "Configuration file is unreadable or invalid",
    }
    return descriptions.get(code, "Unknown error")

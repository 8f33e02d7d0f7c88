"""Turn service results into CLI output or errors."""

from __future__ import annotations

import click

from rms.application.service import ErrorCode, Result

# User-facing wording per rejected rule.
ERROR_TITLES = {
    ErrorCode.SLOT_UNAVAILABLE: "Dates not available",
    ErrorCode.INVALID_TRANSITION: "Status change not allowed",
    ErrorCode.MISSING_NOTES: "Notes required",
    ErrorCode.CONFLICT: "Item changed by someone else, reload and retry",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.VALIDATION: "Invalid input",
    ErrorCode.TIMEOUT: "Busy, try again",
    ErrorCode.STORAGE: "Storage error",
}


def unwrap(result: Result):
    if not result.ok:
        raise click.ClickException(f"{ERROR_TITLES[result.error]}: {result.message}")
    return result.value

"""
Core constants — **Single Source of Truth** for project-wide magic values.

Any business rule or user-facing string that is referenced from more
than one app should import it from here instead of hardcoding it.
"""

# ── Youth transition age ────────────────────────────────────────────
# A youth is "transition aged" once they are this many years old; the
# flag is derived from ``CasaCase.birth_month_year_youth`` on save.
TRANSITION_AGE_YEARS: int = 14

# ── User-facing notices ─────────────────────────────────────────────
NOT_AUTHORIZED_NOTICE: str = "Sorry you are not authorized to perform this action."
CASE_UPDATED_NOTICE: str = "CASA case was successfully updated."

# ── Export file naming ──────────────────────────────────────────────
# ``<report-name>-<YYYY-MM-DD>.<ext>`` using the local date.
EXPORT_DATE_FORMAT: str = "%Y-%m-%d"

# Accepted input formats for report date filters: ISO and
# "January 05, 2024" (the format the reports form renders).
REPORT_DATE_INPUT_FORMATS: list[str] = ["%Y-%m-%d", "%B %d, %Y", "%m/%d/%Y"]

"""
Permissions Constants — **Single Source of Truth**

Every action name and attribute name referenced by the capability
tables (``cases.policies``), views and services MUST use one of the
constants defined here.

Organisation
------------
- **Actions** are the operations an actor can attempt on cases and
  reports.  Whether an actor may perform one is decided solely by the
  role's row in ``cases.policies.CASE_CAPABILITIES``.

- **Attributes** are the submitted case keys that a role may be allowed
  to mutate.  Anything not listed for a role is dropped silently before
  validation.
"""


# ════════════════════════════════════════════════════════════════════
#  CASES APP — Actions
# ════════════════════════════════════════════════════════════════════

class CaseActions:
    """Operations guarded by the case capability table."""

    INDEX = "index"
    SHOW = "show"
    NEW = "new"
    CREATE = "create"
    EDIT = "edit"
    UPDATE = "update"
    DEACTIVATE = "deactivate"
    REACTIVATE = "reactivate"


# ════════════════════════════════════════════════════════════════════
#  CASES APP — Mutable attributes
# ════════════════════════════════════════════════════════════════════

class CaseAttributes:
    """Submitted keys of a case create / update payload."""

    CASE_NUMBER = "case_number"
    BIRTH_MONTH_YEAR_YOUTH = "birth_month_year_youth"
    COURT_REPORT_STATUS = "court_report_status"
    UPCOMING_HEARING_DATE = "upcoming_hearing_date"
    CASA_ORG_ID = "casa_org_id"

    # ── Nested collections ──────────────────────────────────────────
    CASE_COURT_ORDERS = "case_court_orders_attributes"
    CONTACT_TYPE_IDS = "contact_type_ids"

    #: Attributes that are plain columns on ``CasaCase`` and therefore
    #: take part in the "Changed <attribute>" summary lines.
    SIMPLE = (
        CASE_NUMBER,
        BIRTH_MONTH_YEAR_YOUTH,
        COURT_REPORT_STATUS,
        UPCOMING_HEARING_DATE,
    )


# ════════════════════════════════════════════════════════════════════
#  REPORTS APP — Actions
# ════════════════════════════════════════════════════════════════════

class ReportActions:
    """Operations guarded by the report capability table."""

    EXPORT = "export_reports"

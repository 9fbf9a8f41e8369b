# pulse_core/ledger/constants.py
from django.db import models


class EventType(models.TextChoices):
    CHECKIN = "CHECKIN", "Check-in"
    FEEDBACK = "FEEDBACK", "Feedback"
    RISK = "RISK", "Risk"
    STATUS_CHANGE = "STATUS_CHANGE", "Status change"


class RiskSeverity(models.TextChoices):
    LOW = "LOW", "Low"
    MEDIUM = "MEDIUM", "Medium"
    HIGH = "HIGH", "High"


class RiskStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    RESOLVED = "RESOLVED", "Resolved"


CHECKIN_WINDOW_DAYS = 7

# Auto-created risk for client feedback flagged as an issue
FLAGGED_RISK_SEVERITY = RiskSeverity.MEDIUM
FLAGGED_RISK_MITIGATION = "Pending owner review"
FLAGGED_RISK_DEFAULT_TITLE = "Flagged Issue"
FLAGGED_RISK_DEFAULT_DESCRIPTION = "Client flagged an issue requiring attention."

PROJECT_INITIALIZED_TITLE = "Project Initialized"
PROJECT_INITIALIZED_DESCRIPTION = "Project created and team assigned."
RISK_RESOLVED_TITLE_PREFIX = "Risk Resolved: "

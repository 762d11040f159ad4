"""
CityReport - Submission Module
Creation wizard and multipart submission of reports and events.
"""

from cityreport.submission.forms import (
    SubmissionKind,
    ReportCategory,
    PhotoItem,
    FormDraft,
    FormSnapshot,
)
from cityreport.submission.progress import (
    SubmissionPhase,
    SubmissionProgress,
)
from cityreport.submission.identity import (
    IdentityProvider,
    StaticIdentity,
    TokenIdentityProvider,
)
from cityreport.submission.pipeline import (
    SubmissionPipeline,
    SubmissionResult,
)
from cityreport.submission.wizard import (
    SubmissionWizard,
    WizardStep,
)

__all__ = [
    # Forms
    "SubmissionKind",
    "ReportCategory",
    "PhotoItem",
    "FormDraft",
    "FormSnapshot",
    # Progress
    "SubmissionPhase",
    "SubmissionProgress",
    # Identity
    "IdentityProvider",
    "StaticIdentity",
    "TokenIdentityProvider",
    # Pipeline
    "SubmissionPipeline",
    "SubmissionResult",
    # Wizard
    "SubmissionWizard",
    "WizardStep",
]

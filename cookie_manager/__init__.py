"""Cookie consent management.

This package decides which non-essential cookies may exist, based on a
cookie manifest mapping cookie name prefixes to consent categories and the
consent record stored in the user preference cookie. It also resolves the
visibility of the consent banner and records new consent.
"""

__version__ = "1.0.0"

from .models import (
    ConsentRecord,
    Cookie,
    CookieAction,
    CookieCategory,
    CookieDecision,
    DecisionReason,
    DENIAL_MARKERS,
    DENY_MARKER,
    GRANT_MARKER,
)

from .config import (
    CookieManagerConfig,
    get_cookie_manager_config,
    load_config_from_file,
)

from .classification import CookieClassifier, classify_cookie
from .preferences import (
    ConsentRecordCodec,
    MalformedConsentRecord,
    accept_all_record,
    reject_all_record,
    record_from_selections,
)
from .evaluator import ConsentEvaluator, EvaluationResult, evaluate
from .banner import BannerVisibilityResolver, should_be_visible
from .store import CookieStore, InMemoryCookieStore, deletion_scopes
from .page import (
    Banner,
    ClassToggleBanner,
    MissingCollaborator,
    Page,
    PreferenceForm,
    RadioPreferenceForm,
)
from .manager import CookieManager, SaveResult

__all__ = [
    # Core Models
    "ConsentRecord",
    "Cookie",
    "CookieAction",
    "CookieCategory",
    "CookieDecision",
    "DecisionReason",
    "DENIAL_MARKERS",
    "DENY_MARKER",
    "GRANT_MARKER",

    # Configuration
    "CookieManagerConfig",
    "get_cookie_manager_config",
    "load_config_from_file",

    # Core Components
    "CookieClassifier",
    "classify_cookie",
    "ConsentRecordCodec",
    "MalformedConsentRecord",
    "accept_all_record",
    "reject_all_record",
    "record_from_selections",
    "ConsentEvaluator",
    "EvaluationResult",
    "evaluate",
    "BannerVisibilityResolver",
    "should_be_visible",

    # Collaborators
    "CookieStore",
    "InMemoryCookieStore",
    "deletion_scopes",
    "Banner",
    "ClassToggleBanner",
    "MissingCollaborator",
    "Page",
    "PreferenceForm",
    "RadioPreferenceForm",

    # Main Service
    "CookieManager",
    "SaveResult",
]

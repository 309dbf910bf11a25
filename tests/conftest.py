"""Shared test fixtures and configuration for Cookie Manager tests."""

import pytest
from pathlib import Path
import sys

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cookie_manager.config import CookieManagerConfig
from cookie_manager.models import CookieCategory
from cookie_manager.page import ClassToggleBanner, Page, RadioPreferenceForm
from cookie_manager.store import InMemoryCookieStore


PREFERENCE_COOKIE = "cm_user_preferences"
FORM_ID = "cm_user_preference_form"
BANNER_ID = "cm_cookie_notification"


@pytest.fixture
def sample_manifest():
    """Manifest with one essential and two optional categories."""
    return [
        CookieCategory(**{
            "category-name": "essential",
            "optional": False,
            "cookies": ["essential-cookie", "essential-cookie-with-suffix", "another-essential-cookie"],
        }),
        CookieCategory(**{
            "category-name": "analytics",
            "optional": True,
            "cookies": ["analytics-cookie", "analytics-cookie-with-suffix", "another-analytics-cookie"],
        }),
        CookieCategory(**{
            "category-name": "feedback",
            "optional": True,
            "cookies": ["feedback-cookie", "feedback-cookie-with-suffix", "another-feedback-cookie"],
        }),
    ]


@pytest.fixture
def sample_config(sample_manifest):
    """Configuration bound to the sample preference form and banner."""
    return CookieManagerConfig(**{
        "delete-undefined-cookies": True,
        "user-preference-cookie-name": PREFERENCE_COOKIE,
        "user-preference-cookie-secure": False,
        "user-preference-cookie-expiry-days": 365,
        "user-preference-configuration-form-id": FORM_ID,
        "set-checkboxes-in-preference-form": True,
        "cookie-banner-id": BANNER_ID,
        "cookie-banner-visibility-class": "hidden",
        "cookie-banner-visible-on-page-with-preference-form": True,
        "cookie-manifest": sample_manifest,
    })


@pytest.fixture
def cookie_store():
    """Empty cookie jar for www.example.com."""
    return InMemoryCookieStore("www.example.com")


@pytest.fixture
def populated_store(cookie_store):
    """Cookie jar holding one cookie of every manifest prefix."""
    for name in [
        "essential-cookie", "essential-cookie-with-suffix", "another-essential-cookie",
        "analytics-cookie", "analytics-cookie-with-suffix", "another-analytics-cookie",
        "feedback-cookie", "feedback-cookie-with-suffix", "another-feedback-cookie",
    ]:
        cookie_store.add(name, "1")
    return cookie_store


@pytest.fixture
def preference_form():
    """Preference form with on/off radio groups for the optional categories."""
    return RadioPreferenceForm({"analytics": ["on", "off"], "feedback": ["on", "off"]})


@pytest.fixture
def banner():
    """Cookie banner starting hidden, as rendered by the page."""
    return ClassToggleBanner("hidden", classes=["hidden"])


@pytest.fixture
def sample_page(preference_form, banner):
    """Page holding both the preference form and the banner."""
    return Page(forms={FORM_ID: preference_form}, banners={BANNER_ID: banner})

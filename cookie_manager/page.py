"""Page collaborators: the preference form and the cookie banner.

The consent engine only needs to read the selected value of each category
control group in the preference form, pre-fill those controls from a stored
record, and toggle a marker class on the banner element. Elements are
looked up by id on a ``Page``; a missing element raises
``MissingCollaborator`` and the caller skips the feature.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)


class MissingCollaborator(LookupError):
    """Expected page element is absent."""


class PreferenceForm(ABC):
    """A form with one control group per consent category."""

    @abstractmethod
    def read_selections(self) -> Dict[str, str]:
        """Get the selected value of every control group that has one."""

    @abstractmethod
    def apply_selections(self, selections: Mapping[str, object]) -> None:
        """Select the controls matching a stored record."""


class Banner(ABC):
    """The consent collection banner."""

    @abstractmethod
    def set_visible(self, visible: bool) -> None:
        """Show or hide the banner."""

    @property
    @abstractmethod
    def visible(self) -> bool:
        """Whether the banner is currently shown."""


class RadioPreferenceForm(PreferenceForm):
    """In-memory form of radio groups, one per category.

    Args:
        groups: Mapping of group name to the values of its radio inputs
    """

    def __init__(self, groups: Mapping[str, Iterable[str]]):
        self.groups: Dict[str, List[str]] = {name: list(values) for name, values in groups.items()}
        self.checked: Dict[str, Optional[str]] = {name: None for name in self.groups}

    def select(self, group: str, value: str) -> None:
        """Check one radio input, as a user click would."""
        if value not in self.groups.get(group, []):
            raise MissingCollaborator(f"No radio input {group}={value} in preference form")
        self.checked[group] = value

    def read_selections(self) -> Dict[str, str]:
        return {name: value for name, value in self.checked.items() if value is not None}

    def apply_selections(self, selections: Mapping[str, object]) -> None:
        for name, stored in selections.items():
            if name not in self.groups:
                continue
            self.checked[name] = stored if stored in self.groups[name] else None


class ClassToggleBanner(Banner):
    """Banner hidden by the presence of a marker class."""

    def __init__(self, visibility_class: str = "hidden", classes: Optional[Iterable[str]] = None):
        self.visibility_class = visibility_class
        self.classes: Set[str] = set(classes or [])

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.classes.discard(self.visibility_class)
        else:
            self.classes.add(self.visibility_class)

    @property
    def visible(self) -> bool:
        return self.visibility_class not in self.classes


class Page:
    """Elements of the current page, addressed by id."""

    def __init__(
        self,
        forms: Optional[Mapping[str, PreferenceForm]] = None,
        banners: Optional[Mapping[str, Banner]] = None
    ):
        self.forms: Dict[str, PreferenceForm] = dict(forms or {})
        self.banners: Dict[str, Banner] = dict(banners or {})

    def get_form(self, element_id: Optional[str]) -> PreferenceForm:
        if element_id is None or element_id not in self.forms:
            raise MissingCollaborator(f"Preference form \"{element_id}\" not found on page")
        return self.forms[element_id]

    def get_banner(self, element_id: Optional[str]) -> Banner:
        if element_id is None or element_id not in self.banners:
            raise MissingCollaborator(f"Cookie banner \"{element_id}\" not found on page")
        return self.banners[element_id]

    def has_form(self, element_id: Optional[str]) -> bool:
        return element_id is not None and element_id in self.forms

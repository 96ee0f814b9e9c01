"""
Error taxonomy for the content admission and identity allocation pipeline.

Field-level problems (malformed YAML, shape violations, bad url format,
bad reorder batches) carry a list of ``FieldIssue`` so the HTTP layer can
forward them verbatim. Internal errors (slug exhaustion, storage failures)
keep their diagnostic message for the logs only.
"""

from typing import List, Optional, Sequence


class PagefolioError(Exception):
    default_message = "An unexpected error occurred"
    is_internal = False

    def __init__(self, message: Optional[str] = None, issues: Optional[Sequence] = None):
        self.message = message or self.default_message
        self.issues = list(issues or [])
        super().__init__(self.message)


# --- Content ---

class InvalidContentError(PagefolioError):
    """Uploaded YAML could not be decoded (malformed) or failed the shape check."""
    default_message = "The provided data is invalid."

    def __init__(self, message=None, issues=None, malformed: bool = False):
        super().__init__(message, issues)
        self.malformed = malformed


class ContentNotFoundError(PagefolioError):
    default_message = "No content has been uploaded yet"


# --- Identity ---

class PageUrlError(PagefolioError):
    """Base for the three ways a url slug candidate can be refused."""


class InvalidUrlFormatError(PageUrlError):
    default_message = "URL must be 3-30 characters of lowercase letters, numbers, and hyphens"


class ReservedUrlError(PageUrlError):
    default_message = "This URL is reserved and cannot be used"


class UrlAlreadyTakenError(PageUrlError):
    default_message = "This URL is already in use"


class PageAlreadyExistsError(PagefolioError):
    default_message = "A page already exists for this user"


class InvalidThemeError(PagefolioError):
    default_message = "Unknown theme"


# --- Lookup ---

class PageNotFoundError(PagefolioError):
    default_message = "No page found for this user"


class ProjectNotFoundError(PagefolioError):
    default_message = "Project not found"

    def __init__(self, message=None, slugs: Optional[List[str]] = None):
        self.slugs = list(slugs or [])
        if message is None and self.slugs:
            message = f"Project not found: {', '.join(self.slugs)}"
        super().__init__(message)


class ParentPageMissingError(PagefolioError):
    """A project was created for an owner that has no page."""
    default_message = "Create your page before adding projects"


class ReorderValidationError(PagefolioError):
    default_message = "Request validation failed"


# --- Internal ---

class SlugAllocationError(PagefolioError):
    default_message = "Unable to generate unique slug after maximum attempts"
    is_internal = True


class StorageError(PagefolioError):
    default_message = "Database error"
    is_internal = True

"""
LEADBANK CRM - Domain errors

Client input errors -> bad request / not found (nothing written).
Conflicts -> carry the matched record and the reason.
Store errors (pymongo) are NOT wrapped: they propagate as server errors.
"""


class CrmError(Exception):
    """Base class for errors the caller maps to a client-side outcome"""
    pass


class InvalidInputError(CrmError):
    """Missing or malformed identifiers / parameters"""
    pass


class InvalidImportError(InvalidInputError):
    """Upload batch unusable (wrong type, empty): rejected before any write"""
    pass


class ProjectNotFoundError(CrmError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class DuplicateContactError(CrmError):
    """Contact creation refused by the identity resolver"""

    def __init__(self, reason: str, existing: dict = None):
        self.reason = reason
        self.existing = existing
        super().__init__(reason)

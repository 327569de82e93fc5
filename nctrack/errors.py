"""Error taxonomy shared by the store, the API and the notifier."""


class NCTrackError(Exception):
    """Base error."""


class ValidationError(NCTrackError):
    """Missing or invalid input. Surfaced as 400."""


class NotFoundError(NCTrackError):
    """Referenced record does not exist. Surfaced as 404."""


class StorageError(NCTrackError):
    """Datastore failure. Surfaced as 500 with a generic message."""


class NotificationError(NCTrackError):
    """Best-effort notification failed. Never surfaced to the caller."""

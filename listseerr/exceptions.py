"""ListSeerr exception classes."""


class ListSeerrError(Exception):
    """Base class for all ListSeerr exceptions."""

    # Default HTTP status for API responses
    status_code: int = 500


# Configuration errors
class ConfigError(ListSeerrError):
    """Base class for configuration-related errors."""

    status_code = 500


class ProfileConfigError(ConfigError, ValueError):
    """Invalid or incomplete configuration for a specific profile."""

    status_code = 400


class ProfileNotFoundError(ConfigError, KeyError):
    """Requested profile does not exist."""

    status_code = 404


class DataPathError(ConfigError, ValueError):
    """The configured data directory path is invalid for the requested operation."""

    status_code = 400


# Media/model errors
class InvalidMediaItemError(ListSeerrError, ValueError):
    """A media item was constructed with an invalid external identifier."""

    status_code = 400


class InvalidBatchIdError(ListSeerrError, ValueError):
    """A batch identifier string does not follow the expected format."""

    status_code = 400


class InvalidTransitionError(ListSeerrError, RuntimeError):
    """An execution was asked to leave a terminal status."""

    status_code = 409

    def __init__(self, from_status: str, to_status: str) -> None:
        """Initialize the error with the attempted transition.

        Args:
            from_status (str): Current status of the execution.
            to_status (str): Requested status of the execution.
        """
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition execution status from '{from_status}' "
            f"to '{to_status}'"
        )


# Processing errors
class ProcessingError(ListSeerrError):
    """Base class for list processing failures."""

    status_code = 500


class ListNotFoundError(ProcessingError, LookupError):
    """Requested media list does not exist or is not owned by the caller."""

    status_code = 404


class NotConfiguredError(ProcessingError):
    """A required provider or Jellyseerr configuration is missing."""

    status_code = 412


class ProviderNotConfiguredError(NotConfiguredError):
    """A list provider requires credentials that have not been configured."""

    def __init__(self, provider: str) -> None:
        """Initialize the error for the given provider.

        Args:
            provider (str): Name of the provider missing its configuration.
        """
        self.provider = provider
        super().__init__(f"Provider '{provider}' is not configured")


class JellyseerrNotConfiguredError(NotConfiguredError):
    """The Jellyseerr connection has not been configured for the profile."""

    def __init__(self, owner_id: str) -> None:
        """Initialize the error for the given owner.

        Args:
            owner_id (str): Owner (profile) missing the Jellyseerr configuration.
        """
        self.owner_id = owner_id
        super().__init__(f"Jellyseerr is not configured for profile '{owner_id}'")


# Provider errors
class ProviderError(ListSeerrError):
    """Base class for list provider failures."""

    status_code = 502


class InvalidListUrlError(ProviderError, ValueError):
    """A list URL cannot be handled by the selected provider."""

    status_code = 400


class ProviderFetchError(ProviderError):
    """A provider returned an error or an unexpected payload."""

    status_code = 502


class UnsupportedProviderError(ProviderError, LookupError):
    """No fetcher is registered for the requested provider."""

    status_code = 400


# Jellyseerr errors
class JellyseerrError(ListSeerrError):
    """Base class for Jellyseerr client failures."""

    status_code = 502


class JellyseerrRequestError(JellyseerrError):
    """A Jellyseerr request could not be submitted."""

    status_code = 502


# Scheduler errors
class SchedulerError(ListSeerrError):
    """Base class for scheduler-related failures."""

    status_code = 500


class InvalidScheduleError(SchedulerError, ValueError):
    """A cron expression could not be parsed."""

    status_code = 400

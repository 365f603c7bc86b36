"""
Error taxonomy for the short video service.

Validation and query errors are raised synchronously to the caller.
Provider errors are raised inside a job's background task and end up
as the job's error message.
"""


class ShortVideoError(Exception):
    """Base class for all service errors."""


class ValidationError(ShortVideoError):
    """The job creation request is malformed."""


# ================================
# PROVIDER ERRORS
# ================================


class ProviderError(ShortVideoError):
    """An external provider call failed."""


class SynthesisError(ProviderError):
    """Speech synthesis failed (transport error or non-success response)."""


class SearchError(ProviderError):
    """Footage search failed (transport error or non-success response)."""


class FetchError(ProviderError):
    """Downloading a footage variant failed."""


class NoResultsError(ProviderError):
    """The footage search returned no candidates for a term."""

    def __init__(self, term: str):
        self.term = term
        super().__init__(f"No videos found for: {term}")


# ================================
# QUERY ERRORS
# ================================


class NotFoundError(ShortVideoError):
    """No job exists with the given id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Video job {job_id} not found")


class NotReadyError(ShortVideoError):
    """The job has not reached the ready state."""

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Video job {job_id} is not ready (status: {status})")


class MissingAssetError(ShortVideoError):
    """The job is ready but its primary video file is gone from storage."""

    def __init__(self, job_id: str, path: str):
        self.job_id = job_id
        self.path = path
        super().__init__(f"Video file for job {job_id} is missing: {path}")


class JobStateError(ShortVideoError):
    """A job mutation would break the job lifecycle rules."""

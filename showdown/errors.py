from __future__ import annotations


class ShowdownError(Exception):
    """Base for domain failures; `status_code` is the HTTP mapping used by routes."""
    status_code = 400

    def __init__(self, detail: str | None = None):
        self.detail = detail or (self.__doc__ or "").strip() or type(self).__name__
        super().__init__(self.detail)


class InvalidInput(ShowdownError):
    """Missing or malformed input"""


class SelfVoteRejected(ShowdownError):
    """You cannot vote on your own submission"""


class SubmissionNotFound(ShowdownError):
    """Submission not found"""
    status_code = 404


class PermissionDenied(ShowdownError):
    """Admin access required"""
    status_code = 403


class UploadWindowClosed(ShowdownError):
    """Uploads are closed"""


class UploadNotOpen(UploadWindowClosed):
    """Competition has not started yet!"""


class CompetitionEnded(UploadWindowClosed):
    """Competition has ended!"""


class StorageUnavailable(ShowdownError):
    """Storage temporarily unavailable, safe to retry"""
    status_code = 503

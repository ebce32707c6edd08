"""Exceptions raised by the verification wizard."""


class VerificationError(Exception):
    """Base class for wizard errors surfaced to the view layer."""


class InvalidStepError(VerificationError):
    pass


class UnknownFieldError(VerificationError):
    pass


class FieldLockedError(VerificationError):
    """A field that cannot change after it was confirmed (e.g. username)."""


class RecordLockedError(VerificationError):
    """The record left ``in_progress`` and is no longer editable by the wizard."""


class AdmissionTestLockedError(VerificationError):
    pass


class IncompleteAnswersError(VerificationError):
    pass


class SubmissionError(VerificationError):
    """The persistence collaborator failed to store the submitted record."""


class ReviewError(VerificationError):
    pass


class AttachmentReleasedError(VerificationError):
    """An attachment handle was used after ``release()``."""


class AttachmentStagingError(VerificationError):
    """An upload could not be written to the staging directory."""

"""Exceptions raised by admin-panel actions."""


class AdminActionError(Exception):
    """A row action could not be applied (missing row, self-targeting, ...)."""


class EscrowActionError(AdminActionError):
    """Release/refund attempted on an escrow item that is not held."""

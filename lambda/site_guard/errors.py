"""Errors raised while checking the site and restarting its instance.

Every error carries an ``ErrorCode`` so the handler can log it in a
machine-readable way; the message is what ends up in the result's
``error`` field.
"""

from enum import Enum


class ErrorCode(str, Enum):
    CONFIG_MISSING = "CONFIG_MISSING"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    UNSTABLE_STATE = "UNSTABLE_STATE"


class SiteGuardError(Exception):
    """Base class for every error this function reports."""

    code = None

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ConfigError(SiteGuardError):
    code = ErrorCode.CONFIG_MISSING


class TransportError(SiteGuardError):
    """An AWS API call could not complete or was rejected."""

    code = ErrorCode.TRANSPORT_ERROR


class InstanceNotFoundError(SiteGuardError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, instance_id):
        self.instance_id = instance_id
        super().__init__(f"instance {instance_id} not found")


class StopTimeoutError(SiteGuardError):
    """``waited`` is None when the waiter gave up early on a terminal state."""

    code = ErrorCode.TIMEOUT

    def __init__(self, instance_id, waited, reason=""):
        self.instance_id = instance_id
        self.waited = waited
        if waited is None:
            message = f"instance {instance_id} did not stop: {reason}"
        else:
            message = f"timeout waiting for instance {instance_id} to stop after {waited:g}s"
            if reason:
                message = f"{message}: {reason}"
        super().__init__(message)


class UnstableStateError(SiteGuardError):
    """The instance is in a state the restart procedure will not act on."""

    code = ErrorCode.UNSTABLE_STATE

    def __init__(self, instance_id, state):
        self.instance_id = instance_id
        self.state = state
        super().__init__(
            f"instance {instance_id} is in {state} state, waiting for it to stabilize"
        )


class RemediationFailed(SiteGuardError):
    """Raised by the handler when FAIL_ON_ERROR asks Lambda to mark the run failed."""

    def __init__(self, result, cause=None):
        self.result = result
        self.cause = cause
        self.code = getattr(cause, "code", None)
        super().__init__(result.get("error", "remediation failed"))

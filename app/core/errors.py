"""
Error taxonomy for SlackOverload.

Every error raised by the core, the stores and the Slack adapters derives from
SlackOverloadError so the HTTP layer can render a user-facing message for it.
"""

from typing import List, Optional


class SlackOverloadError(Exception):
    """Base class for all application errors."""

    pass


# User input errors (shown verbatim, never retried)


class UserInputError(SlackOverloadError):
    """
    Raised when the caller sent something we cannot act on.
    The message is safe to show back to the user as-is.
    """

    pass


class TriggerDefinitionError(UserInputError):
    """Raised when a trigger definition does not match the trigger grammar."""

    pass


class InvalidDurationError(UserInputError):
    """Raised when a duration token cannot be parsed."""

    def __init__(self, token: str, message: Optional[str] = None):
        self.token = token
        super().__init__(message or f"invalid duration {token!r}")


class TriggerNotFoundError(UserInputError):
    """Raised when a trigger name is not defined for the user."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"trigger {name} not registered")


class UnauthorizedIdentityError(SlackOverloadError):
    """Raised when the calling Slack account has never completed the linking flow."""

    def __init__(self, slack_id: str, message: Optional[str] = None):
        self.slack_id = slack_id
        super().__init__(
            message
            or f"Slack user {slack_id} has not authorized the Slack Overload app"
        )


# Collaborator errors (vault, blob storage, Slack API)


class CollaboratorTransportError(SlackOverloadError):
    """
    Raised when a backing service call fails for infrastructure reasons.
    This is a system error - the message carries the operation context.
    """

    pass


class BlobNotFoundError(CollaboratorTransportError):
    """Raised by a blob store when the requested blob does not exist."""

    def __init__(self, container: str, name: str):
        self.container = container
        self.name = name
        super().__init__(f"blob {container}/{name} not found")


class SecretNotFoundError(CollaboratorTransportError):
    """Raised by a secret vault when the requested secret does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"secret {key!r} not found in vault")


# Apply / fan-out errors


class SubOperationFailure:
    """One failed mutation (presence, status or dnd) against a single identity."""

    def __init__(self, operation: str, error: BaseException):
        self.operation = operation
        self.error = error

    def __str__(self) -> str:
        return f"could not set {self.operation}: {self.error}"

    def __repr__(self) -> str:
        return f"SubOperationFailure({self.operation!r}, {self.error!r})"


class ActionApplyError(SlackOverloadError):
    """Raised when one or more mutations failed for a single Slack identity."""

    def __init__(self, slack_id: str, failures: List[SubOperationFailure]):
        self.slack_id = slack_id
        self.failures = failures
        details = "; ".join(str(f) for f in failures)
        super().__init__(f"error updating slack user {slack_id}: {details}")

    @property
    def operations(self) -> List[str]:
        return [f.operation for f in self.failures]


class IdentityFailure:
    """A linked identity that could not be updated during fan-out."""

    def __init__(self, slack_id: str, team_id: str, error: BaseException):
        self.slack_id = slack_id
        self.team_id = team_id
        self.error = error

    def __str__(self) -> str:
        return f"{self.slack_id} on team {self.team_id}: {self.error}"

    def __repr__(self) -> str:
        return f"IdentityFailure({self.slack_id!r}, {self.team_id!r}, {self.error!r})"


class PartialFanOutFailure(SlackOverloadError):
    """
    Raised when at least one linked identity failed to update.
    Identities that succeeded keep their new state; nothing is rolled back.
    """

    def __init__(self, failures: List[IdentityFailure], succeeded: List[str]):
        self.failures = failures
        self.succeeded = succeeded
        lines = "\n".join(f"- {f}" for f in failures)
        super().__init__(
            f"{len(failures)} of {len(failures) + len(succeeded)} linked Slack accounts "
            f"could not be updated:\n{lines}"
        )

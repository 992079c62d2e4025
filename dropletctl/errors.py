"""Error types raised by dropletctl.

Every workflow failure is a ``LifecycleError``; its message is what the
operator sees, both on the console and in the chat.
"""


class DropletctlError(Exception):
    """Base class for all dropletctl errors."""


class ConfigError(DropletctlError):
    """Required configuration is missing or malformed."""


class ProviderError(DropletctlError):
    """A doctl invocation failed."""


class LifecycleError(DropletctlError):
    """A step of the up or down workflow failed."""


class NotFound(LifecycleError):
    pass


class AlreadyExists(LifecycleError):
    pass


class LookupFailed(LifecycleError):
    """Listing droplets, snapshots, projects or records failed."""


class CreateFailed(LifecycleError):
    pass


class AssignFailed(LifecycleError):
    pass


class DNSCreateFailed(LifecycleError):
    pass


class DNSDeleteFailed(LifecycleError):
    pass


class SnapshotCleanupFailed(LifecycleError):
    """The droplet is live but the consumed snapshot could not be deleted."""


class ShutdownFailed(LifecycleError):
    pass


class SnapshotFailed(LifecycleError):
    pass


class DeleteFailed(LifecycleError):
    pass


class WaitFailed(LifecycleError):
    """Polling an action or droplet status failed."""


class WaitTimeout(WaitFailed):
    pass


class Cancelled(LifecycleError):
    """The workflow was cancelled, e.g. because the bot is shutting down."""


class SnapshotVerificationFailed(LifecycleError):
    pass


class ResourceStillExists(LifecycleError):
    pass


class InvalidSnapshotID(LifecycleError):
    pass


class NoPublicIP(LifecycleError):
    pass

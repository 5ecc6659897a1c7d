"""Exception types raised by the technique graph core and its collaborators."""


class TechtreeError(Exception):
    """Base class for all techtree errors."""
    pass


class InvalidParentError(TechtreeError):
    """Raised when a node references a parent that does not exist."""
    pass


class DanglingEndpointError(TechtreeError):
    """Raised when an edge references a node that does not exist."""
    pass


class SelectedNodeMissingError(TechtreeError):
    """Raised when the selected node no longer exists at add time."""
    pass


class NodeNotFoundError(TechtreeError):
    """Raised when an operation names a node that does not exist."""
    pass


class StoreError(TechtreeError):
    """Raised by document store implementations on a failed write."""
    pass


class PersistenceFailedError(TechtreeError):
    """Raised when mirroring an applied change to the store fails.

    The in-memory mutation is not rolled back; ``record_id`` names the node
    or edge that was created locally.
    """

    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id

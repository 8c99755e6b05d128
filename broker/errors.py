"""Error kinds raised by the broker core."""


class BrokerError(Exception):
    """Base class for broker failures."""


class BackendUnavailable(BrokerError):
    """A mount, share or config call against the storage backend failed."""


class PersistenceFailure(BrokerError):
    """Writing or reading a state snapshot failed.

    In-memory state and backend side effects are left as they were.
    """


class BindingNotFound(BrokerError):
    def __init__(self, binding_id: str = ""):
        super().__init__("binding not found")
        self.binding_id = binding_id


class InvalidBindingParameters(BrokerError, ValueError):
    """A binding parameter has the wrong type."""

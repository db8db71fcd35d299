class SnapshotLookupError(RuntimeError):
    """Raised when the record store cannot supply a snapshot."""

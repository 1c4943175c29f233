class ScrollSourceUnavailable(RuntimeError):
    """Raised when the host page cannot deliver scroll events (no window / addEventListener)."""
    pass

class DirectorySpecError(ValueError):
    """Raised when a directory YAML file is missing or malformed."""
    pass

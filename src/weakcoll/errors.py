class AnchorNotFoundError(ValueError):
    """Raised when the item to insert relative to is not in a sequence."""


class DuplicateKeyError(ValueError):
    """Raised when adding a key that already holds a live value."""

    def __init__(self, key) -> None:
        super().__init__(f"Key already exists: {key!r}")
        self.key = key

"""Exception types shared by the record stores, handlers and API layer."""


class ValidationError(Exception):
    """Client input failed validation.

    Raised before any side effect takes place. The message is short and
    intended to be returned to the client as-is.
    """

    pass


class NotFound(Exception):
    """No image record exists for the requested id."""

    def __init__(self, image_id: int):
        super().__init__(f"Image not found: {image_id}")
        self.image_id = image_id


class StoreError(Exception):
    """The record store backend failed (constraint violation, lost connection, ...).

    The original driver exception is always chained as ``__cause__``.
    """

    pass

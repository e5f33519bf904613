"""Domain errors raised by the voter query services.

Each error carries the short code rendered as ``error`` in the failure
envelope; the HTTP status is chosen by the handlers in ``kural.main``.
"""


class UnsupportedFieldError(ValueError):
    """A logical field (or collection) has no alias mapping."""

    code = "unsupported_field"

    def __init__(self, field: str, collection: str) -> None:
        self.field = field
        self.collection = collection
        super().__init__(
            f"Field '{field}' is not supported for collection '{collection}'"
        )


class NoSearchCriteriaError(ValueError):
    """An interactive search was submitted without any usable criterion."""

    code = "no_search_criteria"

    def __init__(self, message: str = "Please provide at least one search parameter"):
        super().__init__(message)


class InvalidPartNumberError(ValueError):
    """A part number path segment could not be parsed."""

    code = "invalid_part_number"

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Cannot parse part number: {raw}")


class RecordNotFoundError(LookupError):
    """A single-record lookup missed."""

    code = "not_found"

    def __init__(self, resource: str = "Voter", message: str | None = None) -> None:
        self.resource = resource
        super().__init__(message or f"{resource} not found")


class StoreUnavailableError(RuntimeError):
    """The document store failed or did not answer in time."""

    code = "store_unavailable"

class GenogramInputError(ValueError):
    """Family data that cannot be turned into a graph at all."""


class MalformedPersonError(GenogramInputError):
    """A person record without a usable identity (key or sex)."""

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record

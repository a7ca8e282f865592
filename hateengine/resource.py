"""Common base for loadable resources."""


class Resource:
    """A resource that knows whether its data has been loaded."""

    def __init__(self) -> None:
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """True once the resource's data is available."""
        return self._loaded
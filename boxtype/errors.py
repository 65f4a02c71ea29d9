class BoxTypeException(Exception):
    """Base class of every error raised by boxtype."""

    def message(self) -> str:
        return "boxtype error"

    def __str__(self) -> str:
        return self.message()

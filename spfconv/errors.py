class SpfError(Exception):
    """Base class for everything the SPF converter raises on purpose."""


class InvalidFormatError(SpfError, ValueError):
    pass


class CapacityExceededError(SpfError, ValueError):
    pass


class IndexOutOfRangeError(SpfError, IndexError):
    pass


class InvalidOutputTargetError(SpfError, ValueError):
    pass


class MissingInputError(SpfError, FileNotFoundError):
    pass

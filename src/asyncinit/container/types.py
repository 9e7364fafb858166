"""Service lifetimes."""

from enum import Enum, auto


class Scope(Enum):
    """How long a resolved service lives and who releases it.

    SINGLETON instances belong to the container root and are released when the
    container is closed. SCOPED instances are shared within one
    :class:`~asyncinit.container.scope.ServiceScope` and TRANSIENT instances are
    created per resolution; both are released with the scope that created them.
    """

    SINGLETON = auto()
    SCOPED = auto()
    TRANSIENT = auto()

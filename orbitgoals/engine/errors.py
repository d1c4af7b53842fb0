"""Domain errors raised by services, translated to HTTP errors in routers."""


class OrbitError(Exception):
    """Base class for OrbitGoals domain errors."""


class GoalNotFoundError(OrbitError):
    pass


class InvalidLogDateError(OrbitError):
    pass


class ShopItemNotFoundError(OrbitError):
    pass


class AlreadyOwnedError(OrbitError):
    pass


class InsufficientCoinsError(OrbitError):
    pass


class SpinUnavailableError(OrbitError):
    """Raised when today's spin was already used."""


class PaymentNotFoundError(OrbitError):
    pass


class PaymentStateError(OrbitError):
    """Raised when a terminal (approved/rejected) request is changed again."""


class BackendUnavailableError(OrbitError):
    """Remote store is missing or unusable for an operation that needs it."""


STATUS_CODES: dict[type[OrbitError], int] = {
    GoalNotFoundError: 404,
    ShopItemNotFoundError: 404,
    PaymentNotFoundError: 404,
    InvalidLogDateError: 422,
    AlreadyOwnedError: 409,
    SpinUnavailableError: 409,
    PaymentStateError: 409,
    InsufficientCoinsError: 402,
    BackendUnavailableError: 503,
}


def status_code_for(exc: OrbitError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400

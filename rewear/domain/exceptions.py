class DomainException(Exception):
    """
    Base Exception For Donation Domain.
    `message` is safe to show to an end user as is.
    """

    default_message = "요청을 처리할 수 없습니다."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainException):
    default_message = "요청한 정보를 찾을 수 없습니다."


class InvalidState(DomainException):
    default_message = "현재 상태에서는 처리할 수 없는 요청입니다."


class AlreadyExists(InvalidState):
    default_message = "이미 존재합니다."


class ConcurrentUpdate(InvalidState):
    default_message = "다른 요청에 의해 변경되었습니다. 다시 시도해주세요."


class ValidationError(DomainException):
    default_message = "입력값이 올바르지 않습니다."


GENERIC_FAILURE_MESSAGE = "요청 처리 중 오류가 발생했습니다."


def user_message(exc: Exception) -> str:
    # Unexpected errors never leak internal details
    if isinstance(exc, DomainException):
        return exc.message
    return GENERIC_FAILURE_MESSAGE

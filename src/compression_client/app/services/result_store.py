from ..schemas import CompressionResult
from .domain import Notice

SUCCESS_MESSAGE = "Image compressed successfully!"


class ResultStore:
    """Most recent compression result and the single live notice."""

    def __init__(self):
        self.result: CompressionResult | None = None
        self.notice: Notice | None = None

    def clear(self) -> None:
        self.result = None
        self.notice = None

    def set_result(self, result: CompressionResult) -> None:
        self.result = result
        self.notice = Notice.success(SUCCESS_MESSAGE)

    def set_error(self, message: str) -> None:
        self.notice = Notice.error(message)

    def dismiss_notice(self) -> None:
        self.notice = None

    @property
    def error_message(self) -> str | None:
        if self.notice and self.notice.is_error:
            return self.notice.message
        return None

    @property
    def success_message(self) -> str | None:
        if self.notice and not self.notice.is_error:
            return self.notice.message
        return None

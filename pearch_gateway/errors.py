from typing import Any, Dict, Optional


class PearchError(Exception):
    """Base error for anything that goes wrong while processing one item."""

    def __init__(
        self,
        message: str,
        item_index: Optional[int] = None,
        task_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.item_index = item_index
        self.task_id = task_id

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
        }
        if self.item_index is not None:
            data["item_index"] = self.item_index
        if self.task_id is not None:
            data["task_id"] = self.task_id
        return data

    def __str__(self) -> str:
        if self.item_index is not None:
            return f"{self.message} [item {self.item_index}]"
        return self.message


class SearchValidationError(PearchError):
    pass


class CredentialError(PearchError):
    pass


class TransportError(PearchError):
    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class MissingTaskIdError(PearchError):
    pass


class TaskFailedError(PearchError):
    def __init__(self, message: str, status: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        return data


class TaskTimeoutError(PearchError, TimeoutError):
    def __init__(self, message: str, max_wait_seconds: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.max_wait_seconds = max_wait_seconds

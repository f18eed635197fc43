"""Errors raised by the task store and translated at the HTTP boundary."""


class TaskStoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskStoreError):
    status_code = 400


class MalformedBodyError(TaskStoreError):
    status_code = 400


class NotFoundError(TaskStoreError):
    status_code = 404


class StorageError(TaskStoreError):
    status_code = 500

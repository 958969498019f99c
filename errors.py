"""
Teapot API — Errors
Raised by the route handlers, rendered by the handlers registered in main.py.
"""


class ApiError(Exception):
    status_code = 500

    def to_dict(self) -> dict:
        return {"message": str(self)}


class NotFound(ApiError):
    """A referenced teapot, tea or brew does not exist."""

    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity

    def to_dict(self) -> dict:
        return {"code": "NOT_FOUND", "message": str(self)}


class ValidationFailed(ApiError):
    """One or more request fields are malformed or out of range."""

    status_code = 422

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("The given data was invalid.")
        self.errors = errors

    def to_dict(self) -> dict:
        return {"message": str(self), "errors": self.errors}

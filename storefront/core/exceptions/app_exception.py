from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppHttpException(HTTPException):
    """HTTP error raised by the services.

    `solution` is a hint shown to API clients; `errors` carries field-level
    validation messages.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        solution: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.solution = solution
        self.errors = errors

    @classmethod
    def invalid_request(cls, errors: List[Dict[str, Any]]) -> "AppHttpException":
        return cls(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid request",
            errors=errors,
        )

    @property
    def content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"detail": self.detail}
        if self.solution:
            content["solution"] = self.solution
        if self.errors:
            content["errors"] = self.errors
        return content

    @property
    def fields(self) -> List[str]:
        return [str(error["loc"][-1]) for error in self.errors or [] if error.get("loc")]

from enum import Enum
from typing import Any, List, Optional

from fastapi import HTTPException
from fastapi import status as httpStatus
from pydantic import BaseModel

class ErrorCode(str, Enum):
    OK = "OK"
    UNKNOWN = "UNKNOWN"
    NOT_FOUND = "NOT_FOUND"
    ID_NOT_FOUND = "ID_NOT_FOUND"
    NAME_NOT_FOUND = "NAME_NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    TABLE_NAME_ALREADY_EXISTS = "TABLE_NAME_ALREADY_EXISTS"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    NOT_SUPPORTED = "NOT_SUPPORTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    END_OF_ROW = "END_OF_ROW"

class CatalogErrorModel(BaseModel):
    message: str
    type: str
    code: int
    stack: Optional[List[str]] = None

class ErrorResponse(BaseModel):
    error: CatalogErrorModel

class BaseCatalogException(HTTPException):
    def __init__(self, statusCode: int, message: str, errorCode: ErrorCode, stack: Optional[List[str]] = None):
        self.errorCode = errorCode
        self.message = message
        self.stack = stack
        super().__init__(status_code=statusCode, detail={"error": {
            "message": message,
            "type": errorCode.value,
            "code": statusCode,
            "stack": stack
        }})

    def __str__(self) -> str:
        return f"{self.errorCode.value}: {self.message}"

class NotFoundException(BaseCatalogException):
    def __init__(self, resourceType: str, identifier: Any, errorCode: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(
            statusCode=httpStatus.HTTP_404_NOT_FOUND,
            message=f"{resourceType} with identifier '{identifier}' not found.",
            errorCode=errorCode
        )

class IdNotFoundException(NotFoundException):
    def __init__(self, resourceType: str, objectId: Any):
        super().__init__(
            resourceType=resourceType,
            identifier=objectId,
            errorCode=ErrorCode.ID_NOT_FOUND
        )

class NameNotFoundException(NotFoundException):
    def __init__(self, resourceType: str, name: Any):
        super().__init__(
            resourceType=resourceType,
            identifier=name,
            errorCode=ErrorCode.NAME_NOT_FOUND
        )

class AlreadyExistsException(BaseCatalogException):
    def __init__(self, resourceType: str, name: Any, errorCode: ErrorCode = ErrorCode.ALREADY_EXISTS):
        super().__init__(
            statusCode=httpStatus.HTTP_409_CONFLICT,
            message=f"{resourceType} already exists: {name}",
            errorCode=errorCode
        )

class TableNameAlreadyExistsException(AlreadyExistsException):
    def __init__(self, name: str):
        super().__init__(
            resourceType="Table",
            name=name,
            errorCode=ErrorCode.TABLE_NAME_ALREADY_EXISTS
        )

class InvalidParameterException(BaseCatalogException):
    def __init__(self, message: str = "The request contained invalid parameters."):
        super().__init__(
            statusCode=httpStatus.HTTP_400_BAD_REQUEST,
            message=message,
            errorCode=ErrorCode.INVALID_PARAMETER
        )

class NotSupportedException(BaseCatalogException):
    def __init__(self, key: str, supportedKeys: List[str]):
        super().__init__(
            statusCode=httpStatus.HTTP_400_BAD_REQUEST,
            message=f"Key '{key}' is not supported. Supported keys: {', '.join(supportedKeys)}.",
            errorCode=ErrorCode.NOT_SUPPORTED
        )

class InternalErrorException(BaseCatalogException):
    def __init__(self, message: str = "The metadata repository returned inconsistent data."):
        super().__init__(
            statusCode=httpStatus.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            errorCode=ErrorCode.INTERNAL_ERROR
        )

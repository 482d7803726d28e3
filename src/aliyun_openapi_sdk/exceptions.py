"""
Exception classes for Aliyun OpenAPI Python SDK
"""

from typing import Optional, Dict, Any


class AliyunSDKError(Exception):
    """Base exception for all Aliyun OpenAPI SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(AliyunSDKError):
    """Exception raised for invalid client configuration"""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class TransportError(AliyunSDKError):
    """Exception raised when the HTTP call itself fails (connect, timeout, I/O)"""

    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class InvalidHeaderError(AliyunSDKError):
    """Exception raised when a header name or value is not valid HTTP header syntax"""

    def __init__(self, message: str, error_code: str = "INVALID_HEADER", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class InvalidRequestError(AliyunSDKError):
    """Exception raised for malformed requests: bad method, parameters, key or timestamp"""

    def __init__(self, message: str, error_code: str = "INVALID_REQUEST", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class BuilderConsumedError(InvalidRequestError):
    """Exception raised when a request builder is used after it has been sent"""

    def __init__(self, message: str = "Request builder has already been sent and cannot be reused"):
        super().__init__(message, "BUILDER_CONSUMED")


class ResponseDecodeError(AliyunSDKError):
    """Exception raised when a response body cannot be decoded"""

    def __init__(self, message: str, error_code: str = "DECODE_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class ApiError(AliyunSDKError):
    """
    Exception raised for non-success responses carrying a service error envelope.

    Attributes:
        error_code: Provider error code (e.g. ``InvalidAccessKeyId.NotFound``)
        error_message: Provider error message
        request_id: Request id reported by the service, empty when not provided
        recommend: Diagnosis link reported by the service, empty when not provided
        http_status: HTTP status code of the response
    """

    def __init__(self, error_code: str, error_message: str, request_id: str = "",
                 http_status: int = 0, recommend: str = ""):
        super().__init__(
            f"Request id: {request_id}, Error code: {error_code}, Error message: {error_message}",
            error_code,
            {"request_id": request_id, "http_status": http_status},
        )
        self.error_message = error_message
        self.request_id = request_id
        self.http_status = http_status
        self.recommend = recommend

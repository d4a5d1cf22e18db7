"""
Common exceptions.

Module cung cấp các exception chung được sử dụng trong nhiều modules.
Domain services raise the ``Resource*``/``ValidationError`` family; the caching
layer passes them through untouched. ``CacheBackendError`` is the only exception
owned by the cache itself and never leaves it.
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class BaseAppException(Exception):
    """Base exception class cho tất cả ứng dụng."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Có lỗi xảy ra", code: str = "app_error"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(BaseAppException):
    """Exception cho các lỗi liên quan đến validation."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        message: str = "Dữ liệu không hợp lệ",
        code: str = "validation_error",
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, code)
        self.errors = errors or []


class BadRequestException(BaseAppException):
    """Exception cho các lỗi yêu cầu không hợp lệ."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "Yêu cầu không hợp lệ",
        code: str = "bad_request",
        field: Optional[str] = None,
    ):
        super().__init__(message, code)
        self.field = field


class ResourceError(BaseAppException):
    """Exception cho các lỗi liên quan đến tài nguyên."""

    def __init__(
        self,
        message: str = "Lỗi tài nguyên",
        code: str = "resource_error",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        super().__init__(message, code)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceNotFound(ResourceError):
    """Exception khi không tìm thấy tài nguyên."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        message: str = "Không tìm thấy tài nguyên",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            code="resource_not_found",
            resource_type=resource_type,
            resource_id=resource_id,
        )


class ResourceConflictException(ResourceError):
    """Exception khi có xung đột giữa các tài nguyên (e.g. duplicate enrollment)."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        message: str = "Xung đột tài nguyên",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            code="resource_conflict",
            resource_type=resource_type,
            resource_id=resource_id,
        )


class AuthorizationError(BaseAppException):
    """Exception cho các lỗi phân quyền."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "Không có quyền truy cập",
        code: str = "authorization_error",
    ):
        super().__init__(message, code)


class ConfigurationError(BaseAppException):
    """Exception cho các lỗi cấu hình."""

    def __init__(self, message: str = "Lỗi cấu hình", config_key: Optional[str] = None):
        super().__init__(message, "configuration_error")
        self.config_key = config_key


class CacheBackendError(BaseAppException):
    """Storage or serialization fault inside a cache backend."""

    def __init__(
        self,
        message: str = "Lỗi cache backend",
        key: Optional[str] = None,
        backend: Optional[str] = None,
    ):
        super().__init__(message, "cache_backend_error")
        self.key = key
        self.backend = backend


# Alias cho tương thích ngược
NotFoundException = ResourceNotFound
PermissionDeniedException = AuthorizationError

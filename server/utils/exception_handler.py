"""
统一异常处理

业务异常层级、API 错误处理装饰器与兜底中间件。
"""

import asyncio
import functools
import logging
import traceback
from typing import Callable, Any, Tuple, Type

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from server.config.env_config import is_production

logger = logging.getLogger(__name__)


def _show_detailed_errors() -> bool:
    """生产环境不暴露详细错误"""
    return not is_production()


def _error_response(status_code: int, error: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "error_type": error_type
        }
    )


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """异常处理中间件（兜底，正常情况下由 api_error_handler 处理）"""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except BusinessError as e:
            logger.warning(f"业务异常 [{request.url.path}]: {e.message}")
            return _error_response(e.code, e.message, e.error_type)
        except Exception as e:
            logger.error(f"未处理的异常: {str(e)}\n{traceback.format_exc()}")
            if _show_detailed_errors():
                error_detail = f"错误: {str(e)}"
            else:
                error_detail = "服务器内部错误，请稍后重试"
            return _error_response(500, error_detail, "internal_error")


# ==================== 自定义业务异常 ====================

class BusinessError(Exception):
    """
    业务异常基类

    用于表示业务逻辑错误，与系统错误区分开来。
    """
    def __init__(self, message: str, code: int = 400, error_type: str = "business_error"):
        self.message = message
        self.code = code
        self.error_type = error_type
        super().__init__(message)


class ValidationError(BusinessError):
    """参数验证错误"""
    def __init__(self, message: str, field: str = None):
        self.field = field
        error_type = f"validation_error:{field}" if field else "validation_error"
        super().__init__(message, code=400, error_type=error_type)


class InvalidInputError(ValidationError):
    """出生日期/时间格式错误（未排盘，不落任何状态）"""


class ChartComputationError(BusinessError):
    """历法库拒绝或计算失败（格式正确但日期非法等）"""
    def __init__(self, message: str = "排盘计算失败，请检查出生日期时间"):
        super().__init__(message, code=422, error_type="chart_computation_error")


class NotFoundError(BusinessError):
    """资源不存在错误"""
    def __init__(self, message: str = "资源不存在", resource: str = None):
        self.resource = resource
        super().__init__(message, code=404, error_type="not_found")


class FortuneFetchFailure(Exception):
    """每日运势获取失败（非致命，缓存层吞掉并返回 None）"""


class CycleExtractionWarning(UserWarning):
    """单步大运解析失败（非致命，只记录，不抛出）"""
    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"大运第{index}步: {reason}")


# ==================== API 错误处理装饰器 ====================

def api_error_handler(
    func: Callable = None,
    *,
    catch: Tuple[Type[Exception], ...] = (Exception,),
    default_error: str = "服务器内部错误",
    log_errors: bool = True
):
    """
    API 错误处理装饰器

    BusinessError 按其 code 返回标准错误响应，其他异常返回 500。

    使用示例：
    ```python
    @router.post("/bazi/chart")
    @api_error_handler
    async def calculate_chart(request: ChartRequest):
        ...
    ```
    """
    def _handle_business(fn, e: BusinessError) -> JSONResponse:
        if log_errors:
            logger.warning(f"业务异常 [{fn.__name__}]: {e.message}")
        return _error_response(e.code, e.message, e.error_type)

    def _handle_other(fn, e: Exception) -> JSONResponse:
        if log_errors:
            logger.error(f"API 错误 [{fn.__name__}]: {e}", exc_info=True)
        error_msg = str(e) if _show_detailed_errors() else default_error
        return _error_response(500, error_msg, "internal_error")

    def decorator(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except BusinessError as e:
                return _handle_business(fn, e)
            except HTTPException:
                raise
            except catch as e:
                return _handle_other(fn, e)

        @functools.wraps(fn)
        def sync_wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except BusinessError as e:
                return _handle_business(fn, e)
            except HTTPException:
                raise
            except catch as e:
                return _handle_other(fn, e)

        if asyncio.iscoroutinefunction(fn):
            return async_wrapper
        return sync_wrapper

    # 支持 @api_error_handler 和 @api_error_handler(...) 两种用法
    if func is not None:
        return decorator(func)
    return decorator

"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- backend
- operation
- file_name
- duration_ms

Usage:
    from dashboard.utils.logging import configure_logging, log_storage_request
    
    configure_logging('file-dashboard', 'INFO')
    log_storage_request(logger, backend='supabase', operation='upload', duration_ms=45.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""
    
    _service_name = None
    _configured = False
    
    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.
        
        Args:
            service_name: Service identifier
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return
        
        cls._service_name = service_name
        
        root_logger = logging.getLogger()
        root_logger.handlers = []
        
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )
        
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True
        
        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    backend: Optional[str] = None,
    operation: Optional[str] = None,
    file_name: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.
    
    Args:
        event: Event name (mandatory)
        backend: Optional storage backend name
        operation: Optional operation name
        file_name: Optional file name
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
        
    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }
    
    if backend:
        extra["backend"] = backend
    if operation:
        extra["operation"] = operation
    if file_name:
        extra["file_name"] = file_name
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
    
    return extra


# Storage event functions

def log_storage_request(
    logger: logging.Logger,
    backend: str,
    operation: str,
    duration_ms: Optional[float] = None,
    file_name: Optional[str] = None,
    is_mock: bool = False,
    **kwargs
):
    """
    Log a completed storage backend request.
    
    Args:
        logger: Logger instance
        backend: Backend name (supabase, drive) (required)
        operation: Operation name (upload, list, delete, share) (required)
        duration_ms: Optional duration in milliseconds
        file_name: Optional file name
        is_mock: Whether the request was served by the mock backend
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_request",
        backend=backend,
        operation=operation,
        file_name=file_name,
        duration_ms=duration_ms,
        is_mock=is_mock,
        **kwargs
    )
    
    logger.info(f"Storage request: {backend}.{operation}", extra=extra)


def log_storage_failure(
    logger: logging.Logger,
    backend: str,
    operation: str,
    error: str,
    duration_ms: Optional[float] = None,
    file_name: Optional[str] = None,
    level: int = logging.ERROR,
    **kwargs
):
    """
    Log a failed storage backend request.
    
    Args:
        logger: Logger instance
        backend: Backend name (required)
        operation: Operation name (required)
        error: Error message (required)
        duration_ms: Optional duration in milliseconds
        file_name: Optional file name
        level: Log level, WARNING for failures that are recovered
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_failure",
        backend=backend,
        operation=operation,
        file_name=file_name,
        duration_ms=duration_ms,
        error=str(error),
        **kwargs
    )
    
    logger.log(level, f"Storage failure: {backend}.{operation} - {error}", extra=extra)


def log_upload_event(
    logger: logging.Logger,
    outcome: str,
    file_name: Optional[str] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
    **kwargs
):
    """
    Log the end of an upload workflow.
    
    Args:
        logger: Logger instance
        outcome: Workflow outcome (rejected, failed, succeeded) (required)
        file_name: Optional file name
        duration_ms: Optional duration in milliseconds
        error: Optional error message
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_workflow",
        file_name=file_name,
        duration_ms=duration_ms,
        outcome=outcome,
        **kwargs
    )
    if error:
        extra["error"] = str(error)
    
    message = f"Upload {outcome}: {file_name}"
    if error:
        message += f" - {error}"
    
    if outcome == "succeeded":
        logger.info(message, extra=extra)
    else:
        logger.warning(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)

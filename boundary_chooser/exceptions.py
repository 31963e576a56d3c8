"""
Custom exception classes for the boundary chooser.

Only whole-load problems are raised as exceptions. Record-level data quality
issues (a missing name field, a parent reference that does not resolve) are
collected as Diagnostic values by the index builder and never raised.
"""

from typing import Optional, List, Dict, Any


class BoundaryChooserError(Exception):
    """Base exception class for all boundary chooser errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class ValidationError(BoundaryChooserError):
    """Exception raised when an input does not have the expected structure."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Any = None, validation_rules: Optional[List[str]] = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error message
            field_name: Name of the field that failed validation
            invalid_value: The invalid value that caused the error
            validation_rules: List of validation rules that were violated
        """
        context = {
            'field_name': field_name,
            'invalid_value': str(invalid_value) if invalid_value is not None else None,
            'validation_rules': validation_rules or []
        }
        super().__init__(message, error_code='VALIDATION_ERROR', context=context)
        self.field_name = field_name
        self.invalid_value = invalid_value
        self.validation_rules = validation_rules or []


class LoadFailureError(BoundaryChooserError):
    """
    Exception raised when any of the load inputs cannot be read or is malformed.

    A load failure aborts the whole load; the store keeps serving the previous
    generation.
    """

    def __init__(self, message: str, source: Optional[str] = None,
                 file_path: Optional[str] = None, original_error: Optional[Exception] = None):
        """
        Initialize load failure error.

        Args:
            message: Human-readable error message
            source: Which input failed (states, lgas, wards, districts, build)
            file_path: Path to the file that caused the error
            original_error: Original exception that caused this error
        """
        context = {
            'source': source,
            'file_path': file_path,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='LOAD_FAILURE', context=context)
        self.source = source
        self.file_path = file_path
        self.original_error = original_error


class LoadInProgressError(BoundaryChooserError):
    """Exception raised when a load is requested while another is still running."""

    def __init__(self, message: str = "A boundary load is already in progress",
                 generation: Optional[int] = None):
        super().__init__(message, error_code='LOAD_IN_PROGRESS',
                         context={'current_generation': generation})
        self.generation = generation


class ConfigurationError(BoundaryChooserError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


class CorrectionTableError(ConfigurationError):
    """Exception raised when a correction table file cannot be parsed."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, config_key='correction_file', config_value=file_path)
        self.error_code = 'CORRECTION_TABLE_ERROR'
        self.context.update({
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        })
        self.file_path = file_path
        self.original_error = original_error


def create_load_failure(source: str, file_path: str, original_error: Exception) -> LoadFailureError:
    """
    Create a standardized load failure for one of the load inputs.

    Args:
        source: Name of the input that failed
        file_path: Path to the file
        original_error: Original exception

    Returns:
        LoadFailureError instance
    """
    message = f"Failed to load {source} from '{file_path}': {str(original_error)}"

    return LoadFailureError(
        message=message,
        source=source,
        file_path=file_path,
        original_error=original_error
    )


def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, LoadFailureError):
        return 'high'
    elif isinstance(error, LoadInProgressError):
        return 'medium'
    elif isinstance(error, ValidationError):
        return 'low'
    else:
        return 'medium'

"""Error handling implementation for SQLON conversions."""

import logging
from typing import Optional

from .types import (
    ErrorHandlerInterface,
    ValidationResult,
    ValidationError,
    ErrorResponse,
    ConversionError,
    ErrorType
)
from .utils.validation import ValidationUtils


class ErrorHandler(ErrorHandlerInterface):
    """
    Error handler for SQLON conversion operations.

    Validates raw input before conversion and turns conversion errors into
    suggested actions for the command line and the converter facade.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, input_data: str) -> ValidationResult:
        """
        Validate input JSON string.

        Args:
            input_data: JSON string to validate

        Returns:
            ValidationResult with validation details
        """
        try:
            return ValidationUtils.validate_json_string(input_data)
        except (TypeError, AttributeError, RecursionError) as e:
            self.logger.error(f"Unexpected error during input validation: {e}")
            return ValidationResult(
                is_valid=False,
                errors=[ValidationError(
                    type=ErrorType.MALFORMED_INPUT,
                    message=f"Validation failed with unexpected error: {str(e)}",
                    location="input"
                )],
                warnings=[]
            )

    def handle_conversion_error(self, error: ConversionError) -> ErrorResponse:
        """
        Handle conversion errors and provide a suggested action.

        Args:
            error: ConversionError to handle

        Returns:
            ErrorResponse with recovery information
        """
        self.logger.error(f"Conversion error: {error.error_type.value} - {error}")

        if error.error_type == ErrorType.MALFORMED_INPUT:
            return self._handle_malformed_input(error)
        elif error.error_type == ErrorType.UNSUPPORTED_SHAPE:
            return self._handle_unsupported_shape(error)
        elif error.error_type == ErrorType.IO_FAILURE:
            return self._handle_io_failure(error)
        else:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Unknown error type. Please check logs and retry."
            )

    def _handle_malformed_input(self, error: ConversionError) -> ErrorResponse:
        """Handle structurally invalid input."""
        where = f" near line {error.line}" if error.line is not None else ""
        return ErrorResponse(
            can_recover=False,
            suggested_action=f"Fix the input document{where} and run the conversion again."
        )

    def _handle_unsupported_shape(self, error: ConversionError) -> ErrorResponse:
        """Handle shapes the normalizer has no rule for."""
        return ErrorResponse(
            can_recover=True,
            suggested_action="Give every array of objects at least one primitive field and "
                             "restructure arrays of arrays into arrays of objects. "
                             "Rename fields that clash with generated <parent>_id keys "
                             "or that contain separators or line breaks."
        )

    def _handle_io_failure(self, error: ConversionError) -> ErrorResponse:
        """Handle read/write failures."""
        return ErrorResponse(
            can_recover=True,
            suggested_action="Check file permissions, available disk space, and directory access."
        )

"""Validation utilities for JSON input and relational models."""

import json
from typing import Any, List, Tuple

from ..models import Database
from ..types import ValidationResult, ValidationError, ErrorType


class ValidationUtils:
    """Utility class for validating documents and databases."""

    @staticmethod
    def validate_json_string(json_string: str) -> ValidationResult:
        """
        Validate JSON string syntax and convertibility.

        Args:
            json_string: JSON string to validate

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        # Check if string is empty
        if not json_string.strip():
            errors.append(ValidationError(
                type=ErrorType.MALFORMED_INPUT,
                message="JSON string is empty",
                location="input"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        # Try to parse JSON
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            errors.append(ValidationError(
                type=ErrorType.MALFORMED_INPUT,
                message=f"Invalid JSON syntax: {e.msg}",
                location=f"line {e.lineno}, column {e.colno}"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        warnings.extend(ValidationUtils._find_unsupported_shapes(data))

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def _find_unsupported_shapes(data: Any) -> List[str]:
        """List shapes the importer skips instead of converting."""
        warnings = []

        if not isinstance(data, (dict, list)):
            warnings.append(
                f"Root element is a {type(data).__name__}; only objects and arrays produce tables"
            )
            return warnings

        for path in ValidationUtils._nested_array_paths(data, "$"):
            warnings.append(f"Array of arrays at {path} is not supported and will be skipped")

        return warnings

    @staticmethod
    def _nested_array_paths(data: Any, path: str) -> List[str]:
        paths = []

        if isinstance(data, dict):
            for key, value in data.items():
                paths.extend(ValidationUtils._nested_array_paths(value, f"{path}.{key}"))
        elif isinstance(data, list):
            if any(isinstance(item, list) for item in data):
                paths.append(path)
            for index, item in enumerate(data):
                if isinstance(item, dict):
                    paths.extend(ValidationUtils._nested_array_paths(item, f"{path}[{index}]"))

        return paths

    @staticmethod
    def validate_database(database: Database) -> ValidationResult:
        """
        Validate relational integrity of a decoded database.

        Foreign keys are hints: one pointing at a missing table only warns.

        Args:
            database: Database to validate

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        names = database.table_names()
        duplicates = sorted({name for name in names if names.count(name) > 1})
        for name in duplicates:
            errors.append(ValidationError(
                type=ErrorType.MALFORMED_INPUT,
                message=f"Duplicate table name {name!r}",
                location=name
            ))

        for table in database.tables:
            table_errors, table_warnings = ValidationUtils._validate_table(table, set(names))
            errors.extend(table_errors)
            warnings.extend(table_warnings)

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def _validate_table(table, table_names) -> Tuple[List[ValidationError], List[str]]:
        errors = []
        warnings = []

        if not table.name:
            errors.append(ValidationError(
                type=ErrorType.MALFORMED_INPUT,
                message="Table name cannot be empty",
                location="table"
            ))

        width = len(table.columns)
        for index, row in enumerate(table.rows):
            if len(row) > width:
                errors.append(ValidationError(
                    type=ErrorType.MALFORMED_INPUT,
                    message=f"Row {index + 1} of table {table.name!r} has {len(row)} values "
                            f"but only {width} columns",
                    location=table.name
                ))

        if table.primary_key and table.column_index(table.primary_key) is None:
            warnings.append(f"Primary key {table.primary_key!r} of table {table.name!r} is not a column")

        for fk in table.foreign_keys:
            if fk.referenced_table not in table_names:
                warnings.append(
                    f"Foreign key {fk.name!r} of table {table.name!r} references "
                    f"missing table {fk.referenced_table!r}"
                )

        return errors, warnings

"""Core type definitions for SQLON."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Database


class NodeKind(Enum):
    """Enumeration of JSON document node kinds."""
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    DECIMAL = "decimal"
    TEXT = "text"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_scalar(self) -> bool:
        return self not in (NodeKind.ARRAY, NodeKind.OBJECT)


class ObjectCase(Enum):
    """Structural cases for an object node."""
    EMPTY = "empty"
    PRIMITIVES_ONLY = "primitives-only"
    NESTED_ONLY = "nested-only"
    MIXED = "mixed"


class ErrorType(Enum):
    """Enumeration of error types."""
    MALFORMED_INPUT = "malformed-input"
    UNSUPPORTED_SHAPE = "unsupported-shape"
    IO_FAILURE = "io-failure"


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str


@dataclass
class ConversionResult:
    """Result of a converter facade operation."""
    success: bool
    output: str = ""
    table_count: int = 0
    artifacts: Optional[List[str]] = None
    errors: Optional[List[str]] = None


@dataclass
class StepRecord:
    """One executed pipeline step, as written to the step log."""
    time: str
    step: str
    in_bytes: int
    out_bytes: int
    in_sha256: str
    out_sha256: str
    artefact: str
    duration_ms: float = 0.0
    memory_peak_mb: float = 0.0
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "time": self.time,
            "step": self.step,
            "in_bytes": self.in_bytes,
            "out_bytes": self.out_bytes,
            "in_sha256": self.in_sha256,
            "out_sha256": self.out_sha256,
            "artefact": self.artefact,
            "duration_ms": round(self.duration_ms, 3),
            "memory_peak_mb": round(self.memory_peak_mb, 3),
        }
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass
class PipelineResult:
    """Result of a pipeline run."""
    output: bytes
    records: List[StepRecord] = field(default_factory=list)


class ConversionError(Exception):
    """Raised when a conversion cannot be completed."""

    def __init__(self, message: str, error_type: ErrorType,
                 context: Optional[Any] = None, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.error_type = error_type
        self.context = context
        self.line = line


# Abstract base classes for interfaces

class CodecInterface(ABC):
    """Abstract interface for a format codec."""

    #: Short format name used in step names and CLI output.
    name: str = ""

    @abstractmethod
    def decode(self, data: bytes) -> "Database":
        """Decode raw bytes into a Database."""
        pass

    @abstractmethod
    def encode(self, database: "Database") -> bytes:
        """Encode a Database into raw bytes."""
        pass


class NodeProcessorInterface(ABC):
    """Abstract interface for document node processors."""

    @abstractmethod
    def process(self, node: Any, path: str, parent: Optional[Any] = None) -> None:
        """Normalize a document node found at ``path`` into tables."""
        pass


class ErrorHandlerInterface(ABC):
    """Abstract interface for error handling."""

    @abstractmethod
    def validate_input(self, input_data: str) -> ValidationResult:
        """Validate input data."""
        pass

    @abstractmethod
    def handle_conversion_error(self, error: ConversionError) -> ErrorResponse:
        """Handle conversion errors."""
        pass

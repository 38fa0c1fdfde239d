"""
Centralized error handling utilities.

Each layer translates errors to be more useful at the next level up:

- Low level (sounddevice, soundfile, mido) raises library exceptions.
- The audio/midi adapters convert them with `wrap_audio_device_error` and the
  exception types in this package.
- The CLI shows `format_error_for_display` output and exits non-zero.

Batch operations (loading every sample at startup) use `collect_errors` so
that all failures are reported together rather than only the first one:

```python
collector = collect_errors("load samples")
for name, path in config.sample_paths().items():
    with collector.try_operation(f"load {name}"):
        samples[name] = Sample.load(path)

if collector.has_errors:
    raise SetupError(collector.get_summary())
```
"""

import logging
from typing import Optional

from .audio import AudioStreamError
from .base import BeatSamplerError
from .config import ConfigFileInvalidError, ConfigValidationError

logger = logging.getLogger(__name__)


def wrap_pydantic_error(error: Exception, file_path: str) -> BeatSamplerError:
    """
    Convert Pydantic validation errors to beatsampler exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Format: "Invalid JSON: <actual error> [type=json_invalid, ..."
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get('loc', ())) or "config"
            return ConfigValidationError(
                field=field,
                value=first_error.get('input'),
                error_msg=first_error.get('msg', 'validation failed'),
                file_path=file_path,
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ())) or "config"
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=f"{len(errors)} validation errors:\n" + "\n".join(error_lines),
                file_path=file_path,
            )

    return ConfigValidationError(field="unknown", value=None, error_msg=error_msg, file_path=file_path)


def wrap_audio_device_error(
    error: Exception,
    operation: str,
    device_id: Optional[int] = None,
) -> AudioStreamError:
    """
    Convert low-level audio errors (PortAudio, sounddevice) to AudioStreamError.

    Args:
        error: The original exception from the audio library
        operation: Stream operation that failed ("open", "start", "write", ...)
        device_id: The device ID involved in the error

    Returns:
        AudioStreamError carrying the original message
    """
    if isinstance(error, AudioStreamError):
        return error
    return AudioStreamError(operation, original_error=str(error), device_id=device_id)


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, BeatSamplerError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Create an error collector for batch operations.

    Args:
        operation: Description of the overall operation

    Returns:
        ErrorCollector instance
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """
    Collects multiple errors during batch operations.

    Allows operations to continue even if some fail, then
    report all failures at once.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        """Check if any errors were collected."""
        return len(self.errors) > 0

    @property
    def error_count(self) -> int:
        """Get the number of errors collected."""
        return len(self.errors)

    def try_operation(self, sub_operation: str):
        """
        Context manager for a single operation within the batch.

        Only BeatSamplerError is collected; anything else propagates.

        Args:
            sub_operation: Description of this specific operation
        """
        return self._OperationContext(self, sub_operation)

    def get_summary(self) -> str:
        """Get a multi-line summary of collected errors."""
        if not self.has_errors:
            return f"All operations completed successfully ({self.success_count} total)"

        summary = (
            f"Failed to {self.operation}: {self.error_count} of "
            f"{self.error_count + self.success_count} failed\n"
        )
        for sub_op, error in self.errors:
            if isinstance(error, BeatSamplerError):
                summary += f"  - {sub_op}: {error.user_message}\n"
            else:
                summary += f"  - {sub_op}: {error}\n"

        return summary.rstrip()

    class _OperationContext:
        """Internal context manager for individual operations."""

        def __init__(self, collector: "ErrorCollector", sub_operation: str):
            self.collector = collector
            self.sub_operation = sub_operation

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_type is None:
                self.collector.success_count += 1
                return False

            if not isinstance(exc_val, BeatSamplerError):
                return False

            technical = exc_val.technical_message
            logger.error(f"Failed to {self.sub_operation}: {technical}")
            self.collector.errors.append((self.sub_operation, exc_val))
            return True

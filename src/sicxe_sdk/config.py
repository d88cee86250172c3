"""
SIC/XE Assembler - Configuration
================================

Assembler configuration. Values come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line flags (applied by the CLI on top of the environment)
"""

from dataclasses import dataclass
import os


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(value: str) -> bool | None:
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


@dataclass
class AssemblerConfig:
    """
    Configuration for one assembler run.

    Attributes:
        strict_operands: Treat operand count/type mismatches as errors that
            block Pass 2 and object generation (default: False, mismatches
            are only recorded on the statement)
        relative_addressing: Let Pass 2 choose PC-relative or base-relative
            displacements for format 3 instructions (default: False)
        max_errors: Stop collecting after this many errors (default: 100)
        text_record_limit: Maximum hex characters of object code per Text
            record (default: 60, i.e. 30 bytes)
    """

    strict_operands: bool = False
    relative_addressing: bool = False
    max_errors: int = 100
    text_record_limit: int = 60

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            SICXE_STRICT_OPERANDS: "1"/"true" to enable strict operand checks
            SICXE_RELATIVE_ADDRESSING: "1"/"true" to enable PC/base-relative
            SICXE_MAX_ERRORS: Error limit (integer)

        Malformed values are ignored.
        """
        config = cls()

        if strict := os.environ.get("SICXE_STRICT_OPERANDS"):
            parsed = _parse_bool(strict)
            if parsed is not None:
                config.strict_operands = parsed

        if relative := os.environ.get("SICXE_RELATIVE_ADDRESSING"):
            parsed = _parse_bool(relative)
            if parsed is not None:
                config.relative_addressing = parsed

        if max_errors := os.environ.get("SICXE_MAX_ERRORS"):
            try:
                config.max_errors = max(1, int(max_errors))
            except ValueError:
                pass  # Ignore invalid values

        return config

"""Configuration module for the conformance engine.

This module provides the ConformanceConfig class describing the target API
under test, the product used to drive booking flows, execution limits and
logging options. One instance is built per process by the composition root
and passed explicitly to the components that need it.

Example:
    Basic usage::

        >>> config = ConformanceConfig(
        ...     target_base_url="https://api.supplier.example/octo",
        ...     product_id="p-1",
        ...     option_id="DEFAULT",
        ...     unit_ids=["adult", "child"],
        ... )
        >>> config.max_concurrent_scenarios
        4

    Loading from environment:

        >>> import os
        >>> os.environ['CONFORMANCE_TARGET_BASE_URL'] = 'https://api.supplier.example'
        >>> os.environ['CONFORMANCE_UNIT_IDS'] = 'adult,child'
        >>> config = ConformanceConfig.from_env()
"""

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConformanceConfig(BaseModel):
    """Configuration for a conformance run.

    Attributes:
        target_base_url: Base URL of the booking API under test. Must use
            http or https. A trailing slash is removed.
        request_timeout_seconds: Timeout for every call to the target API
            (1-300). There is no retry: a timeout fails the scenario.
        max_concurrent_scenarios: Upper bound on scenarios of one flow running
            at the same time (1-64).
        product_id: Product used by booking flows.
        option_id: Option of that product used by booking flows.
        availability_id: Fixed availability to book. When None the booking
            flows look one up through the availability endpoint.
        unit_ids: Units to put on created bookings. Accepts a list or a
            comma-separated string.
        expiration_minutes: Hold duration requested for reservations.
        reseller_reference_prefix: Prefix of generated reseller references.
        log_level: Log level for structlog output.
        json_logs: Emit JSON logs when True, console logs otherwise.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    target_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the booking API under test",
    )
    request_timeout_seconds: int = Field(
        default=30,
        description="Timeout in seconds for each target API call (1-300)",
    )
    max_concurrent_scenarios: int = Field(
        default=4,
        description="Maximum scenarios of one flow executing concurrently (1-64)",
    )
    product_id: str = Field(default="", description="Product used by booking flows")
    option_id: str = Field(default="DEFAULT", description="Option used by booking flows")
    availability_id: str | None = Field(
        default=None,
        description="Fixed availability id; looked up when not set",
    )
    unit_ids: list[str] | str = Field(
        default=["adult"],
        description="Units to book, list or comma-separated string",
    )
    expiration_minutes: int = Field(
        default=30,
        description="Hold duration requested when creating reservations",
    )
    reseller_reference_prefix: str = Field(
        default="conformance",
        description="Prefix for generated reseller references",
    )
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=True, description="Emit JSON logs")
    session_store: Literal["memory"] = Field(
        default="memory",
        description="Session store backend",
    )

    model_config = {"frozen": True}

    @field_validator("target_base_url")
    @classmethod
    def validate_target_base_url(cls, v: str) -> str:
        """Validate and normalize the target base URL.

        Raises:
            ValueError: If the URL is empty or does not use http(s).

        Example:
            >>> ConformanceConfig(target_base_url="https://api.example/").target_base_url
            'https://api.example'
        """
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"target_base_url must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_request_timeout_seconds(cls, v: int) -> int:
        if not (1 <= v <= 300):
            raise ValueError(f"request_timeout_seconds must be between 1 and 300, got {v}")
        return v

    @field_validator("max_concurrent_scenarios")
    @classmethod
    def validate_max_concurrent_scenarios(cls, v: int) -> int:
        if not (1 <= v <= 64):
            raise ValueError(f"max_concurrent_scenarios must be between 1 and 64, got {v}")
        return v

    @field_validator("expiration_minutes")
    @classmethod
    def validate_expiration_minutes(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"expiration_minutes must be >= 1, got {v}")
        return v

    @field_validator("unit_ids", mode="before")
    @classmethod
    def validate_unit_ids(cls, v: Any) -> list[str]:
        """Validate and normalize unit ids.

        Args:
            v: List of unit ids or comma-separated string.

        Returns:
            List of non-empty, stripped unit ids.

        Raises:
            ValueError: If no unit id remains after normalization.

        Example:
            >>> ConformanceConfig(unit_ids="adult, child").unit_ids
            ['adult', 'child']
        """
        if isinstance(v, str):
            # Handle comma-separated string (from environment variables)
            v = v.split(",")

        if not isinstance(v, list):
            raise ValueError("unit_ids must be a list or comma-separated string")

        unit_ids = [str(unit_id).strip() for unit_id in v if str(unit_id).strip()]
        if not unit_ids:
            raise ValueError("unit_ids must contain at least one unit id")
        return unit_ids

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Valid levels are: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return level

    @classmethod
    def from_env(cls, prefix: str = "CONFORMANCE_") -> "ConformanceConfig":
        """Create configuration from environment variables.

        Variable names are the uppercase field names with the prefix, for
        example ``CONFORMANCE_TARGET_BASE_URL``. Missing variables keep their
        defaults.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            ConformanceConfig populated from the environment.
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "target_base_url": str,
            "request_timeout_seconds": int,
            "max_concurrent_scenarios": int,
            "product_id": str,
            "option_id": str,
            "availability_id": str,
            "unit_ids": list,
            "expiration_minutes": int,
            "reseller_reference_prefix": str,
            "log_level": str,
            "json_logs": bool,
        }

        for field_name, field_type in field_types.items():
            env_var = f"{prefix}{field_name.upper()}"
            env_value = os.environ.get(env_var)

            if env_value is not None:
                if field_type is int:
                    config_dict[field_name] = int(env_value)
                elif field_type is bool:
                    config_dict[field_name] = env_value.strip().lower() in ("1", "true", "yes")
                else:
                    # Lists stay comma-separated strings for the field validator
                    config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ConformanceConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)

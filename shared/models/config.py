from pydantic import BaseModel, Field

from shared.helper.HelperConfig import HelperConfig


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required for a env setting.

    Attributes:
        env_key (str): The key/name of the environment variable to read.
        val_type (str): The expected type of the environment variable's value. Supported types are "string", "number", "bool", and "list".
        default (str | int | bool | list | None): An optional default value if the environment variable is not set. If None, the variable is required and an error will be raised if it is not set.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None


class PollingConfig(BaseModel):
    """
    Backoff and attempt limits for the job status poller.

    All delays are in milliseconds.

    Attributes:
        max_attempts (int): Attempt count at which polling gives up with a timeout.
        error_base_delay_ms (float): First delay after a transient failure.
        error_backoff_factor (float): Growth factor per attempt for transient failures.
        error_max_delay_ms (float): Cap for the transient failure delay.
        processing_base_delay_ms (float): Delay while the job reports "processing" at attempt 0.
        processing_step_ms (float): Linear increase per attempt while "processing".
        processing_max_delay_ms (float): Cap for the "processing" delay.
    """

    max_attempts: int = Field(3000, ge=1)
    error_base_delay_ms: float = Field(5000, ge=0)
    error_backoff_factor: float = Field(1.5, ge=1)
    error_max_delay_ms: float = Field(60000, ge=0)
    processing_base_delay_ms: float = Field(2000, ge=0)
    processing_step_ms: float = Field(500, ge=0)
    processing_max_delay_ms: float = Field(10000, ge=0)

    @classmethod
    def from_helper_config(cls, helper_config: HelperConfig) -> "PollingConfig":
        """Build the polling settings from POLL_* environment variables, falling back to the defaults."""
        defaults = cls()
        return cls(
            max_attempts=int(helper_config.get_number_val("POLL_MAX_ATTEMPTS", default=defaults.max_attempts)),
            error_base_delay_ms=helper_config.get_number_val("POLL_ERROR_BASE_DELAY_MS", default=defaults.error_base_delay_ms),
            error_backoff_factor=helper_config.get_number_val("POLL_ERROR_BACKOFF_FACTOR", default=defaults.error_backoff_factor),
            error_max_delay_ms=helper_config.get_number_val("POLL_ERROR_MAX_DELAY_MS", default=defaults.error_max_delay_ms),
            processing_base_delay_ms=helper_config.get_number_val("POLL_PROCESSING_BASE_DELAY_MS", default=defaults.processing_base_delay_ms),
            processing_step_ms=helper_config.get_number_val("POLL_PROCESSING_STEP_MS", default=defaults.processing_step_ms),
            processing_max_delay_ms=helper_config.get_number_val("POLL_PROCESSING_MAX_DELAY_MS", default=defaults.processing_max_delay_ms),
        )

    def with_max_attempts(self, max_attempts: int) -> "PollingConfig":
        """Copy with another attempt limit, validated like every other field."""
        return self.model_validate({**self.model_dump(), "max_attempts": max_attempts})


class ProgressConfig(BaseModel):
    """
    Shape of the synthetic progress curve.

    Attributes:
        tau_seconds (float): Time constant of the saturating exponential.
        max_percent (int): Ceiling the estimate never exceeds.
    """

    tau_seconds: float = Field(180, gt=0)
    max_percent: int = Field(95, ge=0, le=100)

    @classmethod
    def from_helper_config(cls, helper_config: HelperConfig) -> "ProgressConfig":
        defaults = cls()
        return cls(
            tau_seconds=helper_config.get_number_val("PROGRESS_TAU_SECONDS", default=defaults.tau_seconds),
            max_percent=int(helper_config.get_number_val("PROGRESS_MAX_PERCENT", default=defaults.max_percent)),
        )

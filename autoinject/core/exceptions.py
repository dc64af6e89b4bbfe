"""Custom exception hierarchy for the injector.

Env var conflicts are not exceptions: they are reported through
MergeResult / InjectionResult. These types cover configuration and
manifest problems only.
"""


class InjectorError(Exception):
    """Base exception for all injector errors.

    All custom exceptions inherit from this, allowing:
        try:
            ...
        except InjectorError as e:
            # Handle any injector-specific error
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(InjectorError):
    """Error in configuration.

    Raised when the instrumentation configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that caused the error
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(f"Configuration error: {message}", details)
        self.config_key = config_key


class UnknownRuntimeError(ConfigError):
    """Requested runtime has no registered profile.

    Attributes:
        runtime: The runtime name that was requested
        available: Names of the registered runtimes
    """

    def __init__(self, runtime: str, available: list[str] | None = None):
        self.runtime = runtime
        self.available = sorted(available or [])
        super().__init__(
            f"Unknown runtime: {runtime}. Available: {self.available}",
            config_key=runtime,
        )


class ManifestError(InjectorError):
    """Error decoding or encoding a pod manifest.

    Attributes:
        source: File path (or "-" for stdin) the manifest came from
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(f"Manifest error: {message}", details)
        self.source = source

"""Exception types raised by sitepipe tasks."""


class SitepipeError(Exception):
    """Base class for errors that fail a task without crashing the process."""


class ConfigError(SitepipeError):
    """package.json or sitepipe.yaml is missing or malformed."""


class VendorSyncError(SitepipeError):
    """One or more vendor dependencies could not be copied."""

    def __init__(self, failures: dict[str, str]):
        self.failures = failures
        names = ", ".join(sorted(failures))
        super().__init__(f"vendor sync failed for: {names}")


class StyleBuildError(SitepipeError):
    """One or more SCSS sources failed to compile."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(f"{len(errors)} stylesheet(s) failed to compile")


class ScriptBuildError(SitepipeError):
    """One or more script sources could not be read as UTF-8."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(f"{len(errors)} script(s) could not be read")


class TaskFailed(SitepipeError):
    """A composite task failed because one of its steps failed."""

    def __init__(self, task: str, failed_steps: list[str]):
        self.task = task
        self.failed_steps = failed_steps
        super().__init__(f"{task}: failed step(s): {', '.join(failed_steps)}")

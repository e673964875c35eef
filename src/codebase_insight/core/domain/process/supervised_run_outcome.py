from dataclasses import dataclass

# Exit code reported when the child could not be started at all (shell convention).
SPAWN_FAILED_EXIT_CODE = 127


@dataclass(frozen=True)
class SupervisedRunOutcome:
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool
    elapsed_seconds: float = 0.0
    spawn_error: bool = False

    @property
    def spawn_failed(self) -> bool:
        return self.spawn_error

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.spawn_error

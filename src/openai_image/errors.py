"""Error types surfaced to the CLI entrypoint."""

from __future__ import annotations

from collections.abc import Sequence


class ImageCliError(Exception):
    """Fatal error that ends the run with exit status 1.

    Attributes:
        message: Primary diagnostic, printed after ``error:``.
        details: Extra diagnostic lines (e.g. provider status and message).
        hint: Optional remediation text printed last.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Sequence[str] = (),
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details)
        self.hint = hint

    def lines(self) -> list[str]:
        output = [f"error: {self.message}"]
        output.extend(self.details)
        if self.hint:
            output.append(self.hint)
        return output


class InputError(ImageCliError):
    """Raised before any network call when the invocation is unusable."""


class MissingPromptError(InputError):
    def __init__(self, prompt_file: str | None = None) -> None:
        message = "prompt is required"
        if prompt_file:
            message = f"prompt file {prompt_file} is empty"
        super().__init__(message, hint="Use --help for usage information")
        self.prompt_file = prompt_file


class PromptFileError(InputError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"unable to read prompt file {path}: {reason}",
            hint="Check that --prompt-file points to a readable text file",
        )
        self.path = path


class MissingCredentialError(InputError):
    def __init__(self, env_name: str) -> None:
        super().__init__(
            f"{env_name} environment variable is not set",
            hint=f"Please set your OpenAI API key: export {env_name}=your-key-here",
        )


class GenerationError(ImageCliError):
    """Raised when the generation call fails or yields no images."""


__all__ = [
    "GenerationError",
    "ImageCliError",
    "InputError",
    "MissingCredentialError",
    "MissingPromptError",
    "PromptFileError",
]

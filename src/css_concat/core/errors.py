from __future__ import annotations


class ConcatError(RuntimeError):
    """Base error"""


class InputError(ConcatError, ValueError):
    """
    Caller-supplied options are unusable (no stylesheets, bad source map mode,
    non-callable plugin). Raised before any I/O.
    """


class StylesheetSyntaxError(ConcatError):
    """
    A stylesheet could not be parsed. Not retried.
    """

    def __init__(
        self,
        *,
        reference: str,
        line: int,
        column: int,
        reason: str,
        excerpt: str,
    ) -> None:
        msg = f"CSS syntax error: {reference}:{line}:{column}: {reason}"
        if excerpt:
            msg += "\n" + excerpt
        super().__init__(msg)
        self.reference = reference
        self.line = line
        self.column = column
        self.reason = reason
        self.excerpt = excerpt


class SourceUnavailableError(ConcatError):
    """
    Network or filesystem failure while loading a stylesheet.
    The underlying exception is kept as __cause__.
    """

    def __init__(
        self, *, reference: str, reason: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"Cannot load stylesheet {reference}: {reason}")
        self.reference = reference
        self.reason = reason
        self.status_code = status_code


class TransformError(ConcatError):
    """A transform step failed or misbehaved"""


class AssetNotFoundError(TransformError):
    """
    A url() reference points at an asset that cannot be read or downloaded
    """

    def __init__(self, *, reference: str, url: str, location: str) -> None:
        super().__init__(
            f"Cannot localize asset {url!r} referenced from {reference} "
            f"(looked at {location})"
        )
        self.reference = reference
        self.url = url
        self.location = location


class WriteError(ConcatError):
    """Persisting the output or the source map sidecar failed"""

    def __init__(self, *, path: str, reason: str) -> None:
        super().__init__(f"Cannot write {path}: {reason}")
        self.path = path
        self.reason = reason

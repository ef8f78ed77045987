"""Exceptions for plugin pack operations."""


class PackError(Exception):
    """Base exception for plugin pack errors."""
    
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
    
    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class ManifestError(PackError):
    """Raised when the plugin manifest cannot be read, parsed or written."""
    pass


class EditorError(PackError):
    """Raised when the host editor cannot be queried for its packpath."""
    
    def __init__(
        self,
        message: str,
        path: str | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message, path)
        self.returncode = returncode
        self.stderr = stderr
    
    def __str__(self) -> str:
        parts = [self.message]
        if self.returncode is not None:
            parts.append(f"(returncode: {self.returncode})")
        if self.stderr:
            parts.append(f"(stderr: {self.stderr[:200]})")
        return " ".join(parts)


class FetchError(PackError):
    """Raised when a plugin archive cannot be downloaded."""
    
    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
    
    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"(url: {self.url})")
        if self.status_code is not None:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class ArchiveError(PackError):
    """Raised when a plugin archive is invalid or unsafe to extract."""
    pass

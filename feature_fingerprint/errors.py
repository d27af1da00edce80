from __future__ import annotations


class FeatureFingerprintError(Exception):
    """Base class for errors raised by feature_fingerprint."""


class MissingFeatureHeader(FeatureFingerprintError):
    """A candidate feature file has no ``Feature:`` line."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"file '{path}' does not contain Feature:")


class FeatureEncodingError(FeatureFingerprintError):
    """A feature file is not valid UTF-8."""

    def __init__(self, path: str, error: UnicodeDecodeError):
        self.path = path
        super().__init__(f"file '{path}' is not valid UTF-8 (byte {error.start}: {error.reason})")


class ReportFormatError(FeatureFingerprintError):
    """A report file could not be read back into feature records."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid report '{path}': {reason}")

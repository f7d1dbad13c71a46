"""
CSV import configuration settings.

Limits and defaults for the statement import pipeline. Values can be tuned
through environment variables without code changes.
"""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ImportConfig:
    """Configuration class for statement import limits and storage locations."""

    # Upload Limits
    max_file_bytes: int = 5 * 1024 * 1024  # Largest statement accepted, in bytes
    max_rows: int = 5000  # Most data rows accepted from one file

    # Persistence
    commit_batch_size: int = 25  # DynamoDB batch_writer chunk size

    # Storage
    import_bucket: str = "arthaflow-dev-file-storage"

    def __post_init__(self):
        if self.max_file_bytes <= 0:
            raise ValueError("max_file_bytes must be positive")
        if self.max_rows <= 0:
            raise ValueError("max_rows must be positive")
        if not 1 <= self.commit_batch_size <= 25:
            raise ValueError("commit_batch_size must be between 1 and 25")

    @classmethod
    def from_environment(cls) -> 'ImportConfig':
        """
        Create configuration from environment variables with fallback to defaults.

        Environment variables:
        - IMPORT_MAX_FILE_BYTES
        - IMPORT_MAX_ROWS
        - IMPORT_COMMIT_BATCH_SIZE
        - S3_IMPORT_BUCKET (falls back to FILE_STORAGE_BUCKET)
        """
        return cls(
            max_file_bytes=int(os.getenv('IMPORT_MAX_FILE_BYTES', 5 * 1024 * 1024)),
            max_rows=int(os.getenv('IMPORT_MAX_ROWS', 5000)),
            commit_batch_size=int(os.getenv('IMPORT_COMMIT_BATCH_SIZE', 25)),
            import_bucket=os.getenv(
                'S3_IMPORT_BUCKET',
                os.getenv('FILE_STORAGE_BUCKET', 'arthaflow-dev-file-storage')
            ),
        )


def get_import_config() -> ImportConfig:
    """Get import configuration from the environment."""
    return ImportConfig.from_environment()

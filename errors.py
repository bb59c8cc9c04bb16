# errors.py


class SegmentationError(Exception):
    """Base class for every error raised by the segmentation pipeline."""


class SchemaError(SegmentationError, ValueError):
    """Input table is missing columns or holds unparseable values."""


class CategoryError(SchemaError):
    """A categorical column holds a value outside its declared levels."""

    def __init__(self, column, bad_values, n_rows):
        self.column = column
        self.bad_values = list(bad_values)
        self.n_rows = n_rows
        super().__init__(
            f"Column '{column}' has {n_rows} row(s) with undeclared values: {self.bad_values}"
        )


class DegenerateInputError(SegmentationError, ValueError):
    """Feature matrix cannot support the requested clustering."""


class ExportError(SegmentationError, OSError):
    """Output target could not be written."""


class ConfigError(SegmentationError, ValueError):
    """Invalid pipeline configuration."""

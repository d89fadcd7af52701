# meshview/mesh/errors.py
from __future__ import annotations


class VtkError(Exception):
    """Base class for every failure raised by the mesh pipeline."""


class LoadError(VtkError):
    """The model file could not be read or parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Load VTK file error: {message}")
        self.detail = message


class VtkParseError(LoadError):
    """Syntax error in a legacy VTK file."""

    def __init__(self, message: str, line: int | None = None) -> None:
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"{message}{where}")
        self.line = line


class InvalidFormat(VtkError):
    """Structurally valid input that this operation cannot accept."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid VTK format: {detail}")
        self.detail = detail


class CellBufferMismatch(InvalidFormat):
    """Declared cell count disagrees with the flat vertex-index buffer."""


class UnsupportedDataType(VtkError):
    """Recognised but unimplemented case (cell type, element type, order)."""

    def __init__(self, detail: str = "") -> None:
        msg = "Unsupported data type"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.detail = detail


class MissingData(VtkError):
    """A required section is absent."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Missing data: {what}")
        self.what = what


class IndexOutOfBounds(VtkError):
    def __init__(self, index: int, max: int) -> None:
        super().__init__(f"Index out of bounds: {index} (max is {max})")
        self.index = index
        self.max = max


class DataTypeMismatch(VtkError):
    def __init__(self, expected: str, found: str) -> None:
        super().__init__(
            f"Data type mismatch: expected {expected}, found {found}"
        )
        self.expected = expected
        self.found = found


class AttributeMismatch(VtkError):
    def __init__(self, attribute_size: int, expected_size: int) -> None:
        super().__init__(
            f"Attribute size mismatch: attribute size {attribute_size}, "
            f"expected {expected_size}"
        )
        self.attribute_size = attribute_size
        self.expected_size = expected_size


class ConversionError(VtkError):
    """Numeric cast or reshaping of a raw buffer failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Conversion error: {message}")
        self.detail = message


class VtkIOError(VtkError):
    """Wraps an OSError raised while touching the filesystem."""

    def __init__(self, error: OSError) -> None:
        super().__init__(f"IO error: {error}")
        self.error = error

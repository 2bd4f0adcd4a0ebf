"""Exceptions raised by the gene registry importers and store."""


class GeneRegistryError(Exception):
    """Base exception for all gene registry errors."""
    pass


class ParseError(GeneRegistryError):
    """Malformed numeric field or structurally short record in an input file."""

    def __init__(self, message: str, filename: str = "", record_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.record_number = record_number

    def __str__(self):
        if self.filename and self.record_number:
            return f"Parse error in {self.filename} at record {self.record_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class StoreError(GeneRegistryError):
    """Failure reported by the gene store (constraint violation or I/O)."""
    pass

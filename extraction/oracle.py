"""
Abstract interface for document-understanding services.
"""
from abc import ABC, abstractmethod


class ExtractionOracle(ABC):
    """
    Converts PDF bytes into the model's raw text answer.

    Implementations raise ExtractionFailure when no usable text comes back.
    Interpreting the text is left to extraction.response_parser.
    """

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """
        Send a PDF to the service.

        Args:
            pdf_bytes: Raw contents of the uploaded PDF

        Returns:
            Text response expected to contain a JSON object
        """
        pass

    def is_available(self) -> bool:
        """Check whether the service can be called."""
        return True

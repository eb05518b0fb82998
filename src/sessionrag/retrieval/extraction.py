"""
Document discovery and text extraction.

PDFs go through the poppler ``pdftotext`` binary; plain-text formats are read
directly. Any failure surfaces as an ExtractionError for the whole document.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Protocol

from sessionrag.config import settings
from sessionrag.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PLAIN_TEXT_EXTENSIONS = frozenset({".txt", ".md", ".markdown", ".rst"})


class TextExtractor(Protocol):
    """Protocol for anything that turns a document file into text."""

    def __call__(self, path: Path) -> str:
        ...


def discover_documents(folder: Path, extensions: Iterable[str]) -> list[Path]:
    """
    Recursively find document files under a folder.

    Args:
        folder: Directory to search
        extensions: Accepted suffixes, matched case-insensitively

    Returns:
        Sorted list of matching file paths
    """
    wanted = {ext.lower() for ext in extensions}
    documents = [
        path
        for path in folder.rglob("*")
        if path.is_file() and path.suffix.lower() in wanted
    ]
    documents.sort()
    return documents


class DocumentTextExtractor:
    """
    Extract text from PDFs and plain-text files.

    Example:
        >>> extract = DocumentTextExtractor()
        >>> text = extract(Path("docs/manual.pdf"))
    """

    def __init__(self, pdftotext_path: Optional[str] = None, timeout: float = 300.0) -> None:
        """
        Args:
            pdftotext_path: pdftotext executable (default from settings)
            timeout: Seconds allowed for one pdftotext run
        """
        self.pdftotext_path = pdftotext_path or settings.pdftotext_path
        self.timeout = timeout

    def __call__(self, path: Path) -> str:
        return self.extract_text(path)

    def extract_text(self, path: Path) -> str:
        """
        Extract the text of one document.

        Args:
            path: Document file

        Returns:
            Extracted text

        Raises:
            ExtractionError: If the file cannot be read or converted
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in PLAIN_TEXT_EXTENSIONS:
            return self._read_plain_text(path)
        if suffix == ".pdf":
            return self._run_pdftotext(path)

        raise ExtractionError(f"Unsupported document type: {path.name}", path=path)

    def _read_plain_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ExtractionError(f"Failed to read {path}: {e}", path=path) from e

    def _run_pdftotext(self, path: Path) -> str:
        executable = shutil.which(self.pdftotext_path)
        if executable is None:
            raise ExtractionError(
                f"'{self.pdftotext_path}' not found; install poppler-utils to ingest PDFs",
                path=path,
            )

        logger.debug(f"Running pdftotext on {path}")
        try:
            # "-" writes the text to stdout
            result = subprocess.run(
                [executable, "-enc", "UTF-8", str(path), "-"],
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise ExtractionError(f"pdftotext failed for {path}: {stderr}", path=path) from e
        except subprocess.TimeoutExpired as e:
            raise ExtractionError(
                f"pdftotext timed out after {self.timeout}s for {path}", path=path
            ) from e
        except OSError as e:
            raise ExtractionError(f"Could not run pdftotext for {path}: {e}", path=path) from e

        return result.stdout.decode("utf-8", errors="replace")


def extract_text(path: Path) -> str:
    """Extract text with the default extractor."""
    return DocumentTextExtractor()(path)

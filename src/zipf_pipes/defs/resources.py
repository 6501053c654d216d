from pathlib import Path

import dagster as dg

from zipf_pipes import transform
from zipf_pipes.extract import ACCEPTED_FILE_TYPES
from zipf_pipes.models import LoadedDocument


class DocumentStore(dg.ConfigurableResource):
    """Directory of documents waiting to be analyzed.

    Wraps the pure Python reader functions with the Dagster resource pattern.
    Any supported file dropped in the directory becomes a partition.
    Defaults to XDG_DATA_HOME/zipf-pipes/documents.
    """

    documents_dir: str

    def _get_path(self, name: str) -> Path:
        """Get the path of a document, refusing names outside the directory."""
        if Path(name).name != name or name in ("", ".", ".."):
            raise ValueError(f"Invalid document name: {name}")
        return Path(self.documents_dir) / name

    def list_documents(self) -> list[str]:
        """List the names of all supported documents, sorted."""
        base_path = Path(self.documents_dir)
        if not base_path.exists():
            return []
        return sorted(
            path.name
            for path in base_path.iterdir()
            if path.is_file() and path.suffix.lower() in ACCEPTED_FILE_TYPES
        )

    def read_document(self, name: str) -> LoadedDocument:
        """Read a document and compute its word counts.

        Raises:
            FileNotFoundError: If the document does not exist.
            ValueError: If the document cannot be read.
        """
        path = self._get_path(name)

        if not path.exists():
            raise FileNotFoundError(
                f"Document not found: {path}. Add the file to {self.documents_dir}."
            )

        return transform.read_document(
            name, path.read_bytes(), modified=path.stat().st_mtime
        )

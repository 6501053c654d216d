import json
from pathlib import Path

import dagster as dg

from zipf_pipes.export import result_from_dict, result_to_dict
from zipf_pipes.models import AnalysisResult


def analysis_path(storage_dir: str | Path, document: str) -> Path:
    """Get the JSON file holding the analysis of a document."""
    return Path(storage_dir) / f"{document}.json"


class AnalysisJsonIOManager(dg.ConfigurableIOManager):
    """I/O Manager that stores analysis results as local JSON files.

    Each partitioned analysis is stored as {storage_dir}/{document}.json,
    readable by any consumer without further computation.
    Defaults to XDG_DATA_HOME/zipf-pipes/analysis.
    """

    storage_dir: str

    def _get_path(self, context: dg.OutputContext | dg.InputContext) -> Path:
        """Get file path for an analysis partition."""
        if not context.has_partition_key:
            raise ValueError("AnalysisJsonIOManager requires partitioned assets")

        base_path = Path(self.storage_dir)
        base_path.mkdir(parents=True, exist_ok=True)
        return analysis_path(base_path, context.partition_key)

    def handle_output(self, context: dg.OutputContext, obj: AnalysisResult):
        """Save an analysis result to a JSON file."""
        path = self._get_path(context)
        path.write_text(
            json.dumps(result_to_dict(obj), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        context.log.info(f"Stored analysis at {path}")

    def load_input(self, context: dg.InputContext) -> AnalysisResult:
        """Load an analysis result from a JSON file."""
        path = self._get_path(context)

        if not path.exists():
            raise FileNotFoundError(
                f"Analysis file not found: {path}. "
                "Materialize the asset first."
            )

        context.log.info(f"Loaded analysis from {path}")
        return result_from_dict(json.loads(path.read_text(encoding="utf-8")))

from pathlib import Path

from dagster import Definitions, load_from_defs_folder

from zipf_pipes.config import ANALYSIS_DIR, DOCUMENTS_DIR
from zipf_pipes.defs.io_managers import AnalysisJsonIOManager
from zipf_pipes.defs.resources import DocumentStore


def _load_definitions() -> Definitions:
    """Load definitions from the defs folder, with our resources bound."""
    loaded = load_from_defs_folder(path_within_project=Path(__file__).parent)

    return Definitions(
        assets=loaded.assets,
        asset_checks=loaded.asset_checks,
        schedules=loaded.schedules,
        sensors=loaded.sensors,
        jobs=loaded.jobs,
        resources={
            **(loaded.resources or {}),
            "analysis_json_io": AnalysisJsonIOManager(storage_dir=str(ANALYSIS_DIR)),
            "document_store": DocumentStore(documents_dir=str(DOCUMENTS_DIR)),
        },
    )


defs = _load_definitions()

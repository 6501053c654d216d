import os
from pathlib import Path

# We store files relative to the XDG Base Directory specification
XDG_DATA = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

# The root is the data directory, which contains an inbox for documents to
# analyze and subdirectories for the results we produce from them.
DATA_ROOT = XDG_DATA / "zipf-pipes"
DATA_ROOT.mkdir(parents=True, exist_ok=True)

DOCUMENTS_DIR = DATA_ROOT / "documents"
DOCUMENTS_DIR.mkdir(parents=True, exist_ok=True)

ANALYSIS_DIR = DATA_ROOT / "analysis"
ANALYSIS_DIR.mkdir(parents=True, exist_ok=True)

EXPORTS_DIR = DATA_ROOT / "exports"
EXPORTS_DIR.mkdir(parents=True, exist_ok=True)

# Number of most frequent words kept for bar chart style summaries
TOP_N_WORDS = 20

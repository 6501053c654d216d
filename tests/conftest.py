import os
import tempfile

# Keep the data directory created on import out of the user's home
os.environ.setdefault("XDG_DATA_HOME", tempfile.mkdtemp(prefix="zipf-pipes-tests-"))

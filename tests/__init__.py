import os
import tempfile

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("MIV_LOG_DIR", tempfile.mkdtemp(prefix="miv_logs_"))

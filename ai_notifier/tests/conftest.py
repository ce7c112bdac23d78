"""
Pytest configuration for notifier tests.

Points the log and scratch directories at a temporary directory before the
package is imported, so tests never write to the real home or /tmp state.
"""
import os
import tempfile

_tmp_root = tempfile.mkdtemp(prefix="ai-notifier-tests-")
os.environ.setdefault("AI_NOTIFIER_DATA_DIR", os.path.join(_tmp_root, "data"))
os.environ.setdefault("AI_NOTIFIER_SCRATCH_DIR", os.path.join(_tmp_root, "scratch"))
os.environ.setdefault("AI_NOTIFIER_ICON_DIR", os.path.join(_tmp_root, "icons"))

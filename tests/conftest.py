"""
Pytest configuration for gcurve tests.
Adds the src directory to sys.path so that test imports work without an install.
"""
import sys
from pathlib import Path

# Add src to the path so imports like 'from gcurve.curves import ...' work
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Make 'from test_fixtures...' importable from the unit tests
tests_path = Path(__file__).parent
if str(tests_path) not in sys.path:
    sys.path.insert(0, str(tests_path))

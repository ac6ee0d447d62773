import os
import sys

import pytest

# Ensure the 'src' directory is in the python path so we can import todoscope
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from todoscope.analysis.line_analyzer import LineAnalyzer  # noqa: E402


@pytest.fixture(scope="session")
def analyzer():
    """One shared analyzer, the same way the engine shares it across files."""
    return LineAnalyzer()

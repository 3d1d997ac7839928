"""
Redirect file for Streamlit Cloud compatibility.
Streamlit Cloud deployments expect app.py as the entry point; the actual
page lives in Welcome.py.
"""

import sys
import os

# Ensure the current directory is in the path
sys.path.insert(0, os.path.dirname(__file__))

import Welcome  # noqa: F401,E402

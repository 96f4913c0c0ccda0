# tests/conftest.py
import os
import sys

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

fx_deals_common_path = os.path.join(project_root, 'src', 'libs', 'fx-deals-common')
if fx_deals_common_path not in sys.path:
    sys.path.insert(0, fx_deals_common_path)

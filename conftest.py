"""Configure test suite environment"""
import os
import sys

# Add the project root directory to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

os.environ.setdefault('POWERTOOLS_TRACE_DISABLED', 'true')
os.environ.setdefault('POWERTOOLS_SERVICE_NAME', 'cyclefuel')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')

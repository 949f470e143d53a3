"""Pytest configuration for all tests."""

import os
import tempfile

import constants

# A developer's shell settings must not point the tests at a real CMS
for var in ('CMS_URL', 'PAGE_LIMIT', 'CMS_TIMEOUT', 'FLASK_ENV', 'FLASK_SECRET_KEY'):
    os.environ.pop(var, None)

constants.init_testing(log_dir=tempfile.mkdtemp(prefix='inkwell-test-logs-'))

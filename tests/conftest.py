"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed diagcache package.
"""

import pytest

from diagcache.kernel.commands import CommandConfig
from diagcache.kernel.document import Document


@pytest.fixture
def document(tmp_path):
    """Document scope rooted at a temporary docdir."""
    return Document({"docdir": str(tmp_path)})


@pytest.fixture
def command_config():
    """Fresh run-scoped command cache."""
    return CommandConfig()

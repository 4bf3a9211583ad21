"""Test package structure and imports."""

import sys
from pathlib import Path


def test_package_import():
    """Test that the rtxconf package can be imported."""
    import rtxconf

    assert hasattr(rtxconf, "__version__")
    assert rtxconf.__version__ == "0.1.0"


def test_public_api():
    import rtxconf

    for name in rtxconf.__all__:
        assert hasattr(rtxconf, name)


def test_main_module_calls_cli():
    """Test that __main__ module calls cli.main()."""
    import rtxconf.__main__

    content = Path(rtxconf.__main__.__file__).read_text()
    assert "from rtxconf.cli import main" in content
    assert "main()" in content


def test_cli_module_import():
    import rtxconf.cli

    assert callable(rtxconf.cli.main)


def test_no_missing_dependencies():
    """Test that all imports work without missing dependencies."""
    try:
        import jsonschema  # noqa: F401
        import networkx  # noqa: F401
        import numpy  # noqa: F401
        import yaml  # noqa: F401

        import rtxconf.factory  # noqa: F401
        import rtxconf.network  # noqa: F401

    except ImportError as e:
        import pytest

        pytest.fail(f"Missing required dependency: {e}")


def test_python_version_compatibility():
    """Test that package works with supported Python versions."""
    assert sys.version_info >= (3, 11), "Package requires Python 3.11+"

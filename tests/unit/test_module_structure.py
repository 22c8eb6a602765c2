"""Test package layout."""
from pathlib import Path

PACKAGE = Path(__file__).parent.parent.parent / "src" / "scopeguard"


def test_init_py_has_version():
    """Test that __init__.py has __version__ attribute."""
    content = (PACKAGE / "__init__.py").read_text()
    assert "__version__" in content, "__init__.py should define __version__"


def test_main_py_entry_point():
    """Test that __main__.py exists and imports main."""
    main_py = PACKAGE / "__main__.py"

    assert main_py.is_file(), f"__main__.py should exist at {main_py}"
    assert "from scopeguard import main" in main_py.read_text()


def test_py_typed_exists():
    """Test that py.typed marker exists."""
    assert (PACKAGE / "py.typed").is_file()


def test_subpackages_present():
    for name in ("cli", "config", "core", "observability", "providers", "questionnaire"):
        assert (PACKAGE / name / "__init__.py").is_file(), f"missing subpackage {name}"


def test_module_can_be_imported():
    """Test that scopeguard module can be imported."""
    import scopeguard
    assert hasattr(scopeguard, "__version__")
    assert hasattr(scopeguard, "main")

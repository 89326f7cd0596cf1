"""Smoke tests to verify package imports work."""

def test_package_imports():
    """Test that all main classes can be imported."""
    from noonshift import (ObliquityController, ChartAdapter, AnimationDriver,
                           PlotlyRenderer, ObliquityApp)
    assert ObliquityController is not None
    assert ChartAdapter is not None
    assert AnimationDriver is not None
    assert PlotlyRenderer is not None
    assert ObliquityApp is not None

def test_version_exists():
    """Test that version is defined."""
    import noonshift
    assert hasattr(noonshift, '__version__')
    assert noonshift.__version__ == "0.1.0"

def test_all_exports_resolve():
    """Every name in __all__ is importable."""
    import noonshift
    for name in noonshift.__all__:
        assert hasattr(noonshift, name), name

def test_can_compute_discrepancy():
    """Test basic discrepancy computation."""
    from noonshift import compute_discrepancy
    result = compute_discrepancy(23.4, 0, 365)
    assert result.minutes == 0.0

def test_can_create_app():
    """Test basic application creation."""
    from noonshift import ObliquityApp
    app = ObliquityApp()
    assert app.controller.num_days == 16

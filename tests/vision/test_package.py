"""
Tests for the vision package namespace
"""

import importlib
import types

import pytest

import pixelflow.vision as vision


class TestSubmodules:
    """Test that package attributes resolve to the filter modules"""

    @pytest.mark.parametrize(
        "name",
        ["aperture", "blur", "border", "edge_detection", "flood_fill", "morphology", "threshold"],
    )
    def test_attribute_is_module(self, name):
        """Re-exports never rebind a submodule name"""
        module = importlib.import_module(f"pixelflow.vision.{name}")
        assert isinstance(getattr(vision, name), types.ModuleType)
        assert getattr(vision, name) is module

    def test_import_as_alias(self):
        """`from pixelflow.vision import morphology` yields the module"""
        from pixelflow.vision import morphology as morph

        assert callable(morph.dilate)
        assert callable(morph.apply_morphology)

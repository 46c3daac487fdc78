"""
Core modules for Pixel Flow: colors, geometry, storage and the Image view.
"""

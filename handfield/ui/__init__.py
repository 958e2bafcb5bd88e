"""OpenCV presentation layer."""

"""FarmLink test suite."""

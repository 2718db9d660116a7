"""Console-script wrappers for the trending-keyword pipeline."""

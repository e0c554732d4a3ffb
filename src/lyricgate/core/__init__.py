"""Core lyrics, upload and quota logic."""

"""Provider configuration tables for canvasform."""

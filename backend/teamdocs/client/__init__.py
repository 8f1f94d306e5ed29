"""Command-line client: snapshot state, text views and README sync."""

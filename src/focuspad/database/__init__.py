"""Local persistence for FocusPad."""

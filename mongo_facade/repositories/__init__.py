"""repositories subpackage."""

"""db subpackage."""

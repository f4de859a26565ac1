"""Core domains for runecache."""

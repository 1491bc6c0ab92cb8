"""Print-ready page rendering."""

"""Django project package for bedwatch."""

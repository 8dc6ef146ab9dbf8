"""Process exit codes for the ontoquery CLI."""

OK = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
COMPILATION_ERROR = 3

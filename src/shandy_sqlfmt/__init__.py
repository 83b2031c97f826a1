"""
shandy-sqlfmt - locate, validate and run the sqlfmt formatter.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

__version__ = "0.1.0"

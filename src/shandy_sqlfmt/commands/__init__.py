"""
CLI subcommands for shandy-sqlfmt.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

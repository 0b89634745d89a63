"""
Configuration constants to replace magic strings throughout jsrename
"""

import os
import tempfile

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "jsrename_es5_parser.cache")
DEFAULT_SOURCE_FILE = "main.js"

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"

# Synthetic bindings used by type inference. The "@" prefix cannot occur in
# a JavaScript identifier, so these never collide with user names.
THIS_BINDING = "@this"
RETURN_BINDING = "@return"
ARRAY_ELEMENT_PROPERTY = "@array"
COMPUTED_PROPERTY_KEY = "@prty-of"
ARGUMENTS_BINDING = "arguments"
UNDEFINED_NAME = "undefined"
# Reading this property marks the object as a constructor
PROTOTYPE_PROPERTY = "prototype"

# Quote characters skipped when a string-literal key becomes a rename range
STRING_QUOTE_DELTA = 1

# Classification results exposed by the buffer API
KIND_LOCAL = "local"
KIND_GLOBAL = "global"
KIND_PROPERTY = "property"
KIND_LABEL = "label"

# Display constants for the dump CLI
GROUP_SEPARATOR_CHAR = "-"
GROUP_SEPARATOR_WIDTH = 16

# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Error subcode constants for structured broker errors."""

# Parse subcodes
PARSE_FILE_NOT_FOUND = "parse_file_not_found"
PARSE_FILE_UNREADABLE = "parse_file_unreadable"
PARSE_MALFORMED = "parse_malformed"
PARSE_EMPTY_DOCUMENT = "parse_empty_document"

# Schema subcodes
SCHEMA_UNMAPPED_TYPE = "schema_unmapped_type"
SCHEMA_DISCOVERY_FAILED = "schema_discovery_failed"
SCHEMA_TABLE_HAS_NO_COLUMNS = "schema_table_has_no_columns"

# Execution subcodes
EXECUTION_UNKNOWN_ENTITY = "execution_unknown_entity"
EXECUTION_UNKNOWN_METHOD = "execution_unknown_method"
EXECUTION_MISSING_REQUIRED_INPUT = "execution_missing_required_input"
EXECUTION_TYPE_COERCION = "execution_type_coercion"

# Validation subcodes
VALIDATION_MISSING_CONFIGURATION = "validation_missing_configuration"
VALIDATION_UNKNOWN_PROPERTY = "validation_unknown_property"
VALIDATION_INPUT_COUNT_MISMATCH = "validation_input_count_mismatch"
VALIDATION_INVALID_TYPE_MAPPING = "validation_invalid_type_mapping"
VALIDATION_DUPLICATE_PROPERTY = "validation_duplicate_property"
VALIDATION_INACTIVE_ENTITY = "validation_inactive_entity"

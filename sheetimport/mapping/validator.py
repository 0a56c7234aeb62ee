from typing import List, Sequence

from sheetimport.ir import ColumnSchema, FieldValidationError, ParsedRow, ValidationResult


def validate_rows(rows: Sequence[ParsedRow], schema: ColumnSchema) -> ValidationResult:
    """
    Check every required column of every row.

    One error is emitted per empty required value; the whole batch is always
    scanned and nothing is raised.
    """
    errors: List[FieldValidationError] = []
    required = schema.required_columns

    for index, row in enumerate(rows):
        for col in required:
            value = row.get(col.key)
            if value is None or str(value).strip() == "":
                errors.append(
                    FieldValidationError(
                        row_index=index,
                        column_key=col.key,
                        column_label=col.label,
                        message=f'Row {index + 1}: Missing required field "{col.label}"',
                    )
                )

    return ValidationResult(is_valid=not errors, errors=errors)

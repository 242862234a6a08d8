from sheetsift.infrastructure.io.workbook import (
    create_output_workbook,
    read_sheets,
    sheet_title,
    workbook_to_bytes,
)

__all__ = ["create_output_workbook", "read_sheets", "sheet_title", "workbook_to_bytes"]

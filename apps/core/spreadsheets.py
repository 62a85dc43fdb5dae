"""
openpyxl helpers shared by every screen that hands out a workbook
"""
from django.http import HttpResponse

from openpyxl.styles import Font, PatternFill

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="667eea", end_color="667eea", fill_type="solid")
TITLE_FONT = Font(bold=True, size=12)


def write_header(worksheet, headers, row=1, freeze=True):
    for col, header in enumerate(headers, start=1):
        cell = worksheet.cell(row=row, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    if freeze:
        worksheet.freeze_panes = worksheet.cell(row=row + 1, column=1)


def adjust_widths(worksheet, minimum=10, maximum=50):
    for column in worksheet.columns:
        lengths = [len(str(cell.value)) for cell in column if cell.value is not None]
        width = max(lengths, default=0) + 2
        worksheet.column_dimensions[column[0].column_letter].width = min(max(width, minimum), maximum)


def workbook_response(workbook, filename):
    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    workbook.save(response)
    return response
